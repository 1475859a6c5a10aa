"""Unit tests for application settings."""

import pytest

from firstslot.config.settings import Settings


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MAX_USERS", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        settings = Settings(_env_file=None)

        assert settings.max_users == 50
        assert settings.otp_length == 6
        assert settings.otp_ttl_minutes == 10
        assert settings.expose_otp is False

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_USERS", "3")
        monkeypatch.setenv("OTP_TTL_MINUTES", "2")

        settings = Settings(_env_file=None)

        assert settings.max_users == 3
        assert settings.otp_ttl_minutes == 2

    @pytest.mark.parametrize(
        ("environment", "expose", "development"),
        [("development", True, True), ("test", True, False), ("production", False, False)],
    )
    def test_environment_flags(self, environment: str, expose: bool, development: bool) -> None:
        settings = Settings(environment=environment, _env_file=None)

        assert settings.expose_otp is expose
        assert settings.is_development is development

    def test_cors_origins_default_to_any(self) -> None:
        assert Settings(_env_file=None).cors_origin_list == ["*"]

    def test_cors_origins_split_on_commas(self) -> None:
        settings = Settings(
            cors_origins="https://a.example.com, https://b.example.com", _env_file=None
        )
        assert settings.cors_origin_list == ["https://a.example.com", "https://b.example.com"]
