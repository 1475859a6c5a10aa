"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory repository and recording email sender (see tests/fakes.py)
- Settings tuned for fast API tests
"""

import pytest

from firstslot.config.settings import Settings
from tests.fakes import InMemoryUserRepository, RecordingEmailSender


@pytest.fixture
def memory_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def test_settings() -> Settings:
    """Settings for API tests: OTP echoed, small slot limit, fast bcrypt."""
    return Settings(
        environment="test",
        max_users=2,
        bcrypt_cost=4,
        brevo_api_key="",
        _env_file=None,
    )
