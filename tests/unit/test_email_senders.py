"""
Unit tests for email sender adapters.

Tests verify both senders implement the EmailSender protocol, the console
sender's log format, the Brevo request payload, and how Brevo answers
and transport failures become NotificationError.
"""

import asyncio
import logging

import pytest
from aiohttp import test_utils, web

from firstslot.adapters.email import BrevoEmailSender, ConsoleEmailSender
from firstslot.domain.exceptions import NotificationError
from firstslot.domain.ports import EmailSender


def make_brevo(**overrides) -> BrevoEmailSender:
    fields = {
        "api_key": "test-key",
        "sender_email": "no-reply@firstslot.dev",
        "sender_name": "firstslot",
        "ttl_minutes": 10,
    }
    fields.update(overrides)
    return BrevoEmailSender(**fields)


def send_via_fake_brevo(
    status: int, body: dict, delay: float = 0.0, timeout: float = 5.0
) -> tuple[list[dict], Exception | None]:
    """
    Run send_otp against a local aiohttp app standing in for Brevo.

    Returns the captured requests and the exception send_otp raised, if any.
    """
    captured: list[dict] = []

    async def handler(request: web.Request) -> web.Response:
        captured.append(
            {"api_key": request.headers.get("api-key"), "json": await request.json()}
        )
        if delay:
            await asyncio.sleep(delay)
        return web.json_response(body, status=status)

    async def run() -> Exception | None:
        app = web.Application()
        app.router.add_post("/v3/smtp/email", handler)
        async with test_utils.TestServer(app) as server:
            sender = make_brevo(
                api_url=str(server.make_url("/v3/smtp/email")), timeout=timeout
            )
            try:
                await sender.send_otp("ann@example.com", "Ann", "123456")
            except NotificationError as e:
                return e
        return None

    error = asyncio.run(run())
    return captured, error


class TestProtocol:
    @pytest.mark.parametrize("sender_cls", [ConsoleEmailSender, BrevoEmailSender])
    def test_no_explicit_inheritance(self, sender_cls: type) -> None:
        """Senders use structural subtyping, not inheritance."""
        assert sender_cls.__bases__ == (object,)

    def test_senders_satisfy_protocol(self) -> None:
        def accepts_email_sender(s: EmailSender) -> None:
            assert callable(s.send_otp)

        accepts_email_sender(ConsoleEmailSender())
        accepts_email_sender(make_brevo())


class TestConsoleEmailSender:
    def test_logs_otp(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO):
            asyncio.run(ConsoleEmailSender().send_otp("ann@example.com", "Ann", "042042"))

        assert len(caplog.records) == 1
        assert caplog.records[0].levelno == logging.INFO
        assert "[OTP]" in caplog.text
        assert "Email: ann@example.com" in caplog.text
        assert "Code: 042042" in caplog.text

    def test_returns_none(self) -> None:
        result = asyncio.run(ConsoleEmailSender().send_otp("ann@example.com", "Ann", "1"))
        assert result is None


class TestBrevoPayload:
    def test_sender_and_recipient(self) -> None:
        payload = make_brevo().build_payload("ann@example.com", "Ann", "123456")

        assert payload["sender"] == {"name": "firstslot", "email": "no-reply@firstslot.dev"}
        assert payload["to"] == [{"email": "ann@example.com", "name": "Ann"}]
        assert payload["subject"] == "Your OTP for firstslot"

    def test_bodies_contain_name_code_and_validity(self) -> None:
        payload = make_brevo().build_payload("ann@example.com", "Ann", "123456")

        for body in (payload["htmlContent"], payload["textContent"]):
            assert "Hello Ann" in body
            assert "123456" in body
            assert "expires in 10 minutes" in body


class TestBrevoSend:
    def test_accepted_message(self) -> None:
        captured, error = send_via_fake_brevo(201, {"messageId": "<abc@brevo>"})

        assert error is None
        assert len(captured) == 1
        assert captured[0]["api_key"] == "test-key"
        assert captured[0]["json"]["to"] == [{"email": "ann@example.com", "name": "Ann"}]

    def test_rejected_message_raises_notification_error(self) -> None:
        captured, error = send_via_fake_brevo(400, {"code": "invalid_parameter"})

        assert len(captured) == 1
        assert captured[0]["api_key"] == "test-key"
        assert isinstance(error, NotificationError)
        assert "400" in str(error)
        assert "invalid_parameter" in str(error)

    def test_timeout_raises_notification_error(self) -> None:
        _, error = send_via_fake_brevo(201, {}, delay=1.0, timeout=0.1)

        assert isinstance(error, NotificationError)
        assert "timed out" in str(error)

    def test_unreachable_provider_raises_notification_error(self) -> None:
        sender = make_brevo(api_url="http://127.0.0.1:1/v3/smtp/email", timeout=2.0)

        with pytest.raises(NotificationError) as exc_info:
            asyncio.run(sender.send_otp("ann@example.com", "Ann", "123456"))

        assert "unreachable" in str(exc_info.value)
