"""
Unit tests for OTP notification dispatch.

Delivery failures of every kind are absorbed and logged; dispatch never
raises into the caller.
"""

import asyncio
import logging

import pytest

from firstslot.domain.exceptions import NotificationError, RegistrationError
from firstslot.domain.notifications import dispatch_otp
from tests.fakes import RecordingEmailSender


class SlowEmailSender:
    async def send_otp(self, email: str, name: str, code: str) -> None:
        await asyncio.sleep(5)


class TestDispatchOtp:
    def test_successful_delivery_returns_true(self) -> None:
        sender = RecordingEmailSender()

        delivered = asyncio.run(dispatch_otp(sender, "ann@example.com", "Ann", "123456", 1.0))

        assert delivered is True
        assert sender.sent == [("ann@example.com", "Ann", "123456")]

    def test_provider_failure_is_absorbed(self, caplog: pytest.LogCaptureFixture) -> None:
        sender = RecordingEmailSender(error=NotificationError("Brevo API error 401"))

        with caplog.at_level(logging.WARNING):
            delivered = asyncio.run(
                dispatch_otp(sender, "ann@example.com", "Ann", "123456", 1.0)
            )

        assert delivered is False
        assert len(sender.sent) == 1
        assert "Brevo API error 401" in caplog.text

    def test_timeout_is_absorbed(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            delivered = asyncio.run(
                dispatch_otp(SlowEmailSender(), "ann@example.com", "Ann", "123456", 0.05)
            )

        assert delivered is False
        assert "timed out" in caplog.text

    def test_unexpected_error_is_absorbed(self, caplog: pytest.LogCaptureFixture) -> None:
        sender = RecordingEmailSender(error=RuntimeError("boom"))

        with caplog.at_level(logging.ERROR):
            delivered = asyncio.run(
                dispatch_otp(sender, "ann@example.com", "Ann", "123456", 1.0)
            )

        assert delivered is False
        assert "Unexpected error" in caplog.text


class TestNotificationError:
    def test_not_a_request_error(self) -> None:
        """Delivery failures never match the HTTP registration error handler."""
        assert not issubclass(NotificationError, RegistrationError)

    def test_default_message(self) -> None:
        assert NotificationError().message == "Failed to send OTP email"
