"""Email adapters - OTP delivery implementations."""

from .brevo import BrevoEmailSender
from .console import ConsoleEmailSender

__all__ = ["BrevoEmailSender", "ConsoleEmailSender"]
