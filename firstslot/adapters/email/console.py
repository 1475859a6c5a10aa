"""
Console email sender adapter - Implements EmailSender protocol.

Logs OTP codes instead of sending them. Used when no email provider
API key is configured.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    async def send_otp(self, email: str, name: str, code: str) -> None:
        logger.info("[OTP] Email: %s Name: %s Code: %s", email, name, code)
