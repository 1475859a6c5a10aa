"""
Brevo email sender adapter - Implements EmailSender protocol.

Sends OTP emails through the Brevo transactional email HTTP API.
Any non-201 answer or transport failure is raised as NotificationError.
"""

import asyncio
import logging

import aiohttp

from firstslot.domain.exceptions import NotificationError

logger = logging.getLogger(__name__)

_SUBJECT = "Your OTP for {sender_name}"

_HTML_BODY = """\
<!DOCTYPE html>
<html>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
    <h2>Hello {name}</h2>
    <p>Your OTP is:</p>
    <h1 style="letter-spacing: 5px; font-family: 'Courier New', monospace;">{code}</h1>
    <p>This OTP expires in {ttl_minutes} minutes.</p>
    <p style="color: #888; font-size: 12px;">{sender_name}</p>
</body>
</html>
"""

_TEXT_BODY = """\
Hello {name}

Your OTP is: {code}

This OTP expires in {ttl_minutes} minutes.

---
{sender_name}
"""


class BrevoEmailSender:
    """
    Implements EmailSender protocol via the Brevo HTTP API.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        api_key: str,
        sender_email: str,
        sender_name: str,
        ttl_minutes: int,
        api_url: str = "https://api.brevo.com/v3/smtp/email",
        timeout: float = 10.0,
    ) -> None:
        self._api_key = api_key
        self._sender_email = sender_email
        self._sender_name = sender_name
        self._ttl_minutes = ttl_minutes
        self._api_url = api_url
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    def build_payload(self, email: str, name: str, code: str) -> dict:
        """Build the Brevo send request body."""
        fields = {
            "name": name,
            "code": code,
            "ttl_minutes": self._ttl_minutes,
            "sender_name": self._sender_name,
        }
        return {
            "sender": {"name": self._sender_name, "email": self._sender_email},
            "to": [{"email": email, "name": name}],
            "subject": _SUBJECT.format(**fields),
            "htmlContent": _HTML_BODY.format(**fields),
            "textContent": _TEXT_BODY.format(**fields),
        }

    async def send_otp(self, email: str, name: str, code: str) -> None:
        headers = {
            "api-key": self._api_key,
            "accept": "application/json",
            "content-type": "application/json",
        }
        payload = self.build_payload(email, name, code)

        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.post(self._api_url, json=payload, headers=headers) as response:
                    if response.status != 201:
                        body = await response.text()
                        raise NotificationError(
                            f"Brevo API error {response.status}: {body}"
                        )
                    result = await response.json()
        except asyncio.TimeoutError as e:
            raise NotificationError(
                f"Brevo API timed out after {self._timeout.total}s"
            ) from e
        except aiohttp.ClientError as e:
            raise NotificationError(f"Brevo API unreachable: {e}") from e

        logger.debug("Brevo accepted OTP email, message_id=%s", result.get("messageId"))
