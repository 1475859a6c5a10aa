"""
One-time passcode generation and validation.

Codes are fixed-length decimal strings drawn from the secrets module and
kept as strings to preserve leading zeros. A code is valid until the
current time passes its expiry timestamp.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from .ports import User, utcnow


def otp_matches(
    stored_code: str | None,
    expires_at: datetime | None,
    submitted: str,
    now: datetime,
) -> bool:
    """
    Check a submitted code against stored OTP state.

    Uses constant-time comparison for the code itself.
    """
    if not stored_code or expires_at is None:
        return False
    if now > expires_at:
        return False
    return secrets.compare_digest(stored_code.encode(), submitted.encode())


@dataclass(frozen=True)
class OtpGenerator:
    """Issues and checks numeric one-time passcodes."""

    length: int = 6
    ttl: timedelta = timedelta(minutes=10)

    def generate(self, now: datetime | None = None) -> tuple[str, datetime]:
        """Return a new (code, expires_at) pair."""
        now = now or utcnow()
        code = "".join(secrets.choice("0123456789") for _ in range(self.length))
        return code, now + self.ttl

    def issue(self, user: User, now: datetime | None = None) -> str:
        """
        Generate a code and store it on the user.

        The caller is responsible for persisting the user afterwards.
        """
        code, expires_at = self.generate(now)
        user.otp_code = code
        user.otp_expires_at = expires_at
        return code

    def verify(self, user: User, submitted: str, now: datetime | None = None) -> bool:
        """True only if the user holds an unexpired code equal to `submitted`."""
        return otp_matches(user.otp_code, user.otp_expires_at, submitted, now or utcnow())
