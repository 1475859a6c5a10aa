"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the user entity and the interfaces (ports) that the
domain requires from infrastructure. Adapters implement these protocols.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol
from uuid import UUID, uuid4


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class User:
    """
    User identity and verification state.

    Lifecycle:
    - created unverified by registration, with an OTP issued
    - OTP reissued by registration or resend while unverified
    - verified with a registration order, or deleted when the slot
      limit was already reached at confirmation time
    """

    name: str
    email: str
    mobile: str
    password_hash: str
    id: UUID = field(default_factory=uuid4)
    is_verified: bool = False
    otp_code: str | None = None
    otp_expires_at: datetime | None = None
    registration_order: int | None = None
    created_at: datetime = field(default_factory=utcnow)


class ConfirmStatus(Enum):
    """Outcome of the atomic verify-and-claim-slot operation."""

    CONFIRMED = "confirmed"
    SLOTS_EXHAUSTED = "slots_exhausted"
    ALREADY_VERIFIED = "already_verified"
    INVALID_OTP = "invalid_otp"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ConfirmResult:
    status: ConfirmStatus
    registration_order: int | None = None


class UserRepository(Protocol):
    """Port interface for user persistence."""

    def get(self, user_id: UUID) -> User | None:
        """Fetch a user by id, or None if absent."""
        ...

    def find_by_email_or_mobile(self, email: str, mobile: str) -> list[User]:
        """Return every record whose email or mobile matches (at most two)."""
        ...

    def insert(self, user: User) -> None:
        """
        Insert a new user.

        Raises:
            DuplicateEmailError: email uniqueness constraint violated
            DuplicateMobileError: mobile uniqueness constraint violated
        """
        ...

    def save_otp(self, user_id: UUID, code: str, expires_at: datetime) -> bool:
        """
        Store a freshly issued OTP on an unverified user.

        Returns:
            True if the user exists and is still unverified
        """
        ...

    def confirm_verification(
        self, user_id: UUID, code: str, max_users: int, now: datetime
    ) -> ConfirmResult:
        """
        Verify the OTP and claim an access slot as one serialized operation.

        Implementations must lock the user row, re-check the OTP, and
        atomically increment-and-compare the verified-slot counter so that
        two concurrent confirmations can never both take the last slot.

        Return values by scenario:
        - CONFIRMED: user verified, OTP cleared, registration_order set to
          the number of users verified before this one
        - SLOTS_EXHAUSTED: limit already reached, user record deleted
        - ALREADY_VERIFIED / NOT_FOUND / INVALID_OTP: nothing changed
        """
        ...

    def verified_count(self) -> int:
        """Number of users currently holding a verified slot."""
        ...


class EmailSender(Protocol):
    """Port interface for OTP email delivery."""

    async def send_otp(self, email: str, name: str, code: str) -> None:
        """
        Deliver the OTP to the user's email address.

        Raises:
            NotificationError: provider rejected the message or was unreachable
        """
        ...
