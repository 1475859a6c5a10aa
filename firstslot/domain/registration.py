"""
Registration domain service - gated signup with OTP confirmation.

This module contains the core business logic: signup, OTP resend, and
the "first N wins" confirmation that hands out a limited number of
access slots.

Registration Decision Rules
===========================

Evaluated in order against the existing record matching the submitted
email or mobile (the email match wins when both exist):

1. No record                         -> create unverified user, issue OTP
2. Verified, email matches           -> DuplicateEmailError(verified)
3. Verified, only mobile matches     -> DuplicateMobileError(verified)
4. Unverified, email matches         -> reissue OTP on the same record
5. Unverified, only mobile matches   -> DuplicateMobileError

A mobile-only match on an unverified record is rejected rather than
offered a resend.

Slot Claim
==========

Confirmation is delegated to the repository, which verifies the OTP and
claims a slot in a single transaction (row lock + atomic
increment-and-compare on the slot counter). A user confirming after the
limit was reached has their record deleted.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

import bcrypt

from .exceptions import (
    AlreadyVerifiedError,
    DuplicateEmailError,
    DuplicateMobileError,
    InvalidOtpError,
    SlotsExhaustedError,
    UserNotFoundError,
)
from .otp import OtpGenerator
from .ports import ConfirmStatus, User, UserRepository, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OtpIssued:
    """A persisted OTP that still has to be delivered."""

    user_id: UUID
    email: str
    name: str
    code: str
    expires_at: datetime
    resent: bool = False


@dataclass(frozen=True)
class SlotStatus:
    verified_count: int
    max_users: int

    @property
    def limit_reached(self) -> bool:
        return self.verified_count >= self.max_users


@dataclass
class RegistrationService:
    """
    Domain service for gated registration.

    Orchestrates signup, OTP reissue and confirmation. Email delivery is
    left to the caller so it can run after the response without ever
    failing the workflow.
    """

    repository: UserRepository
    otp: OtpGenerator
    max_users: int
    bcrypt_rounds: int = 10

    def register(self, name: str, email: str, mobile: str, password: str) -> OtpIssued:
        """
        Register a new user or reissue the OTP of a pending one.

        Raises:
            DuplicateEmailError: email belongs to a verified user
            DuplicateMobileError: mobile belongs to another user
        """
        name = name.strip()
        email = self._normalize_email(email)
        mobile = mobile.strip()

        existing = self._pick_existing(
            self.repository.find_by_email_or_mobile(email, mobile), email
        )

        if existing is None:
            user = User(
                name=name,
                email=email,
                mobile=mobile,
                password_hash=self._hash_password(password),
            )
            code = self.otp.issue(user)
            # Raises Duplicate*Error if a concurrent signup won the insert
            self.repository.insert(user)
            logger.info("Registered user %s", user.id)
            return OtpIssued(
                user_id=user.id,
                email=user.email,
                name=user.name,
                code=code,
                expires_at=user.otp_expires_at,
            )

        if existing.is_verified:
            if existing.email == email:
                raise DuplicateEmailError(verified=True)
            raise DuplicateMobileError(verified=True)

        if existing.email == email:
            logger.info("Reissuing OTP for pending user %s", existing.id)
            return self._reissue(existing, greet_as=name)

        raise DuplicateMobileError()

    def verify_otp(self, user_id: str | UUID, otp: str) -> int:
        """
        Confirm a user's OTP and claim an access slot.

        Returns:
            The user's registration order (0-indexed rank among verified users)

        Raises:
            UserNotFoundError, AlreadyVerifiedError, InvalidOtpError,
            SlotsExhaustedError
        """
        uid = self._parse_user_id(user_id)
        user = self._get_pending(uid)

        now = utcnow()
        if not self.otp.verify(user, otp, now):
            raise InvalidOtpError()

        result = self.repository.confirm_verification(uid, otp, self.max_users, now)

        if result.status == ConfirmStatus.CONFIRMED:
            logger.info("User %s claimed slot %d", uid, result.registration_order)
            return result.registration_order
        if result.status == ConfirmStatus.SLOTS_EXHAUSTED:
            logger.info("User %s confirmed after slots ran out, record removed", uid)
            raise SlotsExhaustedError()
        # Lost a race with a concurrent request for the same user
        if result.status == ConfirmStatus.ALREADY_VERIFIED:
            raise AlreadyVerifiedError()
        if result.status == ConfirmStatus.NOT_FOUND:
            raise UserNotFoundError()
        raise InvalidOtpError()

    def resend_otp(self, user_id: str | UUID) -> OtpIssued:
        """
        Issue a fresh OTP for a pending user.

        Raises:
            UserNotFoundError, AlreadyVerifiedError
        """
        user = self._get_pending(self._parse_user_id(user_id))
        return self._reissue(user)

    def check_limit(self) -> SlotStatus:
        return SlotStatus(
            verified_count=self.repository.verified_count(), max_users=self.max_users
        )

    def _reissue(self, user: User, greet_as: str | None = None) -> OtpIssued:
        """Store a fresh OTP; `greet_as` overrides the stored name in the email."""
        code = self.otp.issue(user)
        if not self.repository.save_otp(user.id, code, user.otp_expires_at):
            # Verified or deleted since it was read
            self._get_pending(user.id)
            raise AlreadyVerifiedError()
        return OtpIssued(
            user_id=user.id,
            email=user.email,
            name=greet_as or user.name,
            code=code,
            expires_at=user.otp_expires_at,
            resent=True,
        )

    def _get_pending(self, user_id: UUID) -> User:
        user = self.repository.get(user_id)
        if user is None:
            raise UserNotFoundError()
        if user.is_verified:
            raise AlreadyVerifiedError()
        return user

    @staticmethod
    def _pick_existing(candidates: list[User], email: str) -> User | None:
        for user in candidates:
            if user.email == email:
                return user
        return candidates[0] if candidates else None

    @staticmethod
    def _parse_user_id(user_id: str | UUID) -> UUID:
        if isinstance(user_id, UUID):
            return user_id
        try:
            return UUID(str(user_id))
        except ValueError:
            raise UserNotFoundError() from None

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()

    def _hash_password(self, password: str) -> str:
        return bcrypt.hashpw(
            password.encode(), bcrypt.gensalt(rounds=self.bcrypt_rounds)
        ).decode()
