"""
Domain layer - Pure business logic with zero framework imports.

This package contains the gated registration workflow: OTP issuance,
signup decision rules, and the slot-limited confirmation. It defines its
own port interfaces so storage and email delivery stay swappable.
"""

from .exceptions import (
    AlreadyVerifiedError,
    DuplicateEmailError,
    DuplicateError,
    DuplicateMobileError,
    InvalidOtpError,
    NotificationError,
    RegistrationError,
    SlotsExhaustedError,
    UserNotFoundError,
)
from .notifications import dispatch_otp
from .otp import OtpGenerator
from .ports import ConfirmResult, ConfirmStatus, EmailSender, User, UserRepository
from .registration import OtpIssued, RegistrationService, SlotStatus

__all__ = [
    "AlreadyVerifiedError",
    "ConfirmResult",
    "ConfirmStatus",
    "DuplicateEmailError",
    "DuplicateError",
    "DuplicateMobileError",
    "EmailSender",
    "InvalidOtpError",
    "NotificationError",
    "OtpGenerator",
    "OtpIssued",
    "RegistrationError",
    "RegistrationService",
    "SlotStatus",
    "SlotsExhaustedError",
    "User",
    "UserNotFoundError",
    "UserRepository",
    "dispatch_otp",
]
