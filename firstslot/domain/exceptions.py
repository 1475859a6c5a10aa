"""
Domain exceptions - Semantic error types for registration.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Each carries the human-readable message shown to the client.
"""


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    message = "Registration failed"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class DuplicateError(RegistrationError):
    """Email or mobile number already belongs to another record."""

    def __init__(self, message: str | None = None, *, verified: bool = False) -> None:
        self.verified = verified
        super().__init__(message)


class DuplicateEmailError(DuplicateError):
    """Email is already registered."""

    def __init__(self, *, verified: bool = False) -> None:
        if verified:
            message = "This email is already registered and verified"
        else:
            message = "This email is already registered"
        super().__init__(message, verified=verified)


class DuplicateMobileError(DuplicateError):
    """Mobile number is already registered."""

    def __init__(self, *, verified: bool = False) -> None:
        if verified:
            message = "This mobile number is already registered and verified"
        else:
            message = "This mobile number is already registered"
        super().__init__(message, verified=verified)


class UserNotFoundError(RegistrationError):
    message = "User not found"


class AlreadyVerifiedError(RegistrationError):
    message = "User is already verified"


class InvalidOtpError(RegistrationError):
    """Code mismatch, missing code, or expired code."""

    message = "Invalid or expired OTP"


class SlotsExhaustedError(RegistrationError):
    """
    All access slots were taken when the user confirmed.

    Terminal: the user's record has already been deleted.
    """

    message = "Sorry you are late. All the free access slots have been filled."


class NotificationError(Exception):
    """
    OTP email could not be delivered.

    Not a RegistrationError: delivery failures are logged by the dispatcher
    and never reach the HTTP error handlers.
    """

    def __init__(self, message: str = "Failed to send OTP email") -> None:
        self.message = message
        super().__init__(message)
