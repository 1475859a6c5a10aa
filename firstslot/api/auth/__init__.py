"""
Auth API package.

Contains the signup, OTP verification, and slot status routes.
"""

from firstslot.api.auth.routes import router

__all__ = ["router"]
