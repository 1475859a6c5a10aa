"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Field names are camelCase on the wire.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(ApiModel):
    """Request model for user registration."""

    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2)] = Field(
        ..., description="Display name (min 2 characters)"
    )
    email: EmailStr
    mobile: str = Field(..., pattern=r"^[0-9]{10}$", description="10-digit mobile number")
    password: str = Field(..., min_length=8, description="User password (min 8 characters)")


class RegisterResponse(ApiModel):
    """Response model for registration and registration-time OTP resend."""

    success: bool = True
    message: str
    user_id: str
    otp: str | None = Field(default=None, description="Only present in development/test")


class VerifyOtpRequest(ApiModel):
    user_id: str = Field(..., min_length=1)
    otp: str = Field(..., min_length=1)


class VerifyOtpResponse(ApiModel):
    success: bool = True
    message: str
    registration_order: int


class ResendOtpRequest(ApiModel):
    user_id: str = Field(..., min_length=1)


class ResendOtpResponse(ApiModel):
    success: bool = True
    message: str
    otp: str | None = Field(default=None, description="Only present in development/test")


class CheckLimitResponse(ApiModel):
    success: bool = True
    limit_reached: bool
    verified_count: int
    max_users: int


class HealthResponse(ApiModel):
    success: bool = True
    message: str
    timestamp: str


class ErrorResponse(ApiModel):
    """Uniform error response model."""

    success: bool = False
    message: str
    errors: list[dict] | None = None
    limit_reached: bool | None = None
