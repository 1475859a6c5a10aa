"""
Auth routes.

Defines REST endpoints for gated registration. Domain errors raised by the
service are rendered by the handlers in ``firstslot.api.errors``.

OTP emails are sent as background tasks after the OTP is stored, so a
slow or failing email provider never affects the response.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Response, status

from firstslot.api.dependencies import get_email_sender, get_registration_service
from firstslot.api.models import (
    CheckLimitResponse,
    ErrorResponse,
    RegisterRequest,
    RegisterResponse,
    ResendOtpRequest,
    ResendOtpResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from firstslot.config.settings import Settings, get_settings
from firstslot.domain.notifications import dispatch_otp
from firstslot.domain.ports import EmailSender
from firstslot.domain.registration import OtpIssued, RegistrationService

router = APIRouter(tags=["auth"])


def _schedule_otp_email(
    background_tasks: BackgroundTasks,
    sender: EmailSender,
    issued: OtpIssued,
    settings: Settings,
) -> None:
    background_tasks.add_task(
        dispatch_otp,
        sender,
        issued.email,
        issued.name,
        issued.code,
        settings.email_timeout_seconds,
    )


@router.get(
    "/check-limit",
    response_model=CheckLimitResponse,
    summary="Check whether all access slots are taken",
)
def check_limit(
    service: RegistrationService = Depends(get_registration_service),
) -> CheckLimitResponse:
    slots = service.check_limit()
    return CheckLimitResponse(
        limit_reached=slots.limit_reached,
        verified_count=slots.verified_count,
        max_users=slots.max_users,
    )


@router.post(
    "/register",
    response_model=RegisterResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses={
        200: {"model": RegisterResponse, "description": "Pending user, OTP resent"},
        400: {"model": ErrorResponse, "description": "Validation failed or duplicate"},
    },
    summary="Register a new user",
    description="Submit name, email, mobile and password. "
    "A one-time passcode is emailed to the provided address.",
)
def register(
    request_data: RegisterRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    service: RegistrationService = Depends(get_registration_service),
    sender: EmailSender = Depends(get_email_sender),
    settings: Settings = Depends(get_settings),
) -> RegisterResponse:
    """
    Register a user and send an OTP.

    Registering again with the email of a pending user resends the OTP
    for that same user and answers 200 instead of 201.
    """
    issued = service.register(
        request_data.name,
        request_data.email,
        request_data.mobile,
        request_data.password,
    )
    _schedule_otp_email(background_tasks, sender, issued, settings)

    if issued.resent:
        response.status_code = status.HTTP_200_OK
        message = "OTP resent to your email"
    else:
        message = "Registration successful! OTP sent to your email"

    return RegisterResponse(
        message=message,
        user_id=str(issued.user_id),
        otp=issued.code if settings.expose_otp else None,
    )


@router.post(
    "/verify-otp",
    response_model=VerifyOtpResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid OTP or already verified"},
        403: {"model": ErrorResponse, "description": "All access slots are taken"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
    summary="Verify OTP and claim an access slot",
)
def verify_otp(
    request_data: VerifyOtpRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> VerifyOtpResponse:
    registration_order = service.verify_otp(request_data.user_id, request_data.otp)
    return VerifyOtpResponse(
        message="You claimed the free access. You can close this window now.",
        registration_order=registration_order,
    )


@router.post(
    "/resend-otp",
    response_model=ResendOtpResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse, "description": "User already verified"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
    summary="Resend the OTP email",
)
def resend_otp(
    request_data: ResendOtpRequest,
    background_tasks: BackgroundTasks,
    service: RegistrationService = Depends(get_registration_service),
    sender: EmailSender = Depends(get_email_sender),
    settings: Settings = Depends(get_settings),
) -> ResendOtpResponse:
    issued = service.resend_otp(request_data.user_id)
    _schedule_otp_email(background_tasks, sender, issued, settings)
    return ResendOtpResponse(
        message="OTP resent successfully",
        otp=issued.code if settings.expose_otp else None,
    )
