"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, Request
from psycopg_pool import ConnectionPool

from firstslot.adapters.email import BrevoEmailSender, ConsoleEmailSender
from firstslot.adapters.repository.postgres import PostgresUserRepository
from firstslot.config.settings import Settings, get_settings
from firstslot.domain.otp import OtpGenerator
from firstslot.domain.ports import EmailSender, UserRepository
from firstslot.domain.registration import RegistrationService


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_user_repository(pool: ConnectionPool = Depends(get_pool)) -> UserRepository:
    """Create repository with connection pool from app state."""
    return PostgresUserRepository(pool)


@lru_cache
def _build_email_sender(
    api_key: str, sender_email: str, sender_name: str, ttl_minutes: int, api_url: str, timeout: float
) -> EmailSender:
    if not api_key:
        return ConsoleEmailSender()
    return BrevoEmailSender(
        api_key=api_key,
        sender_email=sender_email,
        sender_name=sender_name,
        ttl_minutes=ttl_minutes,
        api_url=api_url,
        timeout=timeout,
    )


def get_email_sender(settings: Settings = Depends(get_settings)) -> EmailSender:
    """
    Get the OTP email sender.

    Brevo when an API key is configured, console logging otherwise.
    """
    return _build_email_sender(
        settings.brevo_api_key,
        settings.email_from_address,
        settings.email_from_name,
        settings.otp_ttl_minutes,
        settings.brevo_api_url,
        settings.email_timeout_seconds,
    )


def get_registration_service(
    repository: UserRepository = Depends(get_user_repository),
    settings: Settings = Depends(get_settings),
) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repository and OTP policy for the domain service.
    """
    otp = OtpGenerator(
        length=settings.otp_length,
        ttl=timedelta(minutes=settings.otp_ttl_minutes),
    )
    return RegistrationService(
        repository=repository,
        otp=otp,
        max_users=settings.max_users,
        bcrypt_rounds=settings.bcrypt_cost,
    )
