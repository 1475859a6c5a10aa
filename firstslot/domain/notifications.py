"""
OTP notification dispatch.

Delivery runs after the OTP is persisted and is never allowed to fail the
request that issued it: every outcome is logged and absorbed here.
"""

import asyncio
import logging

from .exceptions import NotificationError
from .ports import EmailSender

logger = logging.getLogger(__name__)


async def dispatch_otp(
    sender: EmailSender, email: str, name: str, code: str, timeout: float
) -> bool:
    """
    Send the OTP email with a bounded timeout.

    Returns:
        True if the provider accepted the message, False otherwise
    """
    try:
        await asyncio.wait_for(sender.send_otp(email, name, code), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("OTP email to %s timed out after %.1fs", email, timeout)
        return False
    except NotificationError as e:
        logger.warning("OTP email to %s failed: %s", email, e)
        return False
    except Exception:
        logger.exception("Unexpected error sending OTP email to %s", email)
        return False

    logger.info("OTP email sent to %s", email)
    return True
