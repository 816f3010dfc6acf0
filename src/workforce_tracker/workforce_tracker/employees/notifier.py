from __future__ import annotations

import logging
from datetime import datetime
from typing import Protocol

from ..core.enums import Role

logger = logging.getLogger(__name__)


class ResetCodeNotifier(Protocol):
    """Delivers a password reset code to its owner (mail, SMS, ...)."""

    def send_reset_code(self, *, role: Role, user_id: int, recipient: str, otp: str, expires_at: datetime) -> None:
        raise NotImplementedError


class LoggingResetCodeNotifier(ResetCodeNotifier):
    """Default notifier: no mail transport is configured, so the code only reaches the log.

    The code itself is written at DEBUG level only.
    """

    def send_reset_code(self, *, role: Role, user_id: int, recipient: str, otp: str, expires_at: datetime) -> None:
        logger.info("Password reset code issued for %s %s (%s), valid until %s", role.value, user_id, recipient, expires_at)
        logger.debug("Reset code for %s %s: %s", role.value, user_id, otp)
