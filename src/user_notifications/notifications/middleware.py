"""Behaviours run before a channel handler sends.

A middleware is a callable ``(user, notification, proceed)``. It calls
``proceed()`` to continue the chain; returning ``False`` without
proceeding skips the delivery.
"""

import logging
import time
from typing import Any, Callable, Sequence

from ..core.users import NotifiableUser

logger = logging.getLogger(__name__)

Middleware = Callable[[NotifiableUser, Any, Callable[[], Any]], Any]


def run_pipeline(middleware: Sequence[Middleware], user: NotifiableUser, notification: Any,
                 final: Callable[[], Any]) -> Any:
    """Run ``final`` wrapped by ``middleware``, outermost first."""
    def call(index: int) -> Any:
        if index == len(middleware):
            return final()
        return middleware[index](user, notification, lambda: call(index + 1))

    return call(0)


def require_email(user: NotifiableUser, notification: Any, proceed: Callable[[], Any]) -> Any:
    """Skip users without a contact address."""
    if not user.notification_email():
        logger.warning(f"User {user.get_key()!r} has no email, skipping {notification!r}")
        return False
    return proceed()


class LogDelivery:
    """Log each delivery attempt and its duration."""

    def __init__(self, channel_name: str):
        self.channel_name = channel_name

    def __call__(self, user: NotifiableUser, notification: Any, proceed: Callable[[], Any]) -> Any:
        started = time.monotonic()
        result = proceed()
        elapsed_ms = (time.monotonic() - started) * 1000
        logger.debug(f"[{self.channel_name}] {notification!r} -> user {user.get_key()!r} in {elapsed_ms:.1f}ms")
        return result
