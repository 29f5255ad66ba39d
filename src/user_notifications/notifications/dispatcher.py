"""Deliver a routed notification to its channel handlers."""

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Union

from ..core.errors import ConfigurationError, DeliveryError
from ..core.users import NotifiableUser
from .channels import BaseChannel, ChannelManager
from .middleware import run_pipeline
from .notification import UserNotification
from .routing import NotificationRouter, Route

logger = logging.getLogger(__name__)


class DeliveryStatus(Enum):
    """Outcome of one channel delivery."""
    SENT = "sent"
    QUEUED = "queued"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class DeliveryJob:
    """A deferred delivery for an external queue worker."""
    queue: str
    handler: BaseChannel
    user: NotifiableUser
    notification: UserNotification

    def run(self) -> bool:
        """Deliver now. Returns False when middleware skipped the send."""
        return _deliver(self.handler, self.user, self.notification)


@dataclass
class DeliveryResult:
    """Outcome for one (user, route) pair."""
    user_id: Any
    route: Route
    status: DeliveryStatus
    queue: Optional[str] = None
    error: Optional[BaseException] = None


@dataclass
class DeliveryReport:
    """All outcomes of one send call."""
    results: List[DeliveryResult] = field(default_factory=list)

    @property
    def failures(self) -> List[DeliveryResult]:
        return [r for r in self.results if r.status == DeliveryStatus.FAILED]

    @property
    def ok(self) -> bool:
        return not self.failures

    def by_status(self, status: DeliveryStatus) -> List[DeliveryResult]:
        return [r for r in self.results if r.status == status]

    def raise_for_failures(self):
        """Raise DeliveryError for the first failed delivery, if any."""
        for result in self.failures:
            raise DeliveryError(
                f"Delivery via {result.route.name} to user {result.user_id!r} failed: {result.error}",
                channel=result.route.channel,
                original=result.error,
            )


def _deliver(handler: BaseChannel, user: NotifiableUser, notification: UserNotification) -> bool:
    def final() -> bool:
        handler.send(user, notification)
        return True

    return run_pipeline(handler.middleware(user), user, notification, final) is not False


class NotificationSender:
    """Fan a notification out to every routed channel.

    Each route is isolated: a failing handler is logged and reported
    without stopping the others. Handlers with a queue are handed to
    ``queue_dispatcher`` as a ``DeliveryJob`` when one is configured.
    """

    def __init__(
        self,
        router: NotificationRouter,
        channels: ChannelManager,
        queue_dispatcher: Optional[Callable[[DeliveryJob], Any]] = None,
        parallel: bool = False,
    ):
        self.router = router
        self.channels = channels
        self.queue_dispatcher = queue_dispatcher
        self.parallel = parallel

    def send(self, users: Union[NotifiableUser, Iterable[NotifiableUser]],
             notification: UserNotification) -> DeliveryReport:
        """Route and deliver ``notification`` to each user."""
        if isinstance(users, NotifiableUser):
            users = [users]

        report = DeliveryReport()
        for user in users:
            routes = self.router.via(notification, user)
            if self.parallel and len(routes) > 1:
                results = self._send_parallel(user, notification, routes)
            else:
                results = [self._send_route(user, notification, route) for route in routes]
            report.results.extend(results)

        return report

    def _send_parallel(self, user: NotifiableUser, notification: UserNotification,
                       routes: List[Route]) -> List[DeliveryResult]:
        results: List[Optional[DeliveryResult]] = [None] * len(routes)
        errors: List[ConfigurationError] = []

        def run(index: int, route: Route):
            try:
                results[index] = self._send_route(user, notification, route)
            except ConfigurationError as e:
                errors.append(e)

        threads = [
            threading.Thread(target=run, args=(index, route), daemon=True)
            for index, route in enumerate(routes)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        if errors:
            raise errors[0]
        return results

    def _send_route(self, user: NotifiableUser, notification: UserNotification, route: Route) -> DeliveryResult:
        user_id = user.get_key()
        queue = None
        try:
            handler = self.channels.driver(route.handler_class, route.channel)
            queue = handler.queue()

            if queue and self.queue_dispatcher is not None:
                self.queue_dispatcher(DeliveryJob(queue, handler, user, notification))
                logger.debug(f"Queued {notification!r} via {route.name} on '{queue}'")
                return DeliveryResult(user_id, route, DeliveryStatus.QUEUED, queue)

            sent = _deliver(handler, user, notification)
            status = DeliveryStatus.SENT if sent else DeliveryStatus.SKIPPED
            return DeliveryResult(user_id, route, status, queue)

        except ConfigurationError:
            raise
        except Exception as e:
            logger.exception(f"Delivery of {notification!r} via {route.name} to user {user_id!r} failed")
            return DeliveryResult(user_id, route, DeliveryStatus.FAILED, queue, error=e)
