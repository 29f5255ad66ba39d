"""Sample catalog and notifications shared by the tests."""

from typing import Any, Dict, List

from user_notifications.catalog import NotificationChannelEnum, NotificationTypeEnum
from user_notifications.context import build_context
from user_notifications.core import NotificationSettings
from user_notifications.notifications import (
    Action,
    Component,
    HasLogEvent,
    InAppChannel,
    Layout,
    Line,
    LineGroup,
    LogEventChannel,
    MailChannel,
    NotificationTest,
    NotificationTestList,
    PushChannel,
    Translator,
    UserNotification,
)
from user_notifications.storage import InMemoryPreferenceStore


class AppChannel(NotificationChannelEnum):
    MAIL = 1
    PUSH = 2

    def handler_class(self):
        return {AppChannel.MAIL: MailChannel, AppChannel.PUSH: PushChannel}[self]


class InboxChannel(NotificationChannelEnum):
    INBOX = 3

    def handler_class(self):
        return InAppChannel


class UnboundChannel(NotificationChannelEnum):
    SMS = 9


class AppType(NotificationTypeEnum):
    WELCOME = 1
    ALERT = 2

    @property
    def description(self) -> str:
        return {
            AppType.WELCOME: "Sent after sign-up",
            AppType.ALERT: "Security alerts",
        }[self]

    def default_channels(self) -> List[AppChannel]:
        return {
            AppType.WELCOME: [AppChannel.MAIL],
            AppType.ALERT: [AppChannel.MAIL, AppChannel.PUSH],
        }[self]


class WelcomeNotification(UserNotification):
    """Greeting with a mail-only panel and a button."""

    def __init__(self, inviter: str = "the team"):
        super().__init__()
        self.inviter = inviter

    def notification_type(self):
        return AppType.WELCOME

    def subject(self, user):
        return Line("welcome.subject", {"name": user.notification_name()})

    def layout(self, user, channel):
        layout = Layout()
        layout.add(
            LineGroup()
            .add("welcome.greeting", {"name": user.notification_name()})
            .add("You were invited by :inviter.", {"inviter": self.inviter})
        )
        layout.add(
            LineGroup(component=Component.PANEL, glue=False)
            .add("Your account details are below.")
            .add("Keep them safe.")
            .hide_from(AppChannel.PUSH)
        )
        layout.add(Action(Line("welcome.button"), "https://example.com/start"))
        return layout

    @classmethod
    def test_list(cls, user):
        return NotificationTestList().add(NotificationTest(cls("Ann")))


class AlertNotification(UserNotification, HasLogEvent):
    """Alert that also writes an audit event."""

    def notification_type(self):
        return AppType.ALERT

    def subject(self, user):
        return Line("Security alert")

    def layout(self, user, channel):
        return Layout().add(LineGroup().add("A new device signed in to your account."))

    def log_event_channel(self):
        return LogEventChannel

    def to_log_event(self, user) -> Dict[str, Any]:
        return {"event": "alert_sent", "user_id": user.get_key()}


TRANSLATIONS = {
    "en": {
        "welcome.subject": "Welcome, :name!",
        "welcome.greeting": "Hello, :Name.",
        "welcome.button": "Get started",
    },
    "ru": {
        "welcome.subject": "Добро пожаловать, :name!",
    },
}


def build_sample_context(**overrides):
    """In-memory context with the sample catalog."""
    settings = NotificationSettings(**overrides)
    return build_context(
        settings=settings,
        types=list(AppType),
        channels=list(AppChannel),
        store=InMemoryPreferenceStore(),
        translator=Translator(TRANSLATIONS, locale="en"),
        notifications=[WelcomeNotification, AlertNotification],
    )
