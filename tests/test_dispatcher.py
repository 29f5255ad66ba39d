"""Tests for channel handlers and delivery."""

import pytest

from user_notifications.core import ConfigurationError, DeliveryError, User
from user_notifications.notifications import (
    ChannelManager,
    DeliveryStatus,
    InAppChannel,
    LogEventChannel,
    MailChannel,
    PushChannel,
    Translator,
)

from sample_app import (
    TRANSLATIONS,
    AlertNotification,
    AppChannel,
    InboxChannel,
    WelcomeNotification,
    build_sample_context,
)


class Recorder:
    """Collects what transports and sinks receive."""

    def __init__(self):
        self.mail = []
        self.push = []
        self.events = []

    def install(self, context):
        context.channels.extend(MailChannel, lambda **kw: MailChannel(transport=self.mail.append, **kw))
        context.channels.extend(PushChannel, lambda **kw: PushChannel(transport=self.push.append, **kw))
        context.channels.extend(LogEventChannel, lambda **kw: LogEventChannel(sink=self.events.append, **kw))
        return self


def statuses(report):
    return [(r.route.name, r.status) for r in report.results]


@pytest.fixture
def context():
    return build_sample_context()


@pytest.fixture
def recorder(context):
    return Recorder().install(context)


class TestNotificationSender:
    """Tests for NotificationSender."""

    def test_send_through_preferred_channel(self, context, recorder, user):
        report = context.send(user, WelcomeNotification("Bob"))

        assert statuses(report) == [("MAIL", DeliveryStatus.SENT)]
        assert report.ok

        message = recorder.mail[0]
        assert message.to == "ann@example.com"
        assert message.to_name == "Ann"
        assert message.subject == "Welcome, Ann!"
        assert message.body.startswith("# Welcome, Ann!\n\nHello, Ann.  \nYou were invited by Bob.")
        assert "> Your account details are below." in message.body
        assert message.actions == [("Get started", "https://example.com/start")]

    def test_user_locale_selects_translation(self, context, recorder):
        context.send(User(id=1, name="Ann", email="a@example.com", locale="ru"), WelcomeNotification())

        assert recorder.mail[0].subject == "Добро пожаловать, Ann!"

    def test_failing_channel_does_not_stop_others(self, context, recorder, user):
        def fail(message):
            raise RuntimeError("push gateway down")

        context.channels.extend(PushChannel, lambda **kw: PushChannel(transport=fail, **kw))

        report = context.send(user, AlertNotification())

        assert statuses(report) == [
            ("MAIL", DeliveryStatus.SENT),
            ("PUSH", DeliveryStatus.FAILED),
            ("LogEventChannel", DeliveryStatus.SENT),
        ]
        assert len(recorder.mail) == 1
        assert recorder.events == [{"event": "alert_sent", "user_id": 42}]
        assert not report.ok
        assert isinstance(report.failures[0].error, RuntimeError)

        with pytest.raises(DeliveryError) as exc_info:
            report.raise_for_failures()
        assert exc_info.value.channel is AppChannel.PUSH
        assert isinstance(exc_info.value.original, RuntimeError)

    def test_missing_email_skips_mail(self, context, recorder):
        report = context.send(User(id=3, name="NoMail"), WelcomeNotification())

        assert statuses(report) == [("MAIL", DeliveryStatus.SKIPPED)]
        assert recorder.mail == []
        assert report.ok

    def test_several_users(self, context, recorder):
        users = [User(id=1, email="a@example.com"), User(id=2, email="b@example.com")]

        report = context.send(users, WelcomeNotification())

        assert [r.user_id for r in report.results] == [1, 2]
        assert [m.to for m in recorder.mail] == ["a@example.com", "b@example.com"]

    def test_preferences_drive_delivery(self, context, recorder, user):
        context.preferences.replace_all(user, [{"type": 1, "channel": 1, "is_active": False}])

        report = context.send(user, WelcomeNotification())

        assert report.results == []
        assert recorder.mail == []

    def test_push_message(self, context, recorder, user):
        context.send(user, WelcomeNotification().set_channels([AppChannel.PUSH]))

        message = recorder.push[0]
        assert message.user_id == 42
        assert message.title == "Welcome, Ann!"
        assert message.url == "https://example.com/start"
        assert "account details" not in message.body
        assert len(message.body) <= PushChannel.max_body_length

    def test_non_production_suppresses_delivery(self, recorder, user):
        context = build_sample_context(environment="staging")
        recorder.install(context)

        assert context.send(user, AlertNotification()).results == []
        assert recorder.mail == [] and recorder.events == []

        report = context.send(user, AlertNotification().set_test())
        assert len(report.results) == 3
        assert len(recorder.mail) == 1

    def test_configuration_error_propagates(self, context, user):
        context.channels.extend(MailChannel, lambda **kw: object())

        with pytest.raises(ConfigurationError):
            context.send(user, WelcomeNotification())

    def test_parallel_delivery(self, user):
        context = build_sample_context(parallel_delivery=True)
        recorder = Recorder().install(context)

        report = context.send(user, AlertNotification())

        assert statuses(report) == [
            ("MAIL", DeliveryStatus.SENT),
            ("PUSH", DeliveryStatus.SENT),
            ("LogEventChannel", DeliveryStatus.SENT),
        ]
        assert len(recorder.mail) == len(recorder.push) == len(recorder.events) == 1

    def test_parallel_configuration_error_propagates(self, user):
        context = build_sample_context(parallel_delivery=True)
        context.channels.extend(PushChannel, lambda **kw: None)

        with pytest.raises(ConfigurationError):
            context.send(user, AlertNotification())


class TestQueuedDelivery:
    """Handlers with a queue go to the queue dispatcher."""

    def test_jobs_dispatched(self, context, recorder, user):
        jobs = []
        context.sender.queue_dispatcher = jobs.append

        report = context.send(user, AlertNotification())

        assert statuses(report) == [
            ("MAIL", DeliveryStatus.QUEUED),
            ("PUSH", DeliveryStatus.QUEUED),
            ("LogEventChannel", DeliveryStatus.SENT),
        ]
        assert [job.queue for job in jobs] == ["default", "default"]
        assert recorder.mail == []
        assert len(recorder.events) == 1

        assert all(job.run() for job in jobs)
        assert len(recorder.mail) == 1
        assert len(recorder.push) == 1

    def test_queued_job_still_applies_middleware(self, context, recorder):
        jobs = []
        context.sender.queue_dispatcher = jobs.append

        context.send(User(id=9), WelcomeNotification())

        assert jobs[0].run() is False
        assert recorder.mail == []

    def test_no_default_queue_sends_inline(self, user):
        context = build_sample_context(default_queue=None)
        recorder = Recorder().install(context)
        jobs = []
        context.sender.queue_dispatcher = jobs.append

        report = context.send(user, WelcomeNotification())

        assert statuses(report) == [("MAIL", DeliveryStatus.SENT)]
        assert jobs == []
        assert len(recorder.mail) == 1


class TestInAppChannel:
    """Tests for InAppChannel."""

    def test_store_and_read(self, context, user):
        context.registry.register_channels([InboxChannel.INBOX])

        report = context.send(user, WelcomeNotification().set_channels([InboxChannel.INBOX]))
        assert statuses(report) == [("INBOX", DeliveryStatus.SENT)]

        inbox = context.channels.driver(InAppChannel, InboxChannel.INBOX)
        stored = inbox.get_notifications(42)
        assert len(stored) == 1
        assert stored[0].title == "Welcome, Ann!"
        assert stored[0].action_url == "https://example.com/start"
        assert stored[0].action_label == "Get started"
        assert "account details" in stored[0].message
        assert inbox.get_unread_count(42) == 1

        assert inbox.mark_read(42, stored[0].id)
        assert inbox.get_unread_count(42) == 0
        assert not inbox.mark_read(42, "missing")

    def test_synchronous_handler_has_no_queue(self, context):
        assert context.channels.driver(InAppChannel, InboxChannel.INBOX).queue() is None


class TestLogEventChannel:
    """Tests for LogEventChannel."""

    def test_requires_log_event_hook(self, user):
        with pytest.raises(ConfigurationError):
            LogEventChannel().send(user, WelcomeNotification())

    def test_logs_without_sink(self, user, caplog):
        with caplog.at_level("INFO"):
            LogEventChannel().send(user, AlertNotification())

        assert "alert_sent" in caplog.text


class TestChannelManager:
    """Tests for ChannelManager."""

    def setup_method(self):
        self.manager = ChannelManager(Translator(TRANSLATIONS, locale="en"), default_queue="notifications")

    def test_driver_is_cached_per_channel(self):
        mail = self.manager.driver(MailChannel, AppChannel.MAIL)

        assert self.manager.driver(MailChannel, AppChannel.MAIL) is mail
        assert self.manager.driver(PushChannel, AppChannel.PUSH) is not mail
        assert mail.channel is AppChannel.MAIL

    def test_extend_replaces_cached_driver(self):
        first = self.manager.driver(MailChannel, AppChannel.MAIL)
        self.manager.extend(MailChannel, lambda **kw: MailChannel(transport=print, **kw))

        second = self.manager.driver(MailChannel, AppChannel.MAIL)
        assert second is not first
        assert second.transport is print

    def test_queues(self):
        self.manager.driver(MailChannel, AppChannel.MAIL)
        self.manager.driver(LogEventChannel)

        assert self.manager.via_queues() == {"mail": "notifications", "LogEventChannel": None}

    def test_rejects_non_handler_class(self):
        with pytest.raises(ConfigurationError):
            self.manager.driver(dict, AppChannel.MAIL)
