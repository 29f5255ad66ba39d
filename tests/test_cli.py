"""Tests for the command-line interface."""

import pytest
from click.testing import CliRunner

from user_notifications.cli.main import cli, parse_user_id
from user_notifications.core import User

from sample_app import AppChannel, AppType, build_sample_context


@pytest.fixture
def runner(monkeypatch):
    monkeypatch.delenv("USER_NOTIFICATION_APP", raising=False)
    return CliRunner()


@pytest.fixture
def context():
    return build_sample_context()


def invoke(runner, context, *args):
    return runner.invoke(cli, list(args), obj={"context": context})


class TestCatalogCommands:
    """Tests for init and catalog."""

    def test_init(self, runner, context):
        result = invoke(runner, context, "init")

        assert result.exit_code == 0
        assert "InMemoryPreferenceStore" in result.output

    def test_catalog(self, runner, context):
        result = invoke(runner, context, "catalog")

        assert result.exit_code == 0
        assert "WELCOME" in result.output
        assert "MailChannel" in result.output
        assert "PushChannel" in result.output

    def test_no_app_configured(self, runner):
        result = runner.invoke(cli, ["catalog"], obj={})

        assert result.exit_code == 2
        assert "No application configured" in result.output

    def test_app_option_loads_factory(self, runner):
        result = runner.invoke(cli, ["--app", "sample_app:build_sample_context", "catalog"], obj={})

        assert result.exit_code == 0
        assert "ALERT" in result.output

    def test_bad_app_path(self, runner):
        result = runner.invoke(cli, ["--app", "sample_app", "catalog"], obj={})

        assert result.exit_code == 2
        assert "module:attr" in result.output


class TestPrefsCommands:
    """Tests for the prefs group."""

    def test_show_defaults(self, runner, context):
        result = invoke(runner, context, "prefs", "show", "42")

        assert result.exit_code == 0
        assert "default" in result.output
        assert "stored" not in result.output

    def test_set_replaces_preferences(self, runner, context):
        result = invoke(runner, context, "prefs", "set", "42", "welcome:mail=off", "alert:PUSH=no")

        assert result.exit_code == 0
        assert "Saved 2 preference(s) for user 42" in result.output

        resolved = context.preferences.resolve(User(id=42), AppType.WELCOME)
        assert [(p.channel, p.is_active, p.persisted) for p in resolved] == [
            (AppChannel.MAIL, False, True),
            (AppChannel.PUSH, False, False),
        ]
        assert context.preferences.enabled_channels(User(id=42), AppType.ALERT) == [AppChannel.MAIL]

        shown = invoke(runner, context, "prefs", "show", "42", "--type", "welcome")
        assert "stored" in shown.output
        assert "ALERT" not in shown.output

    @pytest.mark.parametrize("assignment, message", [
        ("welcome-mail", "Expected TYPE:CHANNEL=on|off"),
        ("welcome:fax=on", "Unknown channel"),
        ("digest:mail=on", "Unknown notification type"),
        ("welcome:mail=maybe", "State must be on or off"),
    ])
    def test_bad_assignment(self, runner, context, assignment, message):
        result = invoke(runner, context, "prefs", "set", "42", assignment)

        assert result.exit_code == 2
        assert message in result.output
        assert context.store.fetch(42) == []

    def test_reset(self, runner, context):
        invoke(runner, context, "prefs", "set", "42", "welcome:mail=off")

        result = invoke(runner, context, "prefs", "reset", "42")

        assert result.exit_code == 0
        assert "Preferences reset for user 42" in result.output
        assert context.store.fetch(42) == []

    def test_show_unknown_type(self, runner, context):
        result = invoke(runner, context, "prefs", "show", "42", "--type", "digest")

        assert result.exit_code == 2


class TestPreviewCommand:
    """Tests for preview."""

    def test_preview_all_channels(self, runner, context):
        result = invoke(runner, context, "preview", "WelcomeNotification")

        assert result.exit_code == 0
        assert "#1 MAIL: Welcome, Preview User!" in result.output
        assert "#1 PUSH: Welcome, Preview User!" in result.output
        assert "[Get started](https://example.com/start)" in result.output

    def test_preview_one_channel_masks_content(self, runner, context):
        result = invoke(runner, context, "preview", "welcomenotification", "--channel", "push")

        assert result.exit_code == 0
        assert "MAIL" not in result.output
        assert "account details" not in result.output
        assert "Get started: https://example.com/start" in result.output

    def test_preview_without_samples(self, runner, context):
        result = invoke(runner, context, "preview", "AlertNotification")

        assert result.exit_code == 0
        assert "has no test samples" in result.output

    def test_preview_unknown_notification(self, runner, context):
        result = invoke(runner, context, "preview", "Missing")

        assert result.exit_code == 2


class TestHelpers:
    """Tests for CLI helpers."""

    def test_parse_user_id(self):
        assert parse_user_id("42") == 42
        assert parse_user_id("u-42") == "u-42"
