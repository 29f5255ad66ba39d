"""Main CLI entry point for the user-notifications command."""

import importlib
from typing import Any, List, Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..catalog.enums import NotificationChannelEnum, NotificationTypeEnum
from ..context import NotificationContext
from ..core.errors import ConfigurationError
from ..core.logs import configure_logging
from ..core.users import User
from ..storage.database import SQLitePreferenceStore

console = Console()

TRUE_VALUES = ("on", "true", "yes", "1")
FALSE_VALUES = ("off", "false", "no", "0")


def load_context(app_path: str) -> NotificationContext:
    """Import ``module:attr`` and return the NotificationContext it names."""
    module_name, _, attr = app_path.partition(":")
    if not module_name or not attr:
        raise ConfigurationError(f"App path must look like 'module:attr', got {app_path!r}")

    try:
        target = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Cannot load {app_path}: {e}") from e

    if callable(target) and not isinstance(target, NotificationContext):
        target = target()
    if not isinstance(target, NotificationContext):
        raise ConfigurationError(f"{app_path} did not produce a NotificationContext")
    return target


def get_context(ctx: click.Context) -> NotificationContext:
    """Context from ``obj`` (tests, embedding) or from --app."""
    obj = ctx.find_root().ensure_object(dict)
    if obj.get("context") is None:
        app_path = obj.get("app_path")
        if not app_path:
            raise click.UsageError("No application configured. Pass --app module:attr or set USER_NOTIFICATION_APP.")
        try:
            obj["context"] = load_context(app_path)
        except ConfigurationError as e:
            raise click.UsageError(str(e))
    return obj["context"]


def parse_user_id(raw: str) -> Any:
    """Numeric ids become ints, everything else stays text."""
    return int(raw) if raw.isdigit() else raw


def parse_assignment(context: NotificationContext, raw: str) -> Tuple[NotificationTypeEnum, NotificationChannelEnum, bool]:
    """Parse ``TYPE:CHANNEL=on|off``."""
    pair, sep, state = raw.partition("=")
    type_token, sep2, channel_token = pair.partition(":")
    if not sep or not sep2:
        raise click.BadParameter(f"Expected TYPE:CHANNEL=on|off, got {raw!r}")

    notification_type = context.registry.find_type(type_token)
    if notification_type is None:
        raise click.BadParameter(f"Unknown notification type: {type_token}")
    channel = context.registry.find_channel(channel_token)
    if channel is None:
        raise click.BadParameter(f"Unknown channel: {channel_token}")

    state = state.strip().lower()
    if state in TRUE_VALUES:
        return notification_type, channel, True
    if state in FALSE_VALUES:
        return notification_type, channel, False
    raise click.BadParameter(f"State must be on or off, got {state!r}")


@click.group()
@click.version_option(version="1.0.0", prog_name="user-notifications")
@click.option("--app", "app_path", envvar="USER_NOTIFICATION_APP",
              help="module:attr of a NotificationContext or a factory returning one")
@click.option("--log-level", default="WARNING", show_default=True, help="Logging level")
@click.pass_context
def cli(ctx: click.Context, app_path: Optional[str], log_level: str):
    """User notifications - preference and channel routing.

    \b
    Quick Start:
      user-notifications --app myapp.notify:context init
      user-notifications --app myapp.notify:context catalog
      user-notifications --app myapp.notify:context prefs show 42
      user-notifications --app myapp.notify:context prefs set 42 welcome:mail=off
    """
    configure_logging(log_level)
    ctx.ensure_object(dict)
    if app_path:
        ctx.obj["app_path"] = app_path


@cli.command()
@click.pass_context
def init(ctx: click.Context):
    """Create the preferences table."""
    context = get_context(ctx)
    store = context.store

    if isinstance(store, SQLitePreferenceStore):
        location = f"Location: [cyan]{store.db_path}[/cyan]\nTable: [cyan]{store.table}[/cyan]"
    else:
        location = f"Store: [cyan]{type(store).__name__}[/cyan]"

    console.print(Panel.fit(
        f"[green]✓ Preference storage ready![/green]\n\n"
        f"{location}\n\n"
        f"Types: [cyan]{len(context.registry.types())}[/cyan]  "
        f"Channels: [cyan]{len(context.registry.channels())}[/cyan]\n"
        f"Environment: [cyan]{context.settings.environment}[/cyan]",
        title="User Notifications"
    ))


@cli.command()
@click.pass_context
def catalog(ctx: click.Context):
    """List registered notification types and channels."""
    context = get_context(ctx)

    types_table = Table(title="Notification Types")
    types_table.add_column("ID", style="dim")
    types_table.add_column("Name", style="cyan")
    types_table.add_column("Title")
    types_table.add_column("Description")
    types_table.add_column("Default Channels", style="green")

    for notification_type in context.registry.types():
        types_table.add_row(
            str(notification_type.value),
            notification_type.name,
            notification_type.title,
            notification_type.description,
            ", ".join(c.name for c in notification_type.default_channels()) or "-",
        )

    channels_table = Table(title="Channels")
    channels_table.add_column("ID", style="dim")
    channels_table.add_column("Name", style="cyan")
    channels_table.add_column("Title")
    channels_table.add_column("Handler")
    channels_table.add_column("Queue", style="yellow")

    for channel in context.registry.channels():
        handler = context.channels.driver(channel.handler_class(), channel)
        channels_table.add_row(
            str(channel.value),
            channel.name,
            channel.title,
            type(handler).__name__,
            handler.queue() or "sync",
        )

    console.print(types_table)
    console.print(channels_table)


@cli.group()
def prefs():
    """Inspect and change a user's preferences."""
    pass


@prefs.command("show")
@click.argument("user_id")
@click.option("--type", "type_token", help="Only this notification type")
@click.pass_context
def prefs_show(ctx: click.Context, user_id: str, type_token: Optional[str]):
    """Show the effective preference matrix for a user."""
    context = get_context(ctx)

    notification_type = None
    if type_token:
        notification_type = context.registry.find_type(type_token)
        if notification_type is None:
            raise click.BadParameter(f"Unknown notification type: {type_token}", param_hint="--type")

    user = User(id=parse_user_id(user_id))
    preferences = context.preferences.get_notification_preferences(user, notification_type)

    table = Table(title=f"Preferences for user {user_id}")
    table.add_column("Type", style="cyan")
    table.add_column("Channel")
    table.add_column("Active")
    table.add_column("Source", style="dim")

    for preference in preferences:
        table.add_row(
            preference.type.name,
            preference.channel.name,
            "[green]on[/green]" if preference.is_active else "[red]off[/red]",
            "stored" if preference.persisted else "default",
        )

    console.print(table)


@prefs.command("set")
@click.argument("user_id")
@click.argument("assignments", nargs=-1, required=True)
@click.pass_context
def prefs_set(ctx: click.Context, user_id: str, assignments: Tuple[str, ...]):
    """Replace a user's preferences.

    \b
    Pairs that are not listed fall back to their defaults:
      user-notifications prefs set 42 welcome:mail=off alert:push=on
    """
    context = get_context(ctx)
    parsed = [parse_assignment(context, raw) for raw in assignments]

    items: List[dict] = [
        {"type": notification_type, "channel": channel, "is_active": active}
        for notification_type, channel, active in parsed
    ]
    context.preferences.set_notification_preferences(User(id=parse_user_id(user_id)), items)

    console.print(f"[green]✓ Saved {len(items)} preference(s) for user {user_id}[/green]")


@prefs.command("reset")
@click.argument("user_id")
@click.pass_context
def prefs_reset(ctx: click.Context, user_id: str):
    """Drop stored preferences so defaults apply."""
    context = get_context(ctx)
    context.preferences.reset(User(id=parse_user_id(user_id)))
    console.print(f"[green]✓ Preferences reset for user {user_id}[/green]")


@cli.command()
@click.argument("notification")
@click.option("--channel", "channel_token", help="Only render for this channel")
@click.option("--user-id", default="1", show_default=True, help="User id for samples without a user")
@click.option("--email", default="preview@example.com", show_default=True, help="Email for that user")
@click.option("--locale", help="Locale for that user")
@click.pass_context
def preview(ctx: click.Context, notification: str, channel_token: Optional[str],
            user_id: str, email: str, locale: Optional[str]):
    """Render a notification's test samples per channel."""
    context = get_context(ctx)

    try:
        notification_class = context.find_notification(notification)
    except ConfigurationError as e:
        raise click.BadParameter(str(e), param_hint="NOTIFICATION")

    channels = context.registry.channels()
    if channel_token:
        channel = context.registry.find_channel(channel_token)
        if channel is None:
            raise click.BadParameter(f"Unknown channel: {channel_token}", param_hint="--channel")
        channels = [channel]

    default_user = User(id=parse_user_id(user_id), name="Preview User", email=email, locale=locale)
    tests = notification_class.test_list(default_user)
    if not len(tests):
        console.print(f"[yellow]{notification_class.__name__} has no test samples[/yellow]")
        return

    for index, test in enumerate(tests, 1):
        user = test.user or default_user
        for channel in channels:
            handler = context.channels.driver(channel.handler_class(), channel)
            message = handler.build_message(user, test.notification)
            console.print(Panel(
                Text(message.body) if message.body else Text("(empty)", style="dim"),
                title=f"#{index} {channel.name}: {escape(message.subject)}",
                title_align="left",
            ))


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
