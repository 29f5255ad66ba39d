"""Notification routing, content and delivery."""

from .content import Action, Component, Layout, Line, LineGroup, escape_markdown
from .notification import HasLogEvent, NotificationTest, NotificationTestList, UserNotification
from .preferences import NotificationPreference, NotificationPreferencesService
from .routing import NotificationRouter, Route
from .channels import (
    BaseChannel,
    ChannelManager,
    InAppChannel,
    LogEventChannel,
    MailChannel,
    MailMessage,
    PushChannel,
    PushMessage,
)
from .dispatcher import DeliveryJob, DeliveryReport, DeliveryStatus, NotificationSender
from .rendering import MarkdownRenderer, PlainTextRenderer, RenderedMessage
from .translation import Locale, Translator

__all__ = [
    'Action',
    'Component',
    'Layout',
    'Line',
    'LineGroup',
    'escape_markdown',
    'HasLogEvent',
    'NotificationTest',
    'NotificationTestList',
    'UserNotification',
    'NotificationPreference',
    'NotificationPreferencesService',
    'NotificationRouter',
    'Route',
    'BaseChannel',
    'ChannelManager',
    'InAppChannel',
    'LogEventChannel',
    'MailChannel',
    'MailMessage',
    'PushChannel',
    'PushMessage',
    'DeliveryJob',
    'DeliveryReport',
    'DeliveryStatus',
    'NotificationSender',
    'MarkdownRenderer',
    'PlainTextRenderer',
    'RenderedMessage',
    'Locale',
    'Translator',
]
