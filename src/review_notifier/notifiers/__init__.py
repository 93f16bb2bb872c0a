"""Notifier implementations."""

from .base import Notifier, render_review_text
from .email_smtp import EmailNotifier, build_email_message
from .slack_webhook import SlackWebhookNotifier, build_slack_payload, render_slack_message_text

__all__ = [
    "EmailNotifier",
    "Notifier",
    "SlackWebhookNotifier",
    "build_email_message",
    "build_slack_payload",
    "render_review_text",
    "render_slack_message_text",
]
