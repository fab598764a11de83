"""Collaborator bundle handed to the action handlers."""

from dataclasses import dataclass

from app.config import Settings
from integrations.base import (
    AlertCreator,
    ChatPoster,
    EmailSender,
    HttpClient,
    NotificationSender,
    WidgetUpdater,
)
from integrations.channels import HttpxClient, SlackWebhookPoster, SmtpEmailSender
from integrations.local import (
    LogAlertCreator,
    LogChatPoster,
    LogEmailSender,
    LogNotificationSender,
    LogWidgetUpdater,
)


@dataclass
class Collaborators:
    """One instance of every external system an action may reach."""

    email: EmailSender
    notifications: NotificationSender
    alerts: AlertCreator
    widgets: WidgetUpdater
    http: HttpClient
    chat: ChatPoster


def build_collaborators(settings: Settings) -> Collaborators:
    """Pick real transports where configured, log-backed ones otherwise."""
    if settings.SMTP_HOST:
        email = SmtpEmailSender(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            user=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            from_address=settings.SMTP_FROM,
            use_tls=settings.SMTP_USE_TLS,
        )
    else:
        email = LogEmailSender()

    if settings.SLACK_WEBHOOK_URL:
        chat = SlackWebhookPoster(settings.SLACK_WEBHOOK_URL)
    else:
        chat = LogChatPoster()

    return Collaborators(
        email=email,
        notifications=LogNotificationSender(),
        alerts=LogAlertCreator(),
        widgets=LogWidgetUpdater(),
        http=HttpxClient(timeout=settings.WEBHOOK_TIMEOUT_SECONDS),
        chat=chat,
    )
