"""In-process collaborators that log the call and acknowledge it.

Used when no real transport is configured (no SMTP host, no Slack
webhook) and for the notification/alert/widget systems, which live
outside this service.
"""

from typing import Any
from uuid import uuid4

import structlog

from core.exceptions import ActionError
from integrations.base import AlertCreator, ChatPoster, EmailSender, NotificationSender, WidgetUpdater

logger = structlog.get_logger(__name__)


class LogEmailSender(EmailSender):
    async def send(self, to: Any, subject: str, body: str) -> dict:
        logger.info("Email (log only)", to=to, subject=subject)
        return {"sent": True, "to": to}


class LogNotificationSender(NotificationSender):
    async def send(self, message: str, workspace_id: str, **extra: Any) -> dict:
        logger.info("Notification", workspace_id=workspace_id, message=message)
        return {"sent": True, "message": message}


class LogAlertCreator(AlertCreator):
    async def create(self, name: str, workspace_id: str, **config: Any) -> dict:
        if not name:
            raise ActionError("Alert requires a name")
        alert_id = str(uuid4())
        logger.info("Alert created", workspace_id=workspace_id, alert=name, alert_id=alert_id)
        return {"created": True, "id": alert_id, "alert": name}


class LogWidgetUpdater(WidgetUpdater):
    async def update(self, widget_id: str, workspace_id: str, **changes: Any) -> dict:
        if not widget_id:
            raise ActionError("Widget update requires a widgetId")
        logger.info("Widget updated", workspace_id=workspace_id, widget_id=widget_id, fields=sorted(changes))
        return {"updated": True, "widgetId": widget_id}


class LogChatPoster(ChatPoster):
    async def post(self, channel: str, message: str) -> dict:
        logger.info("Chat message (log only)", channel=channel, message=message)
        return {"sent": True, "channel": channel}
