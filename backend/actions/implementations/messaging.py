"""Messaging actions: email, in-app notification, Slack message."""

import json
from typing import Any, Dict

from actions.base_action import BaseAction
from core.constants import ActionType


class SendEmailAction(BaseAction):
    """Send an email.

    Config:
        to: Recipient address or list of addresses
        subject: Subject line
        body: Message body (defaults to the trigger payload as JSON)
    """

    action_type = ActionType.SEND_EMAIL.value
    display_name = "Send Email"

    async def execute(self, config: Dict[str, Any], trigger_data: Any, workspace_id: str) -> Dict[str, Any]:
        body = config.get("body")
        if body is None:
            body = json.dumps(trigger_data, indent=2, default=str)
        return await self.collaborators.email.send(
            to=config.get("to"),
            subject=config.get("subject", ""),
            body=body,
        )


class SendNotificationAction(BaseAction):
    """Deliver a push/in-app notification to the workspace.

    Config:
        message: Notification text
    """

    action_type = ActionType.SEND_NOTIFICATION.value
    display_name = "Send Notification"

    async def execute(self, config: Dict[str, Any], trigger_data: Any, workspace_id: str) -> Dict[str, Any]:
        extra = {k: v for k, v in config.items() if k != "message"}
        return await self.collaborators.notifications.send(
            message=config.get("message", ""),
            workspace_id=workspace_id,
            **extra,
        )


class SlackMessageAction(BaseAction):
    """Post a chat message.

    Config:
        channel: Target channel, e.g. "#alerts"
        message: Message text
    """

    action_type = ActionType.SLACK_MESSAGE.value
    display_name = "Slack Message"

    async def execute(self, config: Dict[str, Any], trigger_data: Any, workspace_id: str) -> Dict[str, Any]:
        return await self.collaborators.chat.post(
            channel=config.get("channel", ""),
            message=config.get("message", ""),
        )


MESSAGING_ACTION_TYPES = {
    SendEmailAction.action_type: SendEmailAction,
    SendNotificationAction.action_type: SendNotificationAction,
    SlackMessageAction.action_type: SlackMessageAction,
}
