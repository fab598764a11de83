"""Dashboard actions: alert creation and widget mutation."""

from typing import Any, Dict

from actions.base_action import BaseAction
from core.constants import ActionType


class CreateAlertAction(BaseAction):
    """Create an alert in the workspace.

    Config:
        name: Alert name (required)
        any other keys are passed through to the alert system
    """

    action_type = ActionType.CREATE_ALERT.value
    display_name = "Create Alert"

    async def execute(self, config: Dict[str, Any], trigger_data: Any, workspace_id: str) -> Dict[str, Any]:
        extra = {k: v for k, v in config.items() if k != "name"}
        return await self.collaborators.alerts.create(
            name=config.get("name", ""),
            workspace_id=workspace_id,
            **extra,
        )


class UpdateWidgetAction(BaseAction):
    """Mutate a dashboard widget.

    Config:
        widgetId: Target widget (required)
        any other keys are the fields to change
    """

    action_type = ActionType.UPDATE_WIDGET.value
    display_name = "Update Widget"

    async def execute(self, config: Dict[str, Any], trigger_data: Any, workspace_id: str) -> Dict[str, Any]:
        changes = {k: v for k, v in config.items() if k != "widgetId"}
        return await self.collaborators.widgets.update(
            widget_id=config.get("widgetId", ""),
            workspace_id=workspace_id,
            **changes,
        )


DASHBOARD_ACTION_TYPES = {
    CreateAlertAction.action_type: CreateAlertAction,
    UpdateWidgetAction.action_type: UpdateWidgetAction,
}
