"""
Base action interface for all workflow action handlers.

Every action type (email, webhook, alert, ...) inherits from BaseAction,
declares its ``action_type`` and implements execute(). Handlers delegate
to exactly one external collaborator and raise on failure.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from app.config import Settings
from core.constants import StepStatus
from integrations.registry import Collaborators


@dataclass
class ActionResult:
    """Normalized outcome of one action dispatch."""

    action_type: str
    success: bool
    output: Any = None
    error: Optional[str] = None
    duration_ms: int = 0

    def to_step(self) -> Dict[str, Any]:
        """Render as an execution step record."""
        step = {
            "kind": self.action_type,
            "status": StepStatus.SUCCESS.value if self.success else StepStatus.FAILED.value,
            "duration": self.duration_ms,
        }
        if self.success:
            step["result"] = self.output
        else:
            step["error"] = self.error
        return step


class BaseAction(ABC):
    """
    Abstract base class for action handlers.

    Subclasses must implement:
    - execute(config, trigger_data, workspace_id) -> dict
    - action_type (class attribute)
    """

    action_type: str = "base"
    display_name: str = "Base Action"

    def __init__(self, collaborators: Collaborators, settings: Settings):
        self.collaborators = collaborators
        self.settings = settings

    @abstractmethod
    async def execute(
        self,
        config: Dict[str, Any],
        trigger_data: Any,
        workspace_id: str,
    ) -> Dict[str, Any]:
        """
        Run the action.

        Args:
            config: The descriptor's config object
            trigger_data: Payload that fired the workflow
            workspace_id: Owning workspace of the workflow

        Returns:
            The collaborator's acknowledgement
        """
        pass
