"""
Action Registry: maps action type tags to handler instances.

Built once at startup. Construction fails if any ActionType has no
handler, so a new action type cannot ship without one.
"""

from typing import Dict, Optional, Type

from actions.base_action import BaseAction
from actions.implementations.dashboard import DASHBOARD_ACTION_TYPES
from actions.implementations.messaging import MESSAGING_ACTION_TYPES
from actions.implementations.webhook import WEBHOOK_ACTION_TYPES
from app.config import Settings
from core.constants import ActionType
from integrations.registry import Collaborators

BUILTIN_ACTION_TYPES: Dict[str, Type[BaseAction]] = {
    **MESSAGING_ACTION_TYPES,
    **DASHBOARD_ACTION_TYPES,
    **WEBHOOK_ACTION_TYPES,
}


class ActionRegistry:
    """Central registry of action handlers."""

    def __init__(
        self,
        collaborators: Collaborators,
        settings: Settings,
        handlers: Optional[Dict[str, Type[BaseAction]]] = None,
    ):
        self._handlers: Dict[str, BaseAction] = {}
        for action_type, handler_class in (handlers or BUILTIN_ACTION_TYPES).items():
            self.register(action_type, handler_class(collaborators, settings))
        self._check_exhaustive()

    def _check_exhaustive(self) -> None:
        missing = [t.value for t in ActionType if t.value not in self._handlers]
        if missing:
            raise RuntimeError(f"No handler registered for action types: {', '.join(missing)}")

    def register(self, action_type: str, handler: BaseAction) -> None:
        """Register a handler instance under a type tag."""
        self._handlers[action_type] = handler

    def get(self, action_type: str) -> Optional[BaseAction]:
        """Look up the handler for a type tag."""
        return self._handlers.get(action_type)

    def list_all(self) -> list:
        """List all registered action types with metadata."""
        return [
            {"action_type": action_type, "display_name": handler.display_name}
            for action_type, handler in self._handlers.items()
        ]

    @property
    def available_types(self) -> list:
        return list(self._handlers.keys())
