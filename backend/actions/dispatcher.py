"""Routes one action descriptor to its handler and normalizes the outcome."""

import asyncio
import time
from typing import Any, Optional

import structlog

from actions.base_action import ActionResult
from actions.registry import ActionRegistry
from core.exceptions import UnknownActionTypeError

logger = structlog.get_logger(__name__)


class ActionDispatcher:
    """Dispatches action descriptors ``{"type", "config", "timeout"?}``.

    dispatch() never raises for action-level problems: handler errors,
    unknown type tags and timeouts all come back as a failed ActionResult.
    """

    def __init__(self, registry: ActionRegistry, default_timeout: float = 30.0):
        self._registry = registry
        self._default_timeout = default_timeout

    async def dispatch(self, action: Any, trigger_data: Any, workspace_id: str) -> ActionResult:
        start = time.monotonic()
        action = action if isinstance(action, dict) else {}
        action_type = action.get("type")
        config = action.get("config") or {}
        timeout: Optional[float] = action.get("timeout") or self._default_timeout

        def elapsed_ms() -> int:
            return int((time.monotonic() - start) * 1000)

        # Non-string tags (lists, dicts) cannot name a handler
        handler = self._registry.get(action_type) if isinstance(action_type, str) else None
        if handler is None:
            error = UnknownActionTypeError(action_type).message
            logger.warning("Unknown action type", action_type=action_type)
            return ActionResult(action_type=str(action_type), success=False, error=error, duration_ms=elapsed_ms())

        try:
            output = await asyncio.wait_for(
                handler.execute(config, trigger_data, workspace_id),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            error = f"Action timed out after {timeout}s"
        except Exception as e:
            error = str(e) or e.__class__.__name__
        else:
            duration_ms = elapsed_ms()
            logger.info("Action completed", action_type=action_type, duration_ms=duration_ms)
            return ActionResult(action_type=action_type, success=True, output=output, duration_ms=duration_ms)

        duration_ms = elapsed_ms()
        logger.error("Action failed", action_type=action_type, error=error, duration_ms=duration_ms)
        return ActionResult(action_type=action_type, success=False, error=error, duration_ms=duration_ms)
