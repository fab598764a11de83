"""Action Types API routes.

Exposes the registered action types to the workflow builder.
"""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/", summary="List all available action types")
async def list_action_types(request: Request):
    """Get all registered action types.

    Used by the visual workflow builder to populate the action palette.
    """
    registry = request.app.state.action_registry
    return {
        "action_types": registry.list_all(),
        "count": len(registry.available_types),
    }
