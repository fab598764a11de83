"""API v1 aggregated router.

All v1 endpoints are registered here and mounted under API_V1_PREFIX in main.py.
"""

from fastapi import APIRouter

from api.routes import action_types, executions, templates, workflows

api_v1_router = APIRouter()

# Workflows
api_v1_router.include_router(
    workflows.router,
    prefix="/workflows",
    tags=["Workflows"],
)

# Executions
api_v1_router.include_router(
    executions.router,
    prefix="/executions",
    tags=["Executions"],
)

# Template library
api_v1_router.include_router(
    templates.router,
    prefix="/workflow-templates",
    tags=["Workflow Templates"],
)

# Action types (for workflow builder)
api_v1_router.include_router(
    action_types.router,
    prefix="/action-types",
    tags=["Action Types"],
)
