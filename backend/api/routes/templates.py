"""Workflow template endpoints: browse the library and instantiate templates."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.common import ErrorResponse
from api.schemas.template import TemplateInstantiate, TemplateListResponse, TemplateResponse
from api.schemas.workflow import WorkflowResponse
from app.dependencies import get_db, get_workspace_id
from services.template_service import TemplateService

router = APIRouter(tags=["workflow-templates"], responses={404: {"model": ErrorResponse}})
logger = logging.getLogger(__name__)


@router.get("/", response_model=TemplateListResponse)
async def list_templates(
    category: Optional[str] = Query(None, description="Filter by category"),
    db: AsyncSession = Depends(get_db),
) -> TemplateListResponse:
    """
    Public templates, best rated first, then most used.
    """
    templates = await TemplateService(db).list_templates(category)
    return TemplateListResponse(
        templates=[TemplateResponse.model_validate(t) for t in templates],
        total=len(templates),
    )


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(
    template_id: str,
    db: AsyncSession = Depends(get_db),
) -> TemplateResponse:
    """
    Get a template with its workflow body.
    """
    template = await TemplateService(db).get_template(template_id)
    return TemplateResponse.model_validate(template)


@router.post(
    "/{template_id}/instantiate",
    response_model=WorkflowResponse,
    status_code=status.HTTP_201_CREATED,
)
async def instantiate_template(
    template_id: str,
    request: Optional[TemplateInstantiate] = None,
    workspace_id: str = Depends(get_workspace_id),
    db: AsyncSession = Depends(get_db),
) -> WorkflowResponse:
    """
    Create a new workflow from a template. Supplied fields replace the
    template's value for that field; omitted fields use the template's.
    """
    overrides = request.model_dump(exclude_none=True) if request else {}
    wf = await TemplateService(db).create_workflow_from_template(template_id, workspace_id, overrides)
    return WorkflowResponse.model_validate(wf)
