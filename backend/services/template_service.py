"""Workflow template service: browse templates and instantiate them."""

import copy
import logging
from typing import Any, Optional, Sequence

from sqlalchemy import select, update as sa_update
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import NotFoundError
from db.models.template import WorkflowTemplate
from db.models.workflow import Workflow
from services.base import BaseService
from services.workflow_service import WorkflowService

logger = logging.getLogger(__name__)

# Fields a caller may override when instantiating; each is replaced whole.
OVERRIDABLE_FIELDS = ("name", "description", "trigger", "actions", "conditions", "nodes", "edges")


class TemplateService(BaseService[WorkflowTemplate]):
    """Service for workflow templates."""

    def __init__(self, db: AsyncSession):
        super().__init__(WorkflowTemplate, db)

    async def list_templates(self, category: Optional[str] = None) -> Sequence[WorkflowTemplate]:
        """Public templates, best rated first, then most used."""
        query = select(WorkflowTemplate).where(WorkflowTemplate.is_public.is_(True))
        if category:
            query = query.where(WorkflowTemplate.category == category)
        query = query.order_by(
            WorkflowTemplate.rating.desc(),
            WorkflowTemplate.usage_count.desc(),
        )
        result = await self.db.execute(query)
        return result.scalars().all()

    async def get_template(self, template_id: str) -> WorkflowTemplate:
        """Get a template by id.

        Raises:
            NotFoundError: If the id does not resolve
        """
        template = await self.get_by_id(template_id)
        if not template:
            raise NotFoundError("Template not found")
        return template

    async def increment_usage(self, template_id: str) -> None:
        """Atomically bump the usage counter."""
        await self.db.execute(
            sa_update(WorkflowTemplate)
            .where(WorkflowTemplate.id == template_id)
            .values(usage_count=WorkflowTemplate.usage_count + 1)
            .execution_options(synchronize_session=False)
        )

    async def create_workflow_from_template(
        self,
        template_id: str,
        workspace_id: str,
        overrides: Optional[dict[str, Any]] = None,
    ) -> Workflow:
        """Instantiate a template into a new workflow.

        Each overridable field comes either entirely from ``overrides`` or
        entirely from the template; nested values are never merged.
        """
        template = await self.get_template(template_id)
        body = copy.deepcopy(template.template or {})
        overrides = overrides or {}

        await self.increment_usage(template_id)

        defaults = {
            "name": template.name,
            "description": template.description,
            "trigger": body.get("trigger"),
            "actions": body.get("actions"),
            "conditions": body.get("conditions"),
            "nodes": body.get("nodes"),
            "edges": body.get("edges"),
        }
        fields = {
            key: overrides[key] if overrides.get(key) is not None else defaults[key]
            for key in OVERRIDABLE_FIELDS
        }

        wf = await WorkflowService(self.db).create_workflow(workspace_id=workspace_id, **fields)
        logger.info(f"Workflow {wf.id} created from template {template_id}")
        return wf

    async def upsert_template(self, data: dict[str, Any]) -> WorkflowTemplate:
        """Insert a template by id unless it already exists."""
        existing = await self.get_by_id(data["id"])
        if existing:
            return existing
        return await self.create(dict(data))
