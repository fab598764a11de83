"""Base service with workspace-scoped queries.

Workflow and template services inherit from this. Statistics and
settlement writes do not go through here; they are single UPDATE
statements in the concrete services.
"""

from typing import Any, Generic, Optional, Sequence, Type, TypeVar
from uuid import uuid4

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.base import BaseModel

ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseService(Generic[ModelType]):
    """Generic persistence helpers for one model.

    Usage:
        class TemplateService(BaseService[WorkflowTemplate]):
            def __init__(self, db: AsyncSession):
                super().__init__(WorkflowTemplate, db)
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    # ─── Read ──────────────────────────────────────────────

    async def get_by_id(self, id: str) -> Optional[ModelType]:
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_by_id_and_workspace(self, id: str, workspace_id: str) -> Optional[ModelType]:
        """Get a record only if it belongs to the workspace."""
        result = await self.db.execute(
            select(self.model).where(
                self.model.id == id,
                self.model.workspace_id == workspace_id,
            )
        )
        return result.scalar_one_or_none()

    async def find(
        self,
        workspace_id: Optional[str] = None,
        limit: Optional[int] = None,
        order_by: str = "created_at",
        filters: Optional[dict[str, Any]] = None,
    ) -> Sequence[ModelType]:
        """Records matching equality filters, newest ``order_by`` first.

        Args:
            workspace_id: Restrict to one workspace (models with a workspace_id column)
            limit: Maximum number of rows, None for all
            order_by: Column to sort on, descending
            filters: Column name -> required value
        """
        query = select(self.model)
        if workspace_id is not None:
            query = query.where(self.model.workspace_id == workspace_id)
        for column, value in (filters or {}).items():
            query = query.where(getattr(self.model, column) == value)

        query = query.order_by(getattr(self.model, order_by).desc())
        if limit is not None:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return result.scalars().all()

    # ─── Write ─────────────────────────────────────────────

    async def create(self, data: dict[str, Any]) -> ModelType:
        """Insert a record and return it with server state loaded."""
        data.setdefault("id", str(uuid4()))
        instance = self.model(**data)
        self.db.add(instance)
        await self.db.flush()
        await self.db.refresh(instance)
        return instance

    async def hard_delete(self, id: str) -> bool:
        """Permanently delete a record.

        Returns:
            True if deleted, False if not found
        """
        result = await self.db.execute(delete(self.model).where(self.model.id == id))
        await self.db.flush()
        return (result.rowcount or 0) > 0
