"""Workflow template model."""

from typing import Optional

from sqlalchemy import JSON
from sqlalchemy.orm import Mapped, mapped_column

from db.base import BaseModel


class WorkflowTemplate(BaseModel):
    """Reusable workflow body that can be instantiated into a new Workflow.

    ``template`` holds the same shape as a workflow definition:
    trigger, conditions, actions, nodes, edges.
    """

    __tablename__ = "workflow_templates"

    name: Mapped[str] = mapped_column(nullable=False)
    description: Mapped[Optional[str]] = mapped_column(nullable=True)
    category: Mapped[str] = mapped_column(nullable=False, index=True)
    template: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    thumbnail: Mapped[Optional[str]] = mapped_column(nullable=True)
    is_public: Mapped[bool] = mapped_column(default=False, index=True)
    rating: Mapped[float] = mapped_column(default=0.0)
    usage_count: Mapped[int] = mapped_column(default=0)
