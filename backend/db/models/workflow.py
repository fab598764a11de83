"""Workflow definition model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import BaseModel


class Workflow(BaseModel):
    """A stored trigger + condition tree + ordered action list.

    Attributes:
        id: Unique identifier (UUID string)
        workspace_id: Opaque partition key, never interpreted
        name: Workflow name
        description: Optional description
        trigger: Opaque trigger descriptor
        conditions: Condition tree; None means "always met"
        actions: Ordered list of action descriptors
        nodes / edges: Builder graph, stored and returned opaquely
        is_active: Whether the workflow may be executed
        version: Starts at 1, bumped by exactly one on every update
        execution_count / success_count / failure_count: Run statistics
        last_executed_at: Settlement time of the latest run
        average_execution_time: Running average run duration in ms
    """

    __tablename__ = "workflows"

    workspace_id: Mapped[str] = mapped_column(nullable=False, index=True)
    name: Mapped[str] = mapped_column(nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(nullable=True)
    trigger: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    conditions: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    actions: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    nodes: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    edges: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(default=True, index=True)
    version: Mapped[int] = mapped_column(default=1)

    execution_count: Mapped[int] = mapped_column(default=0)
    success_count: Mapped[int] = mapped_column(default=0)
    failure_count: Mapped[int] = mapped_column(default=0)
    last_executed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    average_execution_time: Mapped[Optional[float]] = mapped_column(nullable=True)

    executions: Mapped[list["WorkflowExecution"]] = relationship(
        "WorkflowExecution",
        back_populates="workflow",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )
