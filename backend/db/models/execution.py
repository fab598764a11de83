"""Workflow execution model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.constants import ExecutionStatus
from db.base import BaseModel, utcnow


class WorkflowExecution(BaseModel):
    """One timestamped run of a Workflow against a trigger payload.

    Attributes:
        id: Unique identifier (UUID string)
        workflow_id: Foreign key to Workflow
        trigger_data: Snapshot of the firing payload, never mutated
        status: RUNNING, COMPLETED or FAILED
        steps: Ordered step log, written once at settlement
        started_at: Creation timestamp of the run
        completed_at: Settlement timestamp
        duration: Run duration in milliseconds
        error: Error message when FAILED
        error_step: Step kind that failed, if an action failed
        retry_count: Number of retries that led to this execution
    """

    __tablename__ = "workflow_executions"

    workflow_id: Mapped[str] = mapped_column(
        ForeignKey("workflows.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    trigger_data: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    status: Mapped[str] = mapped_column(
        default=ExecutionStatus.RUNNING.value, index=True
    )
    steps: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    duration: Mapped[Optional[int]] = mapped_column(nullable=True)
    error: Mapped[Optional[str]] = mapped_column(nullable=True)
    error_step: Mapped[Optional[str]] = mapped_column(nullable=True)
    retry_count: Mapped[int] = mapped_column(default=0)

    workflow: Mapped["Workflow"] = relationship(
        "Workflow", back_populates="executions", lazy="raise"
    )
