"""Execution schemas."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Optional


class ExecuteRequest(BaseModel):
    """Request to fire a workflow."""

    trigger_data: Dict[str, Any] = Field(default_factory=dict, description="Payload that fired the workflow")


class ExecutionResponse(BaseModel):
    """Execution run information response."""

    id: str = Field(description="Execution ID")
    workflow_id: str = Field(description="Workflow ID")
    trigger_data: Optional[Any] = Field(default=None, description="Snapshot of the firing payload")
    status: str = Field(description="Execution status (RUNNING, COMPLETED, FAILED)")
    steps: List[Dict[str, Any]] = Field(default_factory=list, description="Ordered step log")
    started_at: Optional[datetime] = Field(default=None, description="Execution start timestamp")
    completed_at: Optional[datetime] = Field(default=None, description="Execution completion timestamp")
    duration: Optional[int] = Field(default=None, description="Execution duration in milliseconds")
    error: Optional[str] = Field(default=None, description="Error message if execution failed")
    error_step: Optional[str] = Field(default=None, description="Step kind that failed")
    retry_count: int = Field(default=0, description="Number of retries that led to this execution")

    class Config:
        from_attributes = True


class ExecutionListResponse(BaseModel):
    """Executions of one workflow, newest first."""

    executions: List[ExecutionResponse] = Field(description="List of executions")
    total: int = Field(description="Number of executions returned")
