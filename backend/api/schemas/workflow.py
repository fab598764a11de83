"""Workflow schemas."""

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional

from api.schemas.execution import ExecutionResponse
from workflow.conditions import MalformedConditionError, parse_condition


class ActionDescriptor(BaseModel):
    """One entry of a workflow's ordered action list."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(min_length=1, description="Action type tag (send_email, webhook, ...)")
    config: Dict[str, Any] = Field(default_factory=dict, description="Action-specific configuration")
    timeout: Optional[float] = Field(default=None, gt=0, description="Per-action timeout in seconds")


def _check_conditions(value: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if value:
        try:
            parse_condition(value)
        except MalformedConditionError as e:
            raise ValueError(str(e))
    return value


ConditionTree = Annotated[Optional[Dict[str, Any]], AfterValidator(_check_conditions)]


class WorkflowCreate(BaseModel):
    """Request to create a workflow."""

    name: str = Field(min_length=1, description="Workflow name")
    description: Optional[str] = Field(default=None, description="Workflow description")
    trigger: Dict[str, Any] = Field(default_factory=dict, description="Opaque trigger descriptor")
    conditions: ConditionTree = Field(default=None, description="Condition tree")
    actions: List[ActionDescriptor] = Field(default_factory=list, description="Ordered actions")
    nodes: List[Any] = Field(default_factory=list, description="Builder graph nodes")
    edges: List[Any] = Field(default_factory=list, description="Builder graph edges")
    is_active: bool = Field(default=True, description="Whether the workflow can be executed")


class WorkflowUpdate(BaseModel):
    """Request to update a workflow. Every update bumps the version."""

    name: Optional[str] = Field(default=None, min_length=1, description="Workflow name")
    description: Optional[str] = Field(default=None, description="Workflow description")
    trigger: Optional[Dict[str, Any]] = Field(default=None, description="Opaque trigger descriptor")
    conditions: ConditionTree = Field(default=None, description="Condition tree; null removes it")
    actions: Optional[List[ActionDescriptor]] = Field(default=None, description="Ordered actions")
    nodes: Optional[List[Any]] = Field(default=None, description="Builder graph nodes")
    edges: Optional[List[Any]] = Field(default=None, description="Builder graph edges")
    is_active: Optional[bool] = Field(default=None, description="Whether the workflow can be executed")


class WorkflowToggle(BaseModel):
    """Request to activate or deactivate a workflow."""

    is_active: bool = Field(description="New active flag")


class WorkflowResponse(BaseModel):
    """Workflow information response."""

    id: str = Field(description="Workflow ID")
    workspace_id: str = Field(description="Owning workspace")
    name: str = Field(description="Workflow name")
    description: Optional[str] = Field(default=None, description="Workflow description")
    trigger: Dict[str, Any] = Field(description="Opaque trigger descriptor")
    conditions: Optional[Dict[str, Any]] = Field(default=None, description="Condition tree")
    actions: List[Dict[str, Any]] = Field(description="Ordered actions")
    nodes: List[Any] = Field(description="Builder graph nodes")
    edges: List[Any] = Field(description="Builder graph edges")
    is_active: bool = Field(description="Whether the workflow can be executed")
    version: int = Field(description="Definition version")
    execution_count: int = Field(description="Settled runs")
    success_count: int = Field(description="Runs that completed")
    failure_count: int = Field(description="Runs that failed")
    last_executed_at: Optional[datetime] = Field(default=None, description="Latest settlement time")
    average_execution_time: Optional[float] = Field(default=None, description="Average run duration in ms")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")

    class Config:
        from_attributes = True


class WorkflowDetailResponse(WorkflowResponse):
    """Workflow with its most recent executions."""

    recent_executions: List[ExecutionResponse] = Field(default_factory=list, description="Newest executions")


class WorkflowListResponse(BaseModel):
    """A workspace's workflows."""

    workflows: List[WorkflowResponse] = Field(description="List of workflows")
    total: int = Field(description="Total number of workflows")
