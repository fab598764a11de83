"""Workflow template schemas."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Optional

from api.schemas.workflow import ActionDescriptor, ConditionTree


class TemplateResponse(BaseModel):
    """Workflow template response."""

    id: str = Field(description="Template ID")
    name: str = Field(description="Template name")
    description: Optional[str] = Field(default=None, description="Template description")
    category: str = Field(description="Template category")
    template: Dict[str, Any] = Field(description="Workflow body: trigger, conditions, actions, nodes, edges")
    thumbnail: Optional[str] = Field(default=None, description="Preview image URL")
    is_public: bool = Field(description="Listed in the public library")
    rating: float = Field(description="Average rating")
    usage_count: int = Field(description="Number of instantiations")
    created_at: datetime = Field(description="Creation timestamp")

    class Config:
        from_attributes = True


class TemplateListResponse(BaseModel):
    """Public templates, best rated first."""

    templates: List[TemplateResponse] = Field(description="List of templates")
    total: int = Field(description="Number of templates")


class TemplateInstantiate(BaseModel):
    """Field-by-field overrides applied when instantiating a template."""

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    trigger: Optional[Dict[str, Any]] = None
    conditions: ConditionTree = None
    actions: Optional[List[ActionDescriptor]] = None
    nodes: Optional[List[Any]] = None
    edges: Optional[List[Any]] = None
