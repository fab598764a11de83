"""Database models for the workflow automation engine.

This module imports all models to ensure they are registered
with SQLAlchemy's declarative base.
"""

from db.models.workflow import Workflow
from db.models.execution import WorkflowExecution
from db.models.template import WorkflowTemplate

__all__ = [
    "Workflow",
    "WorkflowExecution",
    "WorkflowTemplate",
]
