"""Constants and enums for the workflow automation engine."""

from enum import Enum


class ExecutionStatus(str, Enum):
    """Workflow execution status."""

    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class StepStatus(str, Enum):
    """Outcome of a single step in an execution log."""

    SUCCESS = "success"
    FAILED = "failed"
    NOT_MET = "not_met"


class ActionType(str, Enum):
    """Action tags a workflow may dispatch."""

    SEND_EMAIL = "send_email"
    SEND_NOTIFICATION = "send_notification"
    CREATE_ALERT = "create_alert"
    UPDATE_WIDGET = "update_widget"
    WEBHOOK = "webhook"
    SLACK_MESSAGE = "slack_message"


class LogicalOperator(str, Enum):
    """Composite condition operators."""

    AND = "AND"
    OR = "OR"


class ComparisonOperator(str, Enum):
    """Leaf condition operators."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"


CONDITION_STEP_KIND = "condition"
ENGINE_FAULT_MESSAGE = "Internal engine error"
