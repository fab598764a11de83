"""Custom exceptions for the workflow automation engine."""


class AutomationException(Exception):
    """Base exception for the workflow automation engine."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code.

        Args:
            message: Exception message
            status_code: HTTP status code
        """
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundError(AutomationException):
    """Workflow, execution, or template id does not resolve."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize NotFoundError with 404 status code."""
        super().__init__(message, 404)


class InvalidStateError(AutomationException):
    """Operation refused because of the target's current state."""

    def __init__(self, message: str = "Invalid state"):
        """Initialize InvalidStateError with 400 status code."""
        super().__init__(message, 400)


class ValidationError(AutomationException):
    """Validation error exception."""

    def __init__(self, message: str = "Validation failed"):
        """Initialize ValidationError with 422 status code."""
        super().__init__(message, 422)


class ActionError(AutomationException):
    """A single action failed; recorded on the execution, never raised to callers."""

    def __init__(self, message: str = "Action failed"):
        super().__init__(message, 502)


class UnknownActionTypeError(ActionError):
    """Action descriptor carries a type tag with no registered handler."""

    def __init__(self, action_type):
        self.action_type = action_type
        super().__init__(f"Unknown action type: {action_type}")
