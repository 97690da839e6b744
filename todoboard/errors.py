"""
Error taxonomy for the todo board.

Every failure the core can report is one of these. Each carries the HTTP
status the request surface renders it with and a stable ``code`` string so
clients can tell the kinds apart.
"""
from typing import Any, Dict, Optional


class TodoBoardError(Exception):
    """Base class for all todo board failures."""
    status = 500
    code = "TodoBoardError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code}


class MissingField(TodoBoardError):
    """Client input incomplete: a required field is absent or empty."""
    status = 400
    code = "MissingField"

    def __init__(self, field: str):
        super().__init__(f"{field} is required")
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["field"] = self.field
        return data


class InvalidIdentifier(TodoBoardError):
    """Identifier is not well-formed for the store."""
    status = 400
    code = "InvalidIdentifier"

    def __init__(self, value: Any):
        super().__init__(f"Invalid task id: {value!r}")
        self.value = value


class NotFound(TodoBoardError):
    """Referenced task does not exist (zero documents matched)."""
    status = 404
    code = "NotFound"

    def __init__(self, task_id: str):
        super().__init__("Task not found")
        self.task_id = task_id


class StoreUnavailable(TodoBoardError):
    """The durable store could not be reached. Safe to retry."""
    status = 500
    code = "StoreUnavailable"

    def __init__(self, operation: str, reason: Optional[str] = None):
        message = f"Failed to {operation}"
        super().__init__(message)
        self.operation = operation
        self.reason = reason
