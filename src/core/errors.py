"""Domain error taxonomy for task operations.

Every failure raised by the task core is a ``TaskError`` carrying a stable,
machine-readable ``TaskErrorCode``. Transport adapters map the code to an
HTTP status through ``TaskError.status_code`` and render ``to_response()``.
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ValidationError


class TaskErrorCode(StrEnum):
    """Error codes for specific error conditions."""

    # Request errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_STATUS = "INVALID_STATUS"
    INVALID_PRIORITY = "INVALID_PRIORITY"
    INVALID_ASSIGNMENT = "INVALID_ASSIGNMENT"
    PAST_DUE_DATE = "PAST_DUE_DATE"

    # Access errors
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"

    # Lookup errors
    NOT_FOUND = "NOT_FOUND"
    TASK_NOT_FOUND = "TASK_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    FAMILY_NOT_FOUND = "FAMILY_NOT_FOUND"

    # Hierarchy errors
    SUBTASK_CYCLE = "SUBTASK_CYCLE"
    MAX_SUBTASKS = "MAX_SUBTASKS"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


_STATUS_CODES: dict[TaskErrorCode, int] = {
    TaskErrorCode.VALIDATION_ERROR: 400,
    TaskErrorCode.INVALID_STATUS: 400,
    TaskErrorCode.INVALID_PRIORITY: 400,
    TaskErrorCode.INVALID_ASSIGNMENT: 400,
    TaskErrorCode.PAST_DUE_DATE: 400,
    TaskErrorCode.SUBTASK_CYCLE: 400,
    TaskErrorCode.MAX_SUBTASKS: 400,
    TaskErrorCode.UNAUTHORIZED: 401,
    TaskErrorCode.FORBIDDEN: 403,
    TaskErrorCode.NOT_FOUND: 404,
    TaskErrorCode.TASK_NOT_FOUND: 404,
    TaskErrorCode.USER_NOT_FOUND: 404,
    TaskErrorCode.FAMILY_NOT_FOUND: 404,
    TaskErrorCode.INTERNAL_ERROR: 500,
}

# Input fields whose validation failures get a dedicated code
_FIELD_ERROR_CODES: dict[str, TaskErrorCode] = {
    "status": TaskErrorCode.INVALID_STATUS,
    "priority": TaskErrorCode.INVALID_PRIORITY,
}


class ErrorResponse(BaseModel):
    """Structured error payload handed to the transport layer."""

    code: TaskErrorCode
    message: str
    entity: str
    details: Any = None
    status_code: int


class TaskError(Exception):
    """A typed task-domain failure."""

    def __init__(
        self,
        code: TaskErrorCode,
        message: str,
        *,
        entity: str = "TASK",
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.entity = entity
        self.details = details

    def __repr__(self) -> str:
        return f"TaskError(code={self.code.value!r}, message={self.message!r})"

    @property
    def status_code(self) -> int:
        """HTTP status a transport adapter should answer with."""
        return _STATUS_CODES[self.code]

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            code=self.code,
            message=self.message,
            entity=self.entity,
            details=self.details,
            status_code=self.status_code,
        )

    @classmethod
    def not_found(cls, message: str = "Task not found", details: Any = None) -> "TaskError":
        return cls(TaskErrorCode.TASK_NOT_FOUND, message, details=details)

    @classmethod
    def unauthorized(cls, message: str = "Unauthorized access", details: Any = None) -> "TaskError":
        return cls(TaskErrorCode.UNAUTHORIZED, message, entity="USER", details=details)

    @classmethod
    def forbidden(cls, message: str = "Operation not allowed", details: Any = None) -> "TaskError":
        return cls(TaskErrorCode.FORBIDDEN, message, details=details)

    @classmethod
    def validation(cls, message: str, details: Any = None) -> "TaskError":
        return cls(TaskErrorCode.VALIDATION_ERROR, message, details=details)

    @classmethod
    def subtask_cycle(cls, message: str = "Circular subtask reference detected", details: Any = None) -> "TaskError":
        return cls(TaskErrorCode.SUBTASK_CYCLE, message, details=details)

    @classmethod
    def max_subtasks(cls, message: str = "Maximum number of subtasks reached", details: Any = None) -> "TaskError":
        return cls(TaskErrorCode.MAX_SUBTASKS, message, details=details)

    @classmethod
    def internal(cls, message: str = "An unexpected error occurred", details: Any = None) -> "TaskError":
        return cls(TaskErrorCode.INTERNAL_ERROR, message, details=details)

    @classmethod
    def from_validation_error(cls, error: ValidationError) -> "TaskError":
        """Translate a pydantic ValidationError into a task error.

        Enum failures on ``status``/``priority`` keep their dedicated codes so
        callers can tell "bad status" apart from a generally malformed request.
        """
        details = error.errors(include_url=False, include_context=False, include_input=False)
        for item in details:
            loc = item.get("loc") or ()
            field = str(loc[0]) if loc else ""
            code = _FIELD_ERROR_CODES.get(field)
            if code is not None:
                return cls(code, f"Invalid {field} value", details=details)

        first = details[0] if details else {}
        loc = ".".join(str(part) for part in first.get("loc", ())) or "request"
        return cls.validation(f"Invalid {loc}: {first.get('msg', 'validation failed')}", details=details)
