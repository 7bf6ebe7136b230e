"""
Platform-wide exception hierarchy.

Services raise these; the app-level handlers registered by
``taskflow.utils.errors.register_error_handlers`` turn them into JSON
responses with a stable machine-readable code.

Usage:
    from taskflow.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Task", resource_id="Login form")
    raise ValidationError("Task name is required", details={"name": "required"})
"""


class AuthenticationRequired(Exception):
    """Raised when a call carries no usable caller identity. Maps to 401."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class PermissionDenied(Exception):
    """Raised when the caller is not in any group permitted for an action.

    Maps to HTTP 403.

    Args:
        username: The caller.
        action: What was attempted (e.g. "release", "create task").
        resource: Optional entity the action targeted.
    """

    def __init__(self, username: str, action: str, resource: str | None = None) -> None:
        self.username = username
        self.action = action
        self.resource = resource
        msg = f"User {username} is not permitted to {action}"
        if resource:
            msg += f" ({resource})"
        super().__init__(msg)


class NotFoundError(Exception):
    """Raised when a requested resource does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Task", "Application").
        resource_id: The key that was looked up.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" {resource_id!r}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when input is missing or malformed. Maps to HTTP 400.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class ConflictError(Exception):
    """Raised when an operation would duplicate a unique key. Maps to HTTP 409.

    Args:
        resource: Model name.
        field: The unique field that would be duplicated.
        value: The conflicting value.
    """

    def __init__(self, resource: str, field: str, value: str | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        msg = f"{resource} with {field}={value!r} already exists"
        super().__init__(msg)


class TransitionConflict(Exception):
    """Raised when a task is not in the state a request expects.

    Covers both a lost race (another request moved the task first) and a
    target state that has no edge from the current one. Maps to HTTP 409;
    the caller must reload the task before retrying.
    """

    def __init__(self, task_name: str, current: str, reason: str) -> None:
        self.task_name = task_name
        self.current_state = current
        self.reason = reason
        super().__init__(
            f"Task {task_name!r} (state={current}): {reason}. "
            "Reload the task and try again."
        )
