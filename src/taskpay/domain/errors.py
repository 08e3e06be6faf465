"""Error taxonomy shared by the engines, the service layer and the adapters."""

from __future__ import annotations

from typing import Iterable


class TaskPayError(Exception):
    """Base class for every classified failure."""

    code = "ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(TaskPayError):
    """Caller-supplied input violates a guard."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, fields: Iterable[str] = ()):
        self.fields = tuple(fields)
        super().__init__(message)

    @classmethod
    def missing(cls, fields: Iterable[str]) -> ValidationError:
        names = tuple(fields)
        return cls(f"Missing or invalid required field(s): {', '.join(names)}", names)


class IllegalTransitionError(TaskPayError):
    """Requested transition does not apply to the entity's current status."""

    code = "ILLEGAL_TRANSITION"

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = str(getattr(from_status, "value", from_status))
        self.to_status = str(getattr(to_status, "value", to_status))
        self.reason = reason
        msg = f"Invalid transition from '{self.from_status}' to '{self.to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class NotFoundError(TaskPayError):
    """Referenced entity does not exist in the current collection."""

    code = "NOT_FOUND"

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} '{entity_id}' not found; refresh and try again")


class AuthorizationError(TaskPayError):
    """Caller lacks permission for the requested operation."""

    code = "ACCESS_DENIED"


class StorageUnavailable(TaskPayError):
    """Persistence or image store could not complete the operation."""

    code = "STORAGE_UNAVAILABLE"
