"""Error kinds raised by the review and points engine."""

from __future__ import annotations

from typing import Any, Optional


class PortalError(Exception):
    """Base class for caller-visible failures."""

    kind = "error"

    def __init__(self, detail: str, status_code: int = 400, *, record_id: Any = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
        self.record_id = record_id

    def to_detail(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.kind, "message": self.detail}
        if self.record_id is not None:
            body["record_id"] = str(self.record_id)
        return body


class ValidationError(PortalError):
    """A category-schema or required-field violation."""

    kind = "validation_error"

    def __init__(self, field: str, detail: Optional[str] = None, *, record_id: Any = None) -> None:
        super().__init__(detail or f"Invalid or missing field: {field}", status_code=422, record_id=record_id)
        self.field = field

    def to_detail(self) -> dict[str, Any]:
        body = super().to_detail()
        body["field"] = self.field
        return body


class ForbiddenError(PortalError):
    """The actor is not allowed to perform the operation."""

    kind = "forbidden"

    def __init__(self, detail: str = "Operation not permitted.", *, record_id: Any = None) -> None:
        super().__init__(detail, status_code=403, record_id=record_id)


class NotFoundError(PortalError):
    """Unknown achievement, teacher, department or grant."""

    kind = "not_found"

    def __init__(self, detail: str, *, record_id: Any = None) -> None:
        super().__init__(detail, status_code=404, record_id=record_id)


class ConflictError(PortalError):
    """A concurrent transition won the race, or the record is in the wrong state."""

    kind = "conflict"

    def __init__(self, detail: str, *, record_id: Any = None) -> None:
        super().__init__(detail, status_code=409, record_id=record_id)


class DependencyError(PortalError):
    """The data store or an external collaborator is unavailable."""

    kind = "dependency_error"

    def __init__(self, detail: str, *, record_id: Any = None) -> None:
        super().__init__(detail, status_code=503, record_id=record_id)
