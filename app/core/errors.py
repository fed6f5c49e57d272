from __future__ import annotations

from fastapi import HTTPException


class WorkflowError(HTTPException):
    """
    Base for errors raised by the publication workflow.

    Services raise these directly (they are HTTPExceptions), so the API layer
    surfaces them without translation. All of them are raised before any
    mutation is flushed.
    """

    status_code: int = 400
    code: str = "workflow_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(status_code=self.status_code, detail={"code": self.code, "message": message})


class NotFound(WorkflowError):
    status_code = 404
    code = "not_found"


class Forbidden(WorkflowError):
    status_code = 403
    code = "forbidden"


class EntitlementDenied(WorkflowError):
    status_code = 403
    code = "LISTING_LIMIT_REACHED"


class InvalidRequest(WorkflowError):
    status_code = 422
    code = "invalid_request"


class Conflict(WorkflowError):
    status_code = 409
    code = "conflict"
