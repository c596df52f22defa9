"""Workflow rule violations and the FastAPI handlers that render them.

Every error leaves the API as ``{"error": {"code", "message"}}``; request
body validation failures add a ``details`` list with the offending fields.
"""


import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base for errors raised by services and domain mutators."""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class NotFoundError(AppException):
    """Unknown purchase, workflow or document id."""

    def __init__(self, entity: str, entity_id: str | None = None):
        self.entity = entity
        self.entity_id = entity_id
        where = f" '{entity_id}'" if entity_id else ""
        super().__init__(f"{entity}{where} not found", status_code=404, code="NOT_FOUND")


class ValidationError(AppException):
    """Malformed input: stage out of range, unknown key, unknown document type."""

    def __init__(self, message: str):
        super().__init__(message, status_code=422, code="VALIDATION_ERROR")


class StateConflictError(AppException):
    """The request is well-formed but does not fit the workflow's current shape.

    Raised e.g. for a checklist key that lives in the inactive registration
    branch, or in an optional stage this purchase does not have.
    """

    def __init__(self, message: str):
        super().__init__(message, status_code=409, code="STATE_CONFLICT")


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def error_response(status_code: int, code: str, message: str, details: list | None = None) -> JSONResponse:
    error: dict = {"code": code, "message": message}
    if details:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error})


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error envelope handlers to the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        logger.debug("%s %s rejected: %s", request.method, request.url.path, exc.message)
        return error_response(exc.status_code, exc.code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {"field": ".".join(str(p) for p in err["loc"][1:]), "message": err["msg"]}
            for err in exc.errors()
        ]
        return error_response(422, "VALIDATION_ERROR", "Request validation failed", details)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return error_response(404, "NOT_FOUND", "Resource not found")
        return error_response(exc.status_code, "HTTP_ERROR", str(exc.detail))
