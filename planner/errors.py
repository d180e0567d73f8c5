"""Standardized error handling for the planner API.

This module provides:
1. Custom exception classes for domain-specific errors
2. Exception handlers for FastAPI
3. The standard error response model

Usage:
    from planner.errors import NotFoundError

    if not event:
        raise NotFoundError(detail="Event not found", event_id=event_id)

    # in main.py:
    register_exception_handlers(app)
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str
    detail: str | None = None
    error_code: str | None = None
    context: dict[str, Any] | None = None


class APIError(Exception):
    """Base class for API errors."""

    status_code: int = 500
    error: str = "internal_error"
    detail: str = "An unexpected error occurred"

    def __init__(
        self,
        detail: str | None = None,
        error_code: str | None = None,
        **context: Any,
    ) -> None:
        self.detail = detail or self.__class__.detail
        self.error_code = error_code
        self.context = context if context else None
        super().__init__(self.detail)

    def to_response(self) -> ErrorResponse:
        """Convert exception to error response model."""
        return ErrorResponse(
            error=self.error,
            detail=self.detail,
            error_code=self.error_code,
            context=self.context,
        )


class BadRequestError(APIError):
    """Bad request error (400)."""

    status_code = 400
    error = "bad_request"
    detail = "Invalid request"


class UnauthorizedError(APIError):
    """Unauthorized error (401)."""

    status_code = 401
    error = "unauthorized"
    detail = "Authentication required"


class NotFoundError(APIError):
    """Resource not found error (404)."""

    status_code = 404
    error = "not_found"
    detail = "Resource not found"


class ConflictError(APIError):
    """Uniqueness conflict (409), e.g. a username that is already taken."""

    status_code = 409
    error = "conflict"
    detail = "Resource already exists"


class DatabaseError(APIError):
    """Database error (500)."""

    status_code = 500
    error = "database_error"
    detail = "Database operation failed"


class ServiceUnavailableError(APIError):
    """Service unavailable error (503)."""

    status_code = 503
    error = "service_unavailable"
    detail = "Service temporarily unavailable"


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API errors."""
    logger.warning(
        "API error: %s (status=%d, path=%s)",
        exc.detail,
        exc.status_code,
        request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(exclude_none=True),
    )


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        msg = err.get("msg", "invalid value")
        loc = [p for p in err.get("loc", ()) if p != "body"]
        if err.get("type") == "json_invalid":
            # loc holds the character offset of the parse failure
            parts.append(f"{msg} at offset {loc[0]}" if loc else msg)
            continue
        path = ".".join(str(p) for p in loc)
        parts.append(f"{path}: {msg}" if path else msg)
    return "; ".join(parts) or "Invalid request body"


def _requires_session(request: Request) -> bool:
    """True when the matched route depends on ``require_user``."""
    from planner.dependencies import require_user  # circular import

    dependant = getattr(request.scope.get("route"), "dependant", None)
    pending = list(dependant.dependencies) if dependant else []
    while pending:
        dep = pending.pop()
        if dep.call is require_user:
            return True
        pending.extend(dep.dependencies)
    return False


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 bad_request.

    FastAPI parses the JSON body before resolving dependencies, so a route
    that requires a session checks it here first and answers 401 when the
    caller is not signed in.
    """
    if _requires_session(request):
        from planner.dependencies import get_current_user, get_session_token  # circular import

        try:
            user = await get_current_user(get_session_token(request))
        except APIError as e:
            return await api_error_handler(request, e)
        if user is None:
            return await api_error_handler(request, UnauthorizedError())

    error = BadRequestError(detail=_describe_validation_errors(exc))
    return await api_error_handler(request, error)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle router-level HTTP errors (unknown path, wrong method) with the standard format."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=_status_to_error_type(exc.status_code),
            detail=str(exc.detail),
        ).model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


def _status_to_error_type(status_code: int) -> str:
    """Map HTTP status code to error type string."""
    mapping = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        422: "validation_error",
        500: "internal_error",
        503: "service_unavailable",
    }
    return mapping.get(status_code, "error")


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
