"""Exception handlers rendering the JSON error envelope.

Every error response, whether produced by a route handler or by the
authorization middleware, has the same shape:

    {"success": false, "message": "...", "errorCode": "...", "hint": "..."}

``hint`` is omitted when there is nothing to suggest. Additional details
carried by the exception are merged into the top level of the body.
"""

from typing import TYPE_CHECKING, Any, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from localpassengers.config import settings
from localpassengers.core.errors.codes import ErrorCode
from localpassengers.core.errors.exceptions import AppException


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()

GENERIC_PRODUCTION_MESSAGE = "Something went wrong. Please try again later."


class FieldError(BaseModel):
    """Represents a single field validation error."""

    field: str
    message: str
    type: str | None = None


class ErrorEnvelope(BaseModel):
    """Error response body shared by every failing request."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    success: bool = False
    message: str
    error_code: str = Field(alias="errorCode")
    hint: str | None = None
    errors: list[FieldError] | None = None
    request_id: str | None = Field(default=None, alias="requestId")


def _get_request_id(request: Request) -> str | None:
    """Extract the request ID from request state if available."""
    return getattr(request.state, "request_id", None)


def build_error_response(request: Request, exc: AppException) -> JSONResponse:
    """Render an application exception as a JSON error envelope.

    Used by the exception handlers and by middleware that rejects requests
    before they reach a route.
    """
    content: dict[str, Any] = ErrorEnvelope(
        message=exc.message,
        error_code=str(exc.error_code),
        hint=exc.hint,
        request_id=_get_request_id(request),
    ).model_dump(by_alias=True, exclude_none=True)

    for key, value in exc.details.items():
        if key not in content:
            content[key] = jsonable_encoder(value)

    return JSONResponse(status_code=exc.status_code, content=content)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle application-specific exceptions."""
    logger.warning(
        "app_exception",
        error_code=str(exc.error_code),
        message=exc.message,
        status_code=exc.status_code,
        path=str(request.url.path),
    )
    return build_error_response(request, exc)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with field-level detail."""
    errors: list[FieldError] = []

    for error in exc.errors():
        loc = error.get("loc", ())
        # Skip "body" prefix in field path
        field_parts = [str(part) for part in loc if part != "body"]
        field = ".".join(field_parts) if field_parts else "unknown"

        errors.append(
            FieldError(
                field=field,
                message=error.get("msg", "Invalid value"),
                type=error.get("type"),
            )
        )

    logger.warning(
        "validation_error",
        path=str(request.url.path),
        error_count=len(errors),
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorEnvelope(
            message="Validation failed",
            error_code=ErrorCode.VALIDATION_ERROR,
            errors=errors,
            request_id=_get_request_id(request),
        ).model_dump(by_alias=True, exclude_none=True),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions.

    In production the client gets a generic message and the log line
    carries no traceback. Elsewhere both carry the real error.
    """
    if settings.is_production:
        logger.error(
            "unhandled_exception",
            path=str(request.url.path),
            error_type=type(exc).__name__,
        )
        message = GENERIC_PRODUCTION_MESSAGE
    else:
        logger.exception(
            "unhandled_exception",
            path=str(request.url.path),
            error_type=type(exc).__name__,
        )
        message = str(exc) or type(exc).__name__

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorEnvelope(
            message=message,
            error_code=ErrorCode.INTERNAL_ERROR,
            request_id=_get_request_id(request),
        ).model_dump(by_alias=True, exclude_none=True),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Call this function during app initialization:

        app = FastAPI()
        register_exception_handlers(app)
    """
    app.add_exception_handler(
        AppException, cast("ExceptionHandler", app_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast("ExceptionHandler", validation_exception_handler)
    )
    app.add_exception_handler(Exception, generic_exception_handler)
