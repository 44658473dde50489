"""Map dispatch errors to the JSON failure envelope."""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from lead_dispatch.domain.errors import DispatchError
from lead_dispatch.infrastructure.logging.logger import logger


def error_response(status_code: int, message: str, upstream_body: Any = None) -> JSONResponse:
    """
    Build the failure envelope returned to clients.

    Args:
        status_code: HTTP status to answer with
        message: Human-readable error message
        upstream_body: Optional upstream payload mirrored under 'zoho'

    Returns:
        JSONResponse with ``{"success": false, "message", "zoho"?}``
    """
    content: dict[str, Any] = {"success": False, "message": message}
    if upstream_body is not None:
        content["zoho"] = upstream_body
    return JSONResponse(status_code=status_code, content=content)


async def handle_dispatch_error(request: Request, exc: DispatchError) -> JSONResponse:
    """Render a DispatchError with its mapped status code."""
    logger.warning(
        f"component='http' | path={request.url.path!r} | error={type(exc).__name__} "
        f"| status={exc.status_code} | message={exc.message!r}"
    )
    return error_response(exc.status_code, exc.message, exc.body)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render malformed request bodies as client errors in the same envelope."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": "Invalid request body",
            "errors": jsonable_errors(exc),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Keep only the serializable parts of pydantic error entries."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


def register_error_handlers(app: FastAPI) -> None:
    """
    Register exception handlers on the application.

    Args:
        app: FastAPI application
    """
    app.add_exception_handler(DispatchError, handle_dispatch_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
