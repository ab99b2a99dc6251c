# ABOUTME: JSON envelope helpers shared by the API routes.
# ABOUTME: Every response carries "success"; failures add an "error" message.

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException


def error_response(status_code: int, error: str, **extra: Any) -> JSONResponse:
    """Build a failure response with the standard envelope."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, **extra},
    )


async def http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    """Render HTTPException (auth failures included) in the standard envelope."""
    return error_response(exc.status_code, str(exc.detail))


async def validation_exception_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation failures as 400 in the standard envelope."""
    fields = [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
    return error_response(400, "Invalid request parameters", fields=fields)
