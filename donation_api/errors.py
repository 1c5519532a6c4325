from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from donation_kernel.exceptions import (
    AuthError,
    ConflictError,
    DonationKernelError,
    InsufficientRoleError,
    NotFoundError,
    ValidationError,
)
from donation_kernel.logging_config import get_logger

logger = get_logger("api.errors")


def _get_request_id(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


def status_for(exc: DonationKernelError) -> int:
    """HTTP status for a kernel error category."""
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ConflictError):
        return 409
    if isinstance(exc, InsufficientRoleError):
        return 403
    if isinstance(exc, AuthError):
        return 401
    return 500


def _payload(request: Request, detail: Any, code: str) -> dict[str, Any]:
    payload: dict[str, Any] = {"detail": detail, "code": code}
    request_id = _get_request_id(request)
    if request_id:
        payload["request_id"] = request_id
    return payload


def register_exception_handlers(app: FastAPI) -> None:
    """Register platform-wide exception handlers on a FastAPI app.

    Every error body carries FastAPI's ``detail`` plus a stable ``code``.
    """

    @app.exception_handler(DonationKernelError)
    async def _kernel_error_handler(request: Request, exc: DonationKernelError) -> Response:
        status_code = status_for(exc)
        if status_code == 500:
            logger.error("kernel_error_unmapped", extra={"error_code": exc.code})
        headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
        return JSONResponse(
            status_code=status_code,
            content=_payload(request, str(exc), exc.code),
            headers=headers,
        )

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException) -> Response:
        headers = dict(exc.headers or {})
        return JSONResponse(
            status_code=int(exc.status_code),
            content=_payload(request, exc.detail, f"http.{exc.status_code}"),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
        return JSONResponse(
            status_code=422,
            content=_payload(request, exc.errors(), "http.validation_error"),
        )

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception) -> Response:
        logger.exception("unhandled_exception")
        return JSONResponse(
            status_code=500,
            content=_payload(request, "Internal Server Error", "internal.unhandled"),
        )
