"""JSON envelope helpers shared by routers and exception handlers."""
from __future__ import annotations

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse

from .config import AuthMode
from .errors import AccountError, StoreError

HASHED_ENDPOINTS = [
    "GET /",
    "GET /api",
    "POST /api/register",
    "POST /api/login",
    "GET /api/users",
    "GET /api/check/:username",
    "GET /api/health",
]

DEVICE_ENDPOINTS = [
    "GET /api/users?action=test",
    "POST /api/users?action=register",
    "POST /api/users?action=login",
    "GET /api/users?action=all",
    "GET /api/users?action=androidid&username=",
]


def available_endpoints(mode: AuthMode) -> list[str]:
    return list(DEVICE_ENDPOINTS if mode is AuthMode.DEVICE else HASHED_ENDPOINTS)


def failure_key(mode: AuthMode) -> str:
    """Hashed mode reports failures under ``message``, device mode under ``error``."""

    return "error" if mode is AuthMode.DEVICE else "message"


def failure(
    mode: AuthMode,
    message: str,
    status_code: int,
    **extra: Any,
) -> JSONResponse:
    body: dict[str, Any] = {"success": False, failure_key(mode): message}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


def error_response(mode: AuthMode, exc: AccountError) -> JSONResponse:
    """Map an :class:`AccountError` onto the mode's failure envelope."""

    if isinstance(exc, StoreError) and mode is AuthMode.DEVICE:
        return failure(mode, exc.message, exc.status_code, details=exc.detail)
    return failure(mode, exc.message, exc.status_code)


def attempted_target(request: Request) -> str:
    target = request.url.path
    if request.url.query:
        target = f"{target}?{request.url.query}"
    return target


def unmatched(request: Request, mode: AuthMode) -> JSONResponse:
    """404 naming the attempted method and path plus the routes on offer."""

    described = f"Endpoint tidak ditemukan: {request.method} {attempted_target(request)}"
    body: dict[str, Any] = {
        "success": False,
        "message": described,
        "availableEndpoints": available_endpoints(mode),
    }
    if mode is AuthMode.DEVICE:
        body["error"] = "API endpoint not found"
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=body)
