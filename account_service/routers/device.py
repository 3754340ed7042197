"""Device-bound endpoints: one dispatcher keyed on the ``action`` query parameter."""
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from ..config import AuthMode
from ..dependencies import get_service, json_body
from ..responses import unmatched
from ..schemas import DeviceCredentials, utc_timestamp
from ..security import truncate_device_id
from ..service import AccountService

router = APIRouter(tags=["device"])


async def _register(service: AccountService, body: Any) -> JSONResponse:
    payload = DeviceCredentials.from_body(body)
    registration = await service.register(payload.username, payload.password, payload.android_id)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={
            "success": True,
            "message": "User berhasil didaftarkan",
            "username": registration.user.username,
            "androidId": truncate_device_id(payload.android_id),
        },
    )


async def _login(service: AccountService, body: Any) -> JSONResponse:
    payload = DeviceCredentials.from_body(body)
    user = await service.login(payload.username, payload.password, payload.android_id)
    return JSONResponse(
        content={"success": True, "message": "Login berhasil", "username": user.username}
    )


async def _all(service: AccountService) -> JSONResponse:
    # Exposes stored passwords as-is; kept for the existing mobile client.
    users = await service.credential_map()
    return JSONResponse(content={"success": True, "users": users, "total": len(users)})


async def _android_id(service: AccountService, username: Optional[str]) -> JSONResponse:
    android_id = await service.device_id_for(username)
    return JSONResponse(content={"success": True, "androidId": android_id})


async def _test(service: AccountService) -> JSONResponse:
    await service.test_connection()
    return JSONResponse(
        content={
            "success": True,
            "message": "Database connection successful",
            "timestamp": utc_timestamp(),
        }
    )


@router.api_route("/api/users", methods=["GET", "POST", "OPTIONS"])
async def dispatch(
    request: Request,
    action: Optional[str] = None,
    username: Optional[str] = None,
    service: AccountService = Depends(get_service),
) -> Response:
    """Route ``?action=`` requests to the matching operation."""

    if request.method == "OPTIONS":
        return Response(status_code=status.HTTP_200_OK)

    if request.method == "POST" and action in ("register", "login"):
        body = await json_body(request)
        if action == "register":
            return await _register(service, body)
        return await _login(service, body)

    if request.method == "GET":
        if action == "test":
            return await _test(service)
        if action == "all":
            return await _all(service)
        if action == "androidid":
            return await _android_id(service, username)

    return unmatched(request, AuthMode.DEVICE)
