"""Hashed-mode endpoints: REST-style routes under ``/api``."""
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..config import AuthMode
from ..dependencies import get_service, json_body
from ..responses import available_endpoints
from ..schemas import Credentials, utc_timestamp
from ..service import AccountService

router = APIRouter(tags=["accounts"])


@router.get("/")
async def root(service: AccountService = Depends(get_service)) -> Dict[str, Any]:
    """Service banner with the current user count."""

    total = await service.total_users(prefix="Database connection error: ")
    return {
        "success": True,
        "message": "Account API is running",
        "timestamp": utc_timestamp(),
        "totalUsers": total,
        "availableEndpoints": available_endpoints(AuthMode.HASHED),
    }


@router.get("/api")
async def api_root(service: AccountService = Depends(get_service)) -> Dict[str, Any]:
    total = await service.total_users(prefix="Database error: ")
    return {
        "success": True,
        "message": "Account API active",
        "timestamp": utc_timestamp(),
        "totalUsers": total,
        "serverStatus": "healthy",
    }


@router.post("/api/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: Any = Depends(json_body),
    service: AccountService = Depends(get_service),
) -> Dict[str, Any]:
    """Create an account with a hashed password."""

    payload = Credentials.from_body(body)
    registration = await service.register(payload.username, payload.password)
    return {
        "success": True,
        "message": "Registrasi berhasil",
        "username": registration.user.username,
        "userId": registration.user.id,
        "totalUsers": registration.total_users,
        "timestamp": utc_timestamp(),
    }


@router.post("/api/login")
async def login(
    body: Any = Depends(json_body),
    service: AccountService = Depends(get_service),
) -> Dict[str, Any]:
    payload = Credentials.from_body(body)
    user = await service.login(payload.username, payload.password)
    return {
        "success": True,
        "message": "Login berhasil",
        "username": user.username,
        "userId": user.id,
        "timestamp": utc_timestamp(),
    }


@router.get("/api/users")
async def list_users(service: AccountService = Depends(get_service)) -> Dict[str, Any]:
    """Every registered user, newest first."""

    users = await service.list_users()
    return {
        "success": True,
        "total": len(users),
        "users": [
            {
                "id": user.id,
                "username": user.username,
                "registered": True,
                "created_at": utc_timestamp(user.created_at) if user.created_at else None,
            }
            for user in users
        ],
        "timestamp": utc_timestamp(),
    }


@router.get("/api/check/{username}")
async def check_username(
    username: str, service: AccountService = Depends(get_service)
) -> Dict[str, Any]:
    """Report whether a username is taken. Absence is not an error."""

    exists = await service.check_username(username)
    return {"success": True, "exists": exists, "username": username}


@router.get("/api/health")
async def health(service: AccountService = Depends(get_service)) -> JSONResponse:
    report = await service.health()
    if report.healthy:
        return JSONResponse(
            content={
                "status": "healthy",
                "timestamp": utc_timestamp(),
                "uptime": report.uptime,
                "totalUsers": report.total_users,
                "database": "connected",
            }
        )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "status": "unhealthy",
            "timestamp": utc_timestamp(),
            "uptime": report.uptime,
            "database": "disconnected",
            "error": report.error,
        },
    )
