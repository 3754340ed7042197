"""Reusable FastAPI dependencies."""
from __future__ import annotations

from typing import Any

from fastapi import Request

from .service import AccountService


def get_service(request: Request) -> AccountService:
    """The service instance wired to this application's store."""
    return request.app.state.service


async def json_body(request: Request) -> Any:
    """Decoded JSON body, or an empty dict when the body is not JSON."""

    try:
        return await request.json()
    except ValueError:
        return {}
