"""Pydantic schemas for request bodies and shared payload helpers."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """Username/password pair posted by the client."""

    username: str | None = None
    password: str | None = None

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }

    @classmethod
    def from_body(cls, body: Any) -> "Credentials":
        """Build from a decoded JSON body; non-string fields count as missing."""

        if not isinstance(body, dict):
            return cls()
        return cls.model_validate({k: v for k, v in body.items() if isinstance(v, str)})


class DeviceCredentials(Credentials):
    """Credentials plus the device identifier bound at registration."""

    android_id: str | None = Field(default=None, alias="androidId")


def utc_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""

    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment.isoformat(timespec="milliseconds") + "Z"
