"""Error taxonomy shared by the service, store and HTTP layers."""
from __future__ import annotations

from fastapi import status


class AccountError(Exception):
    """Base class for failures that map onto an error envelope."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AccountError):
    """Required input is missing or malformed."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(AccountError):
    """The username is already registered."""

    status_code = status.HTTP_409_CONFLICT


class AuthError(AccountError):
    """Unknown user, wrong password or unrecognised device.

    The status differs per case and per mode, so callers always pass it.
    """

    status_code = status.HTTP_401_UNAUTHORIZED


class StoreError(AccountError):
    """The backing database could not be reached or the query failed."""

    def __init__(self, detail: str, *, message: str | None = None) -> None:
        super().__init__(message or detail)
        self.detail = detail

    def with_message(self, message: str) -> "StoreError":
        """Return a copy that keeps the store detail under a caller-facing message."""

        return StoreError(self.detail, message=message)


class UsernameTaken(ConflictError):
    """Raised by the store when the unique constraint rejects an insert."""

    def __init__(self, username: str) -> None:
        super().__init__(f"Username {username!r} already exists")
        self.username = username
