"""Account operations for both credential modes.

One :class:`AccountService` serves either configuration. In hashed mode
passwords are stored through passlib and there is no device check. In
device mode passwords are kept as given and every login must present the
device identifier recorded at registration.
"""
from __future__ import annotations

import hmac
import logging
import time
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import status

from .config import Settings
from .errors import AuthError, ConflictError, StoreError, UsernameTaken, ValidationError
from .models import User
from .security import hash_password, truncate_device_id, verify_password
from .store import UserStore

logger = logging.getLogger(__name__)

PROCESS_STARTED_AT = time.monotonic()


def process_uptime() -> float:
    """Seconds since the service process imported this module."""

    return time.monotonic() - PROCESS_STARTED_AT


def _same(left: str, right: str) -> bool:
    return hmac.compare_digest(left.encode("utf-8"), right.encode("utf-8"))


@dataclass
class Registration:
    user: User
    total_users: int | None = None


@dataclass
class HealthReport:
    healthy: bool
    uptime: float
    total_users: int | None = None
    error: str | None = None


class AccountService:
    """Register, authenticate and look up users against a :class:`UserStore`."""

    def __init__(self, store: UserStore, settings: Settings) -> None:
        self.store = store
        self.settings = settings

    @property
    def device_bound(self) -> bool:
        return self.settings.device_bound

    @asynccontextmanager
    async def _store_failure(
        self, device_message: str, prefix: str = "Server error: "
    ) -> AsyncIterator[None]:
        """Re-label store failures with the message the current mode reports."""

        try:
            yield
        except StoreError as exc:
            message = device_message if self.device_bound else prefix + exc.detail
            raise exc.with_message(message) from exc

    def _missing_fields_message(self) -> str:
        if self.device_bound:
            return "Username, password, and androidId are required"
        return "Username dan password harus diisi"

    def _require_credentials(
        self, username: str | None, password: str | None, android_id: str | None
    ) -> None:
        required = [username, password]
        if self.device_bound:
            required.append(android_id)
        if not all(required):
            raise ValidationError(self._missing_fields_message())

    async def total_users(self, prefix: str = "Server error: ") -> int:
        async with self._store_failure("Internal server error", prefix):
            return await self.store.count()

    async def register(
        self,
        username: str | None,
        password: str | None,
        android_id: str | None = None,
    ) -> Registration:
        """Create a user; exactly one of several racing registrations succeeds."""

        self._require_credentials(username, password, android_id)
        if not self.device_bound and len(password) < self.settings.password_min_length:
            raise ValidationError(
                f"Password minimal {self.settings.password_min_length} karakter"
            )
        if len(username) > self.settings.username_max_length:
            raise ValidationError(
                f"Username maksimal {self.settings.username_max_length} karakter"
            )

        conflict = "Username sudah terdaftar" if self.device_bound else "Username sudah digunakan"
        async with self._store_failure("Gagal menyimpan user ke database"):
            if await self.store.exists(username):
                raise ConflictError(conflict)
            if self.device_bound:
                credential, bound_device = password, android_id
            else:
                credential, bound_device = hash_password(password), None
            try:
                user = await self.store.add(username, credential, bound_device)
            except UsernameTaken as exc:
                raise ConflictError(conflict) from exc

        if self.device_bound:
            logger.info("User registered: %s (device %s)", username, truncate_device_id(android_id))
            return Registration(user=user)

        # Snapshot only; not transactional with the insert above.
        total = await self.total_users()
        logger.info("User registered: %s. Total users: %d", username, total)
        return Registration(user=user, total_users=total)

    async def login(
        self,
        username: str | None,
        password: str | None,
        android_id: str | None = None,
    ) -> User:
        """Return the user when the credentials (and device, if bound) match."""

        self._require_credentials(username, password, android_id)
        async with self._store_failure("Gagal validasi login"):
            user = await self.store.get_by_username(username)

        if user is None:
            raise AuthError(
                "Username tidak ditemukan",
                status_code=status.HTTP_404_NOT_FOUND
                if self.device_bound
                else status.HTTP_401_UNAUTHORIZED,
            )

        if self.device_bound:
            password_ok = _same(user.password, password)
        else:
            password_ok = verify_password(password, user.password)
        if not password_ok:
            raise AuthError("Password salah", status_code=status.HTTP_401_UNAUTHORIZED)

        if self.device_bound:
            registered = user.android_id or ""
            if not _same(registered, android_id):
                logger.warning("Device mismatch on login for %s", username)
                raise AuthError(
                    "AKSES DITOLAK: Device tidak dikenali!\n\n"
                    f"Registered Device: {truncate_device_id(registered)}\n"
                    f"Current Device: {truncate_device_id(android_id)}",
                    status_code=status.HTTP_403_FORBIDDEN,
                )

        logger.info("User logged in: %s", username)
        return user

    async def list_users(self) -> Sequence[User]:
        async with self._store_failure("Gagal mengambil data users"):
            users = await self.store.list_newest_first()
        logger.info("Users list requested. Total: %d", len(users))
        return users

    async def credential_map(self) -> dict[str, str]:
        """Username to stored password value, newest user first.

        In device mode the values are the raw passwords.
        """

        users = await self.list_users()
        return {user.username: user.password for user in users}

    async def check_username(self, username: str) -> bool:
        async with self._store_failure("Internal server error"):
            exists = await self.store.exists(username)
        logger.info("Username check: %s - exists: %s", username, exists)
        return exists

    async def device_id_for(self, username: str | None) -> str:
        if not username:
            raise ValidationError("Username is required")
        async with self._store_failure("Gagal mengambil Android ID"):
            user = await self.store.get_by_username(username)
        if user is None:
            raise AuthError("User tidak ditemukan", status_code=status.HTTP_404_NOT_FOUND)
        return user.android_id or ""

    async def test_connection(self) -> None:
        async with self._store_failure("Internal server error"):
            await self.store.ping()

    async def health(self) -> HealthReport:
        """Probe the store. Failures are reported, never raised."""

        try:
            total = await self.store.ping()
        except StoreError as exc:
            logger.error("Health check failed: %s", exc.detail)
            return HealthReport(healthy=False, uptime=process_uptime(), error=exc.detail)
        return HealthReport(healthy=True, uptime=process_uptime(), total_users=total)
