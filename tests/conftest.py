"""Test fixtures for the account service."""
import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_accounts.db")

from account_service.config import AuthMode, Settings  # noqa: E402
from account_service.main import create_app  # noqa: E402
from account_service.service import AccountService  # noqa: E402
from account_service.store import UserStore  # noqa: E402

UNREACHABLE_URL = "sqlite+aiosqlite:////nonexistent-account-service-dir/accounts.db"


def make_settings(database_url: str, mode: AuthMode = AuthMode.HASHED) -> Settings:
    return Settings(database_url=database_url, auth_mode=mode, log_level="DEBUG")


@pytest.fixture
def database_url(tmp_path) -> str:
    """A fresh SQLite file per test."""

    return f"sqlite+aiosqlite:///{tmp_path / 'accounts.db'}"


@pytest_asyncio.fixture
async def store(database_url: str) -> UserStore:
    user_store = UserStore.from_settings(make_settings(database_url))
    yield user_store
    await user_store.dispose()


@pytest_asyncio.fixture
async def unreachable_store() -> UserStore:
    user_store = UserStore.from_settings(make_settings(UNREACHABLE_URL))
    yield user_store
    await user_store.dispose()


@pytest.fixture
def hashed_service(store: UserStore, database_url: str) -> AccountService:
    return AccountService(store, make_settings(database_url, AuthMode.HASHED))


@pytest.fixture
def device_service(store: UserStore, database_url: str) -> AccountService:
    return AccountService(store, make_settings(database_url, AuthMode.DEVICE))


async def _client_for(settings: Settings, user_store: UserStore):
    app = create_app(settings, store=user_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture
async def client(store: UserStore, database_url: str) -> AsyncClient:
    """HTTP client for the hashed-mode application."""

    async for http_client in _client_for(make_settings(database_url, AuthMode.HASHED), store):
        yield http_client


@pytest_asyncio.fixture
async def device_client(store: UserStore, database_url: str) -> AsyncClient:
    """HTTP client for the device-bound application."""

    async for http_client in _client_for(make_settings(database_url, AuthMode.DEVICE), store):
        yield http_client


@pytest_asyncio.fixture
async def offline_client(unreachable_store: UserStore) -> AsyncClient:
    """Hashed-mode client whose store cannot be opened."""

    async for http_client in _client_for(
        make_settings(UNREACHABLE_URL, AuthMode.HASHED), unreachable_store
    ):
        yield http_client


@pytest_asyncio.fixture
async def offline_device_client(unreachable_store: UserStore) -> AsyncClient:
    async for http_client in _client_for(
        make_settings(UNREACHABLE_URL, AuthMode.DEVICE), unreachable_store
    ):
        yield http_client
