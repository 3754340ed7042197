"""FastAPI application entry point."""
from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import AuthMode, Settings, get_settings
from .errors import AccountError, StoreError
from .responses import error_response, failure, unmatched
from .routers.accounts import router as accounts_router
from .routers.device import router as device_router
from .service import AccountService
from .store import UserStore

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Install a stdout handler once; later calls only adjust the level."""

    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s - %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("account_service").setLevel(level.upper())


async def check_store(store: UserStore) -> None:
    """Create the schema and report connectivity. Never raises."""

    try:
        await store.ensure_schema()
        total = await store.count()
    except StoreError as exc:
        logger.error("Database connection error: %s", exc.detail)
        return
    logger.info("Connected to database (%d users)", total)


def create_app(settings: Settings | None = None, store: UserStore | None = None) -> FastAPI:
    """Build an application for the given settings and store."""

    settings = settings or get_settings()
    configure_logging(settings.log_level)
    owns_store = store is None
    store = store or UserStore.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await check_store(store)
        yield
        if owns_store:
            await store.dispose()

    app = FastAPI(title="Account Service", version=__version__, lifespan=lifespan)
    app.state.service = AccountService(store, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    if settings.auth_mode is AuthMode.DEVICE:
        app.include_router(device_router)
    else:
        app.include_router(accounts_router)

    @app.exception_handler(AccountError)
    async def handle_account_error(request: Request, exc: AccountError) -> JSONResponse:
        if isinstance(exc, StoreError):
            logger.error(
                "%s %s failed: %s", request.method, request.url.path, exc.detail, exc_info=exc
            )
        return error_response(settings.auth_mode, exc)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Wrong method on a known path is reported the same as an unknown path.
        if exc.status_code in (404, 405):
            return unmatched(request, settings.auth_mode)
        return failure(settings.auth_mode, str(exc.detail), exc.status_code)

    logger.info("Account service configured in %s mode", settings.auth_mode.value)
    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the module-level app with uvicorn."""

    settings = get_settings()
    uvicorn.run(
        "account_service.main:app",
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    run()
