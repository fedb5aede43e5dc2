"""
FastAPI Application for the Ledger

Builds the HTTP app around a set of wired components:

    app = create_app()                 # components from environment settings
    app = create_app(settings=...)     # tests: explicit settings
    app = create_app(components=...)   # tests: pre-built components

The storage client is opened in the lifespan and closed on shutdown.
Every LedgerError is rendered as {"detail": message} with its status;
request validation failures keep FastAPI's structured 422 body.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.routers import auth_router, categories_router, transactions_router
from src import __version__
from src.config import Settings, get_settings
from src.errors import LedgerError, UnavailableError
from src.logger import configure_logging, get_logger
from src.orchestrator import LedgerComponents, create_app_components


logger = get_logger(__name__)


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    headers = None
    if isinstance(exc, UnavailableError):
        headers = {"Retry-After": str(exc.retry_after_seconds)}
    if exc.status_code >= 500:
        logger.error(
            "request_failed",
            path=request.url.path,
            status_code=exc.status_code,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


def create_app(
    settings: Optional[Settings] = None,
    components: Optional[LedgerComponents] = None,
) -> FastAPI:
    """
    Application factory.

    Args:
        settings: Settings to build from. Ignored when components are given.
        components: Already-wired components to serve.
    """
    if components is not None:
        settings = components.settings
    settings = settings or get_settings()
    configure_logging(settings)

    ledger = components or create_app_components(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await ledger.connect()
        app.state.components = ledger
        logger.info("app_started", environment=settings.app.app_environment)
        try:
            yield
        finally:
            await ledger.close()
            logger.info("app_stopped")

    app = FastAPI(
        title="Personal Ledger",
        version=__version__,
        debug=settings.app.debug_mode,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LedgerError, ledger_error_handler)

    @app.get("/")
    async def health():
        return {"status": "ok"}

    app.include_router(auth_router)
    app.include_router(categories_router)
    app.include_router(transactions_router)

    return app


app = create_app()
