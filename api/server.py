"""
FastAPI application entry point.

Sets up the application with:
- Lifespan management (store selection and setup, shutdown)
- Route registration
- CORS allow-list
- Error handling
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.dependencies import set_gateway
from api.routes import cards_router, health_router
from core.config import Settings, get_settings
from core.logging import configure_logging, get_logger
from core.storage import StartupFatal, WriteFailed, create_store, get_storage_backend
from manager.gateway import CardsGateway, InvalidBody, Unauthorized
from tools.table_api.base import TableClient


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifecycle manager.

    Startup: pick the storage backend, prepare it, build the gateway.
    A StartupFatal from the store aborts startup.
    Shutdown: close the store.
    """
    settings: Settings = app.state.settings

    configure_logging(settings)

    logger.info(
        "Starting cards config store...",
        storage_backend=get_storage_backend(settings).value,
        environment=settings.environment,
    )

    store = create_store(settings, table_client=app.state.table_client)
    try:
        await store.setup()
    except StartupFatal as e:
        logger.error("Storage unusable, refusing to start", error=str(e))
        raise

    set_gateway(CardsGateway(store, admin_secret=settings.admin_secret))

    logger.info(
        "Cards config store started",
        host=settings.server_host,
        port=settings.server_port,
        storage_backend=store.backend_name,
    )

    yield

    # =========================================
    # Shutdown
    # =========================================
    logger.info("Shutting down cards config store...")

    set_gateway(None)
    await store.close()

    logger.info("Cards config store stopped")


def create_app(
    settings: Optional[Settings] = None,
    table_client: Optional[TableClient] = None,
) -> FastAPI:
    """
    Application factory.

    Args:
        settings: Settings to run with (defaults to environment)
        table_client: Transport override for the remote backend
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Cards Config Store",
        description=(
            "Single versioned card document.\n\n"
            "Anyone can read it; writes need the admin secret."
        ),
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.table_client = table_client

    # CORS middleware; an empty allow-list accepts any origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_origins_list() or ["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "X-Requested-With",
            "Authorization",
            "X-Admin-Secret",
            "Accept",
        ],
    )

    # Register routes
    app.include_router(health_router)
    app.include_router(cards_router)

    @app.exception_handler(Unauthorized)
    async def unauthorized_handler(request: Request, exc: Unauthorized):
        logger.info("Rejected write: unauthorized", path=request.url.path)
        return JSONResponse(status_code=401, content={"error": "unauthorized"})

    @app.exception_handler(InvalidBody)
    async def invalid_body_handler(request: Request, exc: InvalidBody):
        logger.info("Rejected write: invalid body", path=request.url.path, reason=str(exc))
        return JSONResponse(status_code=400, content={"error": "invalid_body"})

    @app.exception_handler(WriteFailed)
    async def write_failed_handler(request: Request, exc: WriteFailed):
        logger.error("Write failed", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"error": "write_failed"})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_error",
                "message": str(exc) if settings.debug else "An error occurred",
            },
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "api.server:app",
        host=_settings.server_host,
        port=_settings.server_port,
        reload=_settings.debug,
    )
