"""FastAPI application entry point.

MyPhone Back-office API - stock lifecycle, installment pricing and trade-in valuation.
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.routes import api_router
from app.schemas import error_body
from app.services.stock_errors import (
    CODE_STOCK_CONFLICT,
    CODE_STOCK_DELETE_BLOCKED,
    CODE_STOCK_NOT_FOUND,
    CODE_STOCK_PROMO_BLOCKED,
    StockMutationError,
    resolve_mutation_error_message,
)
from app.settings import get_settings
from app.stores.postgres import init_db, close_db, ping_db
from app.stores.redis import init_redis, close_redis

logger = logging.getLogger("uvicorn.error")

# Store rejection code -> HTTP status
_STOCK_ERROR_STATUS = {
    CODE_STOCK_CONFLICT: 409,
    CODE_STOCK_PROMO_BLOCKED: 409,
    CODE_STOCK_DELETE_BLOCKED: 403,
    CODE_STOCK_NOT_FOUND: 404,
}

DEFAULT_STOCK_ERROR_MESSAGE = "No se pudo actualizar el equipo."


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Initialize database (skip in tests if no DB available)
    try:
        await init_db()
        await ping_db()
        logger.info("Postgres connected")
    except Exception:
        logger.exception("Postgres init failed")

    # Redis only caches the dollar rate; the API works without it
    try:
        await init_redis()
    except Exception:
        logger.exception("Redis init failed")

    yield

    # Shutdown
    await close_redis()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Stock lifecycle guard, installment pricing and trade-in valuation",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StockMutationError)
    async def stock_mutation_error_handler(request: Request, exc: StockMutationError) -> JSONResponse:
        """Store rejections: stable code + seller-facing message, never a stack trace."""
        status_code = _STOCK_ERROR_STATUS.get(exc.code, 400)
        fallback = exc.message if exc.code == CODE_STOCK_NOT_FOUND else DEFAULT_STOCK_ERROR_MESSAGE
        return JSONResponse(
            status_code=status_code,
            content=error_body(exc.code, resolve_mutation_error_message(exc, fallback), exc.detail or None),
        )

    # Exception handler for structured error format
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler returning structured error format."""
        return JSONResponse(
            status_code=500,
            content=error_body("INTERNAL_ERROR", str(exc) if settings.debug else "Internal server error"),
        )

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, bool]:
        """Health check endpoint."""
        return {"ok": True}

    # Include API routes
    app.include_router(api_router)

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
