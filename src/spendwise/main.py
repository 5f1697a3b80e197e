from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from spendwise.api.middleware.error_handler import (
    handle_generic_error,
    handle_integrity_error,
    handle_ledger_error,
    handle_validation_error,
)
from spendwise.api.middleware.logging import RequestLoggingMiddleware, configure_logging
from spendwise.api.routes import router as api_router
from spendwise.api.routes.health import router as health_router
from spendwise.config import settings
from spendwise.core.exceptions import LedgerError
from spendwise.db.session import AsyncSessionLocal
from spendwise.services.category import CategoryService


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    if settings.seed_default_categories:
        async with AsyncSessionLocal() as session:
            await CategoryService(session).seed_default_categories()
    yield
    # Shutdown


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Spendwise API",
        description="Shared wallets, ledger and budgets",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Add request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Register exception handlers (order matters - most specific first)
    app.add_exception_handler(LedgerError, handle_ledger_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(Exception, handle_generic_error)

    # Register routers
    app.include_router(health_router)
    app.include_router(api_router)

    return app


app = create_app()
