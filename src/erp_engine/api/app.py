"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from erp_engine import __version__
from erp_engine.api.routes import health_router, journal_router, payroll_router
from erp_engine.config import get_settings
from erp_engine.database import dispose_db, init_db
from erp_engine.errors import (
    BusinessRuleError,
    ConcurrentPostConflict,
    InvalidEmployee,
    PeriodAlreadyProcessed,
)
from erp_engine.events import EventEmitter, log_event
from erp_engine.log import configure_logging
from erp_engine.payroll import PayrollCalculator

logger = logging.getLogger(__name__)

# Business errors not listed here map to 422
ERROR_STATUS: dict[type[BusinessRuleError], int] = {
    InvalidEmployee: status.HTTP_404_NOT_FOUND,
    ConcurrentPostConflict: status.HTTP_409_CONFLICT,
    PeriodAlreadyProcessed: status.HTTP_409_CONFLICT,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    init_db()
    yield
    await dispose_db()


def create_app(
    calculator: PayrollCalculator | None = None,
    emitter: EventEmitter | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="ERP Engine API",
        description="Journal posting and payroll calculation",
        version=__version__,
        lifespan=lifespan,
    )

    if emitter is None:
        emitter = EventEmitter()
        emitter.on_all(log_event)
    app.state.event_emitter = emitter
    app.state.payroll_calculator = calculator or PayrollCalculator()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(BusinessRuleError)
    async def business_rule_handler(
        request: Request, exc: BusinessRuleError
    ) -> JSONResponse:
        """Render business rule failures with their context."""
        status_code = ERROR_STATUS.get(type(exc), status.HTTP_422_UNPROCESSABLE_ENTITY)
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status_code,
            content={"detail": str(exc), "code": exc.code, "context": exc.context()},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(journal_router, prefix="/api/v1")
    app.include_router(payroll_router, prefix="/api/v1")

    return app
