"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from payroll_audit.api.routes import (
    employees_router,
    health_router,
    payroll_router,
    rules_router,
)
from payroll_audit.calculators.rules import ConfigurationError, RuleTableProvider
from payroll_audit.calculators.types import InvalidRecordError
from payroll_audit.config import Settings, get_settings
from payroll_audit.database import create_tables, dispose_db, init_db
from payroll_audit.logging_config import configure_logging
from payroll_audit.services.employee_service import (
    DuplicateEmployeeError,
    EmployeeNotFoundError,
)
from payroll_audit.services.history_service import PeriodAlreadyRecordedError

logger = logging.getLogger(__name__)


def _error(status_code: int, detail: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail, "code": code})


def create_app(
    settings: Settings | None = None,
    rules_provider: RuleTableProvider | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The rule table is loaded once at startup; a rule file that cannot be
    parsed stops the application from starting.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler."""
        # Startup
        if getattr(app.state, "rules_provider", None) is None:
            app.state.rules_provider = RuleTableProvider(settings.tax_rules_path)
        engine, _ = init_db(settings.database_url)
        await create_tables(engine)
        logger.info("Payroll audit API started (engine %s)", settings.engine_version)
        yield
        # Shutdown
        await dispose_db()

    app = FastAPI(
        title="Payroll Audit API",
        description="Net pay calculation and payroll anomaly detection",
        version=settings.engine_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.rules_provider = rules_provider
    app.state.detection_config = settings.detection_config()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        logger.error("Rule table error on %s: %s", request.url.path, exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), "CONFIGURATION_ERROR")

    @app.exception_handler(InvalidRecordError)
    async def invalid_record_handler(
        request: Request, exc: InvalidRecordError
    ) -> JSONResponse:
        return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc), "INVALID_RECORD")

    @app.exception_handler(EmployeeNotFoundError)
    async def not_found_handler(
        request: Request, exc: EmployeeNotFoundError
    ) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, str(exc), "EMPLOYEE_NOT_FOUND")

    @app.exception_handler(DuplicateEmployeeError)
    async def duplicate_handler(
        request: Request, exc: DuplicateEmployeeError
    ) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc), "DUPLICATE_EMPLOYEE")

    @app.exception_handler(PeriodAlreadyRecordedError)
    async def period_recorded_handler(
        request: Request, exc: PeriodAlreadyRecordedError
    ) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc), "PERIOD_ALREADY_RECORDED")

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s", request.url.path)
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred",
            "INTERNAL_ERROR",
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(employees_router, prefix="/api/v1")
    app.include_router(payroll_router, prefix="/api/v1")
    app.include_router(rules_router, prefix="/api/v1")

    return app
