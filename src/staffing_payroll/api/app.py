"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from staffing_payroll import __version__
from staffing_payroll.api.routes import (
    companies_router,
    employees_router,
    health_router,
    payslips_router,
    rate_schedules_router,
)
from staffing_payroll.database import create_schema, dispose_db, init_db
from staffing_payroll.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PayrollRulesError,
    UnresolvedRateError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[PayrollRulesError], int] = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    UnresolvedRateError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    InvalidStateError: status.HTTP_409_CONFLICT,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    engine, _ = init_db()
    await create_schema(engine)
    yield
    await dispose_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Staffing Payroll API",
        description="Rate schedules, employment history, salary templates and payslips",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PayrollRulesError)
    async def rules_error_handler(request: Request, exc: PayrollRulesError) -> JSONResponse:
        """Map domain errors to status codes, keeping field and record context."""
        code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.reason)
        return JSONResponse(status_code=code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    app.include_router(health_router)
    app.include_router(rate_schedules_router, prefix="/api/v1")
    app.include_router(employees_router, prefix="/api/v1")
    app.include_router(companies_router, prefix="/api/v1")
    app.include_router(payslips_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
