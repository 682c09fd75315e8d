"""
ReliaTrack - Main Application

FastAPI application for multi-tenant maintenance management:
- Asset registry with tier limits and bulk import
- FMEA, RCA and RCM reliability analysis
- Maintenance scheduling and dashboards
- Teams, invitations and organization sharing
- Service provider directory, Stripe billing and AI insights
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reliatrack.api.routes import (
    ai,
    analysis,
    asset_dashboard,
    asset_import,
    asset_tasks,
    assets,
    auth,
    maintenance,
    organization,
    procedures,
    providers,
    rca,
    rcm,
    subscriptions,
    team,
    users,
    webhooks,
)
from reliatrack.config.settings import settings
from reliatrack.database.base import close_db, init_db
from reliatrack.services.exceptions import ServiceError
from reliatrack.utils.logging import get_logger, request_logger, setup_logging

logger = get_logger(__name__)

# Location segments that carry no field information
_LOC_SOURCES = {"body", "query", "path", "header"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging()
    logger.info("Starting ReliaTrack", version=settings.app_version)

    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down ReliaTrack")
    await close_db()


app = FastAPI(
    title=settings.app_name,
    description="""
## ReliaTrack API

Maintenance management for small industrial teams.

### Authentication

All endpoints except signup, login, provider search, invitation validation,
checkout and the Stripe webhook require a JWT.
Include the token in the Authorization header: `Bearer <token>`

### Organizations

Users who create or join an organization see every asset owned by its
members. Only an asset's owner can delete it.
    """,
    version=settings.app_version,
    lifespan=lifespan,
    docs_url=f"{settings.api_prefix}/docs" if settings.debug else None,
    redoc_url=f"{settings.api_prefix}/redoc" if settings.debug else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing under a per-request id."""
    start_time = time.time()
    request_id = request_logger.bind(request.headers.get("X-Request-ID"))
    client_ip = request.client.host if request.client else None

    request_logger.log_request(
        method=request.method,
        path=request.url.path,
        client_ip=client_ip,
    )

    response = await call_next(request)

    request_logger.log_response(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=(time.time() - start_time) * 1000,
    )
    response.headers["X-Request-ID"] = request_id
    return response


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in _LOC_SOURCES]
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": ".".join(loc) or "body", "message": message})
    return errors


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed input as 400 with one entry per offending field."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": "Validation error",
            "errors": _field_errors(exc),
        },
    )


@app.exception_handler(ServiceError)
async def service_exception_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(
            "Service error",
            error_type=type(exc).__name__,
            error_message=exc.message,
            path=request.url.path,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Log the full error; the client only gets a generic message."""
    logger.error(
        "Unhandled exception",
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An unexpected error occurred"},
    )


# Fixed /assets sub-paths must be registered before /assets/{asset_id}
app.include_router(asset_dashboard.router, prefix=f"{settings.api_prefix}/assets", tags=["Assets"])
app.include_router(asset_import.router, prefix=f"{settings.api_prefix}/assets", tags=["Assets"])
app.include_router(asset_tasks.router, prefix=f"{settings.api_prefix}/assets", tags=["Asset Tasks"])
app.include_router(analysis.router, prefix=f"{settings.api_prefix}/assets", tags=["Reliability Analysis"])
app.include_router(assets.router, prefix=f"{settings.api_prefix}/assets", tags=["Assets"])
app.include_router(maintenance.router, prefix=f"{settings.api_prefix}/maintenance", tags=["Maintenance"])
app.include_router(rca.router, prefix=f"{settings.api_prefix}/rca", tags=["Reliability Analysis"])
app.include_router(rcm.router, prefix=f"{settings.api_prefix}/rcm", tags=["Reliability Analysis"])
app.include_router(procedures.router, prefix=f"{settings.api_prefix}/procedures", tags=["Procedures"])
app.include_router(providers.router, prefix=f"{settings.api_prefix}/providers", tags=["Service Providers"])
app.include_router(team.router, prefix=f"{settings.api_prefix}/team", tags=["Team"])
app.include_router(organization.router, prefix=f"{settings.api_prefix}/organization", tags=["Organization"])
app.include_router(users.router, prefix=f"{settings.api_prefix}/users", tags=["Users"])
app.include_router(auth.router, prefix=f"{settings.api_prefix}/auth", tags=["Authentication"])
app.include_router(subscriptions.router, prefix=f"{settings.api_prefix}/subscriptions", tags=["Billing"])
app.include_router(webhooks.router, prefix=f"{settings.api_prefix}/webhooks", tags=["Billing"])
app.include_router(ai.router, prefix=f"{settings.api_prefix}/ai", tags=["AI Insights"])


@app.get("/health", tags=["System"])
async def health_check():
    """System health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
    }


@app.get("/", tags=["System"])
async def root():
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": f"{settings.api_prefix}/docs" if settings.debug else "Disabled in production",
    }


def run():
    """Console entry point."""
    import uvicorn

    uvicorn.run(
        "reliatrack.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=settings.workers if not settings.debug else 1,
    )


if __name__ == "__main__":
    run()
