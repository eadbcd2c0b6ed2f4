"""
Applicant Tracking API - Main Application Entry Point

This module builds the FastAPI application with:
- Explicit service handles (database, session cache, file store, rate
  limiter) created at startup and torn down at shutdown
- CORS restricted to the configured frontend origin
- Prometheus metrics
- Uniform error rendering for the ATSError taxonomy

Architecture:
    FastAPI App
    ├── Lifespan Management (database, cache, maintenance scheduler)
    ├── CORS Middleware (FRONTEND_URL)
    ├── Prometheus Middleware (/metrics)
    ├── /api (admission control → authentication → route)
    │   ├── /auth - Sign-in, sign-out, password reset
    │   ├── /user - Caller profile
    │   ├── /jobs - Job postings
    │   └── /jobs/{job_id}/applications - Candidate applications
    ├── /uploads/{name} - Stored CV files
    └── /health
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ats import __version__
from ats.api import api_router, uploads_router
from ats.config import Settings, get_settings
from ats.database import Database
from ats.errors import ATSError, InternalError
from ats.middleware import setup_metrics
from ats.scheduler import start_scheduler, stop_scheduler
from ats.services.file_store import FileStore
from ats.services.rate_limit import FixedWindowRateLimiter
from ats.services.session_cache import SessionCache

logger = logging.getLogger(__name__)


async def ats_error_handler(request: Request, exc: ATSError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=exc.headers,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(status_code=400, content={"detail": "; ".join(problems) or "Invalid request"})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": InternalError.default_message})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup:
            1. Connect the database and create tables
            2. Create the session cache client
            3. Start the maintenance scheduler

        Shutdown:
            Stop the scheduler, close the cache, dispose the engine
        """
        database = Database(settings.database_url)
        await database.create_all()
        session_cache = SessionCache(settings.redis_url)

        app.state.database = database
        app.state.session_cache = session_cache
        app.state.scheduler = start_scheduler(
            database,
            app.state.file_store,
            settings.cleanup_interval_hours,
            settings.orphan_grace_minutes,
        )
        try:
            yield
        finally:
            stop_scheduler(app.state.scheduler)
            await session_cache.close()
            await database.dispose()

    app = FastAPI(
        title="Applicant Tracking API",
        description="Job postings, candidate applications and CV uploads",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.file_store = FileStore(settings.upload_dir)
    app.state.rate_limiter = FixedWindowRateLimiter(
        limit=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_metrics(app)

    app.add_exception_handler(ATSError, ats_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(api_router)
    app.include_router(uploads_router)

    @app.get("/health")
    async def health_check(request: Request):
        database_ok = await request.app.state.database.ping()
        cache_ok = await request.app.state.session_cache.health_check()
        healthy = database_ok and cache_ok
        return JSONResponse(
            status_code=200 if healthy else 503,
            content={
                "status": "healthy" if healthy else "degraded",
                "database": database_ok,
                "cache": cache_ok,
            },
        )

    return app


app = create_app()
