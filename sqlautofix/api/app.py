"""
Main FastAPI application for the SQL auto-fix service

This module creates and configures the FastAPI application with:
- API routes (fix and format)
- Health check endpoint
- Auto-generated API documentation
"""

from fastapi import FastAPI
from contextlib import asynccontextmanager
from loguru import logger

from sqlautofix import __version__
from sqlautofix.api.routes import sql
from sqlautofix.api.schemas import HealthResponse
from sqlautofix.config.settings import settings
from sqlautofix.sql.correction import log_metrics_summary
from sqlautofix.utils.logger import setup_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events

    - Startup: Log the effective auto-fix configuration
    - Shutdown: Log the correction metrics collected while running
    """
    setup_logger()
    logger.info("🚀 SQL auto-fix API starting...")
    logger.info(
        f"Auto-fix {'enabled' if settings.autofix_enabled else 'disabled'} "
        f"(auto-accept={settings.autofix_auto_accept.value}, dialect={settings.sql_dialect})"
    )

    yield

    logger.info("🛑 SQL auto-fix API shutting down...")
    log_metrics_summary()


# Create FastAPI application
app = FastAPI(
    title="SQL Auto-Fix API",
    description="""
    Deterministic correction of hand-typed SQL.

    ## Features

    * **Keyword typos** (`SELEC` -> `SELECT`)
    * **Table and column typos** against the submitted schema snapshot
    * **Clause order** (`ORDER BY` before `WHERE`)
    * **Unterminated strings** (always sent back for confirmation)

    ## Example

    ```bash
    curl -X POST http://localhost:8000/api/sql/fix \\
         -H "Content-Type: application/json" \\
         -d '{"sql": "SELEC * FROM usres", "tables": {"users": ["id", "name"]}}'
    ```
    """,
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Include routers
app.include_router(sql.router)


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """
    Health check endpoint

    Returns:
        HealthResponse with service status
    """
    return HealthResponse(
        status="healthy",
        service="sqlautofix-api",
        version=__version__,
        autofix_enabled=settings.autofix_enabled,
    )
