from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Runs before any service or database connection is initialised.
    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.

    Rules:
    - A database URL must be configured.
    - Numeric ingestion and rate-limit settings must parse when present.
    """

    from db.config import configured_database_url

    errors: list[str] = []

    # --- Database URL ---------------------------------------------------
    if configured_database_url() is None:
        errors.append(
            "No database URL configured. Set DATABASE_URL, or LOCAL_DATABASE_URL "
            "/ CLOUD_DATABASE_URL with a cloud ENVIRONMENT."
        )

    # --- Numeric settings -----------------------------------------------
    numeric_names = (
        "INGEST_MAX_UPLOAD_BYTES",
        "INGEST_PREVIEW_SIZE",
        "INGEST_INSERT_BATCH_SIZE",
        "INGEST_MAX_WORKERS",
        "INGEST_PARALLEL_ROW_THRESHOLD",
        "DIALECT_MIN_CONFIDENCE",
        "UPLOAD_RATE_LIMIT_ANONYMOUS",
        "UPLOAD_RATE_LIMIT_AUTHENTICATED",
        "UPLOAD_RATE_LIMIT_WINDOW_SECONDS",
    )
    for name in numeric_names:
        raw_value = os.getenv(name)
        if raw_value is None:
            continue
        try:
            float(raw_value)
        except ValueError:
            errors.append(f"{name}='{raw_value}' is not a number.")

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    from app.logging_utils import configure_logging

    configure_logging()


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Compare Base.metadata table names against the live DB schema.

    Every table registered on Base.metadata must exist in the database.
    Missing tables abort startup; migrations are never applied here.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401  registers ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        log = logging.getLogger(__name__)
        log.critical(
            "Schema mismatch: %d table(s) defined in ORM metadata are absent from "
            "the database: %s. Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema on boot."""
    _check_db()
    logging.getLogger(__name__).info("Database connectivity confirmed")
    _check_schema()
    logging.getLogger(__name__).info("Database schema validated")
    yield
    logging.getLogger(__name__).info("Price ingestion API shutting down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Developer Price Ingestion API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import price_upload_router

    application.include_router(price_upload_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
