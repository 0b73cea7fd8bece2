"""
alembic/env.py

Migration environment for the projects and property_records schema.

The target database comes from `-x db_url=...` when given, otherwise from the
same lookup the API uses (see db/config.py).
"""

from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

import db.models  # noqa: F401  registers Project and PropertyRecord on Base.metadata
from db.base import Base
from db.config import normalize_postgres_url, resolve_database_url

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

_CONFIGURE_OPTIONS = {"target_metadata": Base.metadata, "compare_type": True}


def _database_url() -> str:
    override = context.get_x_argument(as_dictionary=True).get("db_url")
    url = normalize_postgres_url(override) if override else resolve_database_url()
    if not url.startswith("postgresql"):
        raise RuntimeError("Price-ingestion migrations target PostgreSQL only.")
    return url


if context.is_offline_mode():
    context.configure(
        url=_database_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_CONFIGURE_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()
else:
    engine = create_engine(_database_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, **_CONFIGURE_OPTIONS)
        with context.begin_transaction():
            context.run_migrations()
