"""Alembic environment for the Blog API schema.

The database URL comes from ``blog_api.config.Settings`` unless one is
passed on the command line with ``alembic -x url=<url> upgrade head``.
Online runs reuse :class:`blog_api.database.Database`, so migrations see
the same engine options as the application.
"""
import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import make_url

from blog_api.config import settings
from blog_api.database import Base, Database
import blog_api.models  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("url", settings.DATABASE_URL)


def _configure(dialect: str, **kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        # SQLite cannot ALTER most constraints in place.
        render_as_batch=dialect == "sqlite",
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of touching a database."""
    url = _database_url()
    _configure(
        make_url(url).get_backend_name(),
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_with_connection(connection) -> None:
    _configure(connection.dialect.name, connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    db = Database(_database_url())
    try:
        async with db.engine.connect() as connection:
            await connection.run_sync(_run_with_connection)
    finally:
        await db.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
