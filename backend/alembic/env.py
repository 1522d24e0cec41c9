"""
Alembic migration environment.

The database URL comes from application settings (DATABASE_URL_SYNC) and
can be overridden per run with `alembic -x url=... upgrade head`.
SQLite databases are migrated in batch mode since SQLite cannot ALTER
constraints in place.
"""

from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context

from resource_booking.db.base import Base
from resource_booking.models import User, Resource, Booking, Notification, ActivityLog  # noqa: F401 - Import models for autogenerate
from resource_booking.core.config import get_settings

config = context.config
settings = get_settings()

url = context.get_x_argument(as_dictionary=True).get("url", settings.DATABASE_URL_SYNC)
config.set_main_option("sqlalchemy.url", url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure_options(url: str) -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of touching a database."""
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_options(url))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
