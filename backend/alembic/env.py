"""Alembic environment.

Migrations run against ``app.database.engine`` so they get the same
driver timeouts as the API. SQLite needs batch mode for ALTER TABLE.
"""
from logging.config import fileConfig

from alembic import context

from app.config import settings
from app.database import Base, engine

from app.models.organizer import Organizer    # noqa: F401
from app.models.user import User              # noqa: F401
from app.models.event import Event            # noqa: F401
from app.models.enrollment import Enrollment  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
render_as_batch = settings.DATABASE_URL.startswith("sqlite")


def run_migrations_offline() -> None:
    """Emit SQL for the configured database without connecting."""
    context.configure(
        url=settings.DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=render_as_batch,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=render_as_batch,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
