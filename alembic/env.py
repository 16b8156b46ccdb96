import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool, create_engine

from gamenet.core.config import settings
from gamenet.db.session import Base

# Import all models so Alembic sees them in metadata
from gamenet.models.user import User  # noqa: F401
from gamenet.models.venue import Venue, WorkingHoursEntry  # noqa: F401
from gamenet.models.station import Console, Game, Station, StationPricing, StationGame  # noqa: F401
from gamenet.models.booking import Reservation, GameSession, Invoice  # noqa: F401
from gamenet.models.setting import Setting  # noqa: F401


config = context.config

# Force sqlalchemy.url from the runtime DATABASE_URL
db_url = getattr(settings, "DATABASE_URL", None) or os.getenv("DATABASE_URL")
if not db_url:
    raise RuntimeError("DATABASE_URL is not set (check .env / gamenet.core.config.settings)")

config.set_main_option("sqlalchemy.url", db_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    # create_engine with the url directly; alembic.ini leaves sqlalchemy.url empty
    connectable = create_engine(config.get_main_option("sqlalchemy.url"), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
