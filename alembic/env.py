import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from mechanic_backend.core.config import settings

# Alembic Config
config = context.config

# Logging
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# DATABASE_URL from the environment wins over settings
database_url = os.getenv("DATABASE_URL") or settings.database_url
if not database_url:
    raise RuntimeError("DATABASE_URL is not set and settings.database_url is empty")

config.set_main_option("sqlalchemy.url", database_url)

from mechanic_backend.db.session import Base  # noqa: E402
import mechanic_backend.models  # noqa: E402,F401  registers every table on Base.metadata

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Offline migrations."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Online migrations."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section) or {},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

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
