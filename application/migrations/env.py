from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from supplier_auth.config.settings import AuthConfigs
from supplier_auth.connections.database import Base, normalize_database_url
from supplier_auth.models import otp, users  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

database_url = normalize_database_url(AuthConfigs().DATABASE_URL)
target_metadata = Base.metadata


def run_migrations_offline():
    context.configure(url=database_url, target_metadata=target_metadata, literal_binds=True)

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    # built directly from the URL to avoid ini interpolation of '%' in passwords
    connectable = create_engine(database_url, poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
