"""
Alembic environment for the relational entity store.

The target database comes from the same configuration the app uses
(DATABASE_URL via config.get_config()), so `alembic upgrade head` always
migrates the database the API will talk to.
"""

import os
import sys
from logging.config import fileConfig

from sqlalchemy import pool, create_engine
from alembic import context

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import get_config
from database.connection import Base, normalize_database_url
from database import models  # noqa: F401 - registers the tables on Base.metadata

alembic_config = context.config

if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name)

target_metadata = Base.metadata


def database_url():
    url = normalize_database_url(get_config().DATABASE_URL or os.environ.get('DATABASE_URL'))
    if not url:
        raise RuntimeError("DATABASE_URL is not set; nothing to migrate")
    return url


def migrate_offline():
    """Emit the migration SQL without connecting (alembic upgrade --sql)"""
    context.configure(
        url=database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def migrate_online():
    engine = create_engine(database_url(), poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            # SQLite cannot ALTER most constraints in place
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                render_as_batch=connection.dialect.name == 'sqlite',
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    migrate_offline()
else:
    migrate_online()
