"""
Database connection management for the relational entity store.
Handles SQLAlchemy engine creation, session management, and connection verification.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# SQLAlchemy Base for model declarations
Base = declarative_base()


def normalize_database_url(url):
    """Handle hosted postgres:// vs postgresql:// URL format"""
    if url and url.startswith('postgres://'):
        return url.replace('postgres://', 'postgresql://', 1)
    return url


def create_db_engine(database_url):
    """
    Create the SQLAlchemy engine for a database URL.

    SQLite URLs get a thread-shareable connection (and a single static
    connection for in-memory databases); other URLs get a pre-pinging pool.
    """
    url = normalize_database_url(database_url)
    if not url:
        raise RuntimeError(
            "DATABASE_URL not configured. Cannot create the database engine. "
            "Please set the DATABASE_URL environment variable."
        )

    try:
        if url.startswith('sqlite'):
            options = {'connect_args': {'check_same_thread': False}}
            if url in ('sqlite://', 'sqlite:///:memory:'):
                options['poolclass'] = StaticPool
            engine = create_engine(url, **options)
        else:
            engine = create_engine(
                url,
                pool_size=5,
                max_overflow=10,
                pool_pre_ping=True,  # Verify connections before using
                pool_recycle=300,    # Recycle connections after 5 minutes
            )
        logger.info(f"Database engine created for {engine.url.get_backend_name()}")
        return engine
    except Exception as e:
        logger.error(f"Failed to create database engine: {e}")
        raise RuntimeError(f"Failed to connect to database: {e}")


def get_session_factory(engine):
    """Session factory bound to an engine"""
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@contextmanager
def session_scope(session_factory):
    """
    Context manager for one unit of work.

    Commits when the block finishes, rolls back and re-raises on any error.

    Example:
        with session_scope(factory) as db:
            db.add(model)
    """
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def check_db_connection(engine):
    """
    Verify that the database connection is working.
    Returns True if connection is successful, raises exception otherwise.
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        raise RuntimeError(f"Cannot connect to database: {e}")


def init_db(engine):
    """
    Create all tables that do not exist yet.
    Alembic migrations remain the source of truth for production schemas.
    """
    # Import models to ensure they're registered with Base
    from database import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")
