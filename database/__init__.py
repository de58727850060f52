"""
Database package for the relational entity store.
Provides SQLAlchemy models, connection management, and startup seeding.
"""

from database.connection import (
    Base,
    create_db_engine,
    get_session_factory,
    session_scope,
    init_db,
    check_db_connection
)

from database.models import (
    UserModel,
    ContactModel,
    TestimonialModel,
    GalleryItemModel
)

__all__ = [
    # Connection
    'Base',
    'create_db_engine',
    'get_session_factory',
    'session_scope',
    'init_db',
    'check_db_connection',
    # Models
    'UserModel',
    'ContactModel',
    'TestimonialModel',
    'GalleryItemModel'
]
