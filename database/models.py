"""
SQLAlchemy models for the relational entity store.
One table per entity; rows are converted to plain records by services/db_store.py.
"""

from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, Index

from database.connection import Base

# sqlite_autoincrement keeps SQLite from handing out the id of a deleted last row
NO_ID_REUSE = {'sqlite_autoincrement': True}


class UserModel(Base):
    """Dashboard users. Only admins can sign in."""
    __tablename__ = 'users'
    __table_args__ = NO_ID_REUSE

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)


class ContactModel(Base):
    """Contact form submissions."""
    __tablename__ = 'contacts'
    __table_args__ = (
        Index('ix_contacts_created_at', 'created_at'),
        NO_ID_REUSE,
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    email = Column(String(254), nullable=False)
    phone = Column(String(50))
    service = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class TestimonialModel(Base):
    """Customer testimonials awaiting or past moderation."""
    __tablename__ = 'testimonials'
    __table_args__ = (
        Index('ix_testimonials_is_approved', 'is_approved'),
        NO_ID_REUSE,
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    location = Column(String(200))
    rating = Column(Integer, nullable=False)
    text = Column(Text, nullable=False)
    service = Column(String(200))
    is_approved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class GalleryItemModel(Base):
    """Project photos shown in the public gallery."""
    __tablename__ = 'gallery_items'
    __table_args__ = (
        Index('ix_gallery_items_category', 'category'),
        NO_ID_REUSE,
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    category = Column(String(100), nullable=False)
    image_url = Column(String(500), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
