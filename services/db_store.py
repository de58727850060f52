"""
Database Store - relational implementation of the entity store contract.

Each public method is one transaction (see database.connection.session_scope),
so a create/update/delete either fully commits or leaves no trace.
"""

import logging
from datetime import timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from database.connection import check_db_connection, session_scope
from database.models import UserModel, ContactModel, TestimonialModel, GalleryItemModel
from services.records import User, Contact, Testimonial, GalleryItem
from services.storage import (
    EntityStore, DuplicateRecordError, DEFAULT_PASSWORD_METHOD, hash_password, utcnow,
)

logger = logging.getLogger(__name__)


def _aware(value):
    # SQLite drops tzinfo on the way back
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_user(row: UserModel) -> User:
    return User(
        id=row.id,
        username=row.username,
        password_hash=row.password_hash,
        is_admin=bool(row.is_admin),
    )


def _to_contact(row: ContactModel) -> Contact:
    return Contact(
        id=row.id,
        name=row.name,
        email=row.email,
        phone=row.phone,
        service=row.service,
        message=row.message,
        is_read=bool(row.is_read),
        created_at=_aware(row.created_at),
    )


def _to_testimonial(row: TestimonialModel) -> Testimonial:
    return Testimonial(
        id=row.id,
        name=row.name,
        location=row.location,
        rating=row.rating,
        text=row.text,
        service=row.service,
        is_approved=bool(row.is_approved),
        created_at=_aware(row.created_at),
    )


def _to_gallery_item(row: GalleryItemModel) -> GalleryItem:
    return GalleryItem(
        id=row.id,
        title=row.title,
        category=row.category,
        description=row.description,
        image_url=row.image_url,
        created_at=_aware(row.created_at),
    )


class DatabaseStore(EntityStore):
    """Entity store backed by SQLAlchemy sessions."""

    backend = 'database'

    def __init__(self, session_factory, password_method: str = DEFAULT_PASSWORD_METHOD):
        self.session_factory = session_factory
        self.password_method = password_method

    def ping(self):
        return check_db_connection(self.session_factory.kw['bind'])

    def _session(self):
        return session_scope(self.session_factory)

    # Users --------------------------------------------------------------

    def create_user(self, username, password, is_admin=False):
        password_hash = hash_password(password, self.password_method)
        try:
            with self._session() as db:
                row = UserModel(username=username, password_hash=password_hash, is_admin=is_admin)
                db.add(row)
                db.flush()
                user = _to_user(row)
        except IntegrityError:
            raise DuplicateRecordError(f"Username already exists: {username}")
        logger.info(f"Created user: {username} (admin={is_admin})")
        return user

    def get_user(self, user_id) -> Optional[User]:
        with self._session() as db:
            row = db.get(UserModel, user_id)
            return _to_user(row) if row else None

    def get_user_by_username(self, username) -> Optional[User]:
        with self._session() as db:
            row = db.query(UserModel).filter(UserModel.username == username).first()
            return _to_user(row) if row else None

    def count_users(self) -> int:
        with self._session() as db:
            return db.query(UserModel).count()

    # Contacts -----------------------------------------------------------

    def create_contact(self, data):
        with self._session() as db:
            row = ContactModel(
                name=data.name,
                email=data.email,
                phone=data.phone,
                service=data.service,
                message=data.message,
                is_read=False,
                created_at=utcnow(),
            )
            db.add(row)
            db.flush()
            return _to_contact(row)

    def get_contacts(self) -> List[Contact]:
        with self._session() as db:
            rows = db.query(ContactModel).order_by(
                ContactModel.created_at.desc(), ContactModel.id.desc()
            ).all()
            return [_to_contact(r) for r in rows]

    def get_contact(self, contact_id):
        with self._session() as db:
            row = db.get(ContactModel, contact_id)
            return _to_contact(row) if row else None

    def mark_contact_as_read(self, contact_id):
        with self._session() as db:
            row = db.get(ContactModel, contact_id)
            if row is None:
                return None
            row.is_read = True
            db.flush()
            return _to_contact(row)

    # Testimonials -------------------------------------------------------

    def create_testimonial(self, data, approved=False):
        with self._session() as db:
            row = TestimonialModel(
                name=data.name,
                location=data.location,
                rating=data.rating,
                text=data.text,
                service=data.service,
                is_approved=approved,
                created_at=utcnow(),
            )
            db.add(row)
            db.flush()
            return _to_testimonial(row)

    def get_all_testimonials(self) -> List[Testimonial]:
        with self._session() as db:
            rows = db.query(TestimonialModel).order_by(
                TestimonialModel.created_at.desc(), TestimonialModel.id.desc()
            ).all()
            return [_to_testimonial(r) for r in rows]

    def get_approved_testimonials(self) -> List[Testimonial]:
        with self._session() as db:
            rows = db.query(TestimonialModel).filter(
                TestimonialModel.is_approved.is_(True)
            ).order_by(
                TestimonialModel.created_at.desc(), TestimonialModel.id.desc()
            ).all()
            return [_to_testimonial(r) for r in rows]

    def get_testimonial(self, testimonial_id):
        with self._session() as db:
            row = db.get(TestimonialModel, testimonial_id)
            return _to_testimonial(row) if row else None

    def approve_testimonial(self, testimonial_id):
        with self._session() as db:
            row = db.get(TestimonialModel, testimonial_id)
            if row is None:
                return None
            row.is_approved = True
            db.flush()
            return _to_testimonial(row)

    # Gallery ------------------------------------------------------------

    def create_gallery_item(self, data):
        with self._session() as db:
            row = GalleryItemModel(
                title=data.title,
                category=data.category,
                description=data.description,
                image_url=data.image_url,
                created_at=utcnow(),
            )
            db.add(row)
            db.flush()
            return _to_gallery_item(row)

    def get_gallery_items(self) -> List[GalleryItem]:
        with self._session() as db:
            rows = db.query(GalleryItemModel).order_by(
                GalleryItemModel.created_at.desc(), GalleryItemModel.id.desc()
            ).all()
            return [_to_gallery_item(r) for r in rows]

    def get_gallery_items_by_category(self, category) -> List[GalleryItem]:
        with self._session() as db:
            rows = db.query(GalleryItemModel).filter(
                GalleryItemModel.category == category
            ).order_by(
                GalleryItemModel.created_at.desc(), GalleryItemModel.id.desc()
            ).all()
            return [_to_gallery_item(r) for r in rows]

    def get_gallery_item(self, item_id):
        with self._session() as db:
            row = db.get(GalleryItemModel, item_id)
            return _to_gallery_item(row) if row else None

    def delete_gallery_item(self, item_id) -> bool:
        with self._session() as db:
            deleted = db.query(GalleryItemModel).filter(GalleryItemModel.id == item_id).delete()
            return deleted > 0

    # Monitoring ---------------------------------------------------------

    def stats(self):
        with self._session() as db:
            return {
                'users': db.query(UserModel).count(),
                'contacts': db.query(ContactModel).count(),
                'testimonials': db.query(TestimonialModel).count(),
                'gallery_items': db.query(GalleryItemModel).count(),
            }
