"""
Entity Store - the single owner of users, contacts, testimonials and gallery items.

Two backends implement the same contract:
- MemoryStore: process-local dictionaries (default, state is lost on restart)
- DatabaseStore (services/db_store.py): SQLAlchemy, one transaction per call

Contract shared by both backends:
- ids are auto-incrementing integers and are never reused, even after delete
- list methods return newest-first, ordered by (created_at, id) descending
- "not found" is a normal return value (None / False), never an exception
- returned records are copies; mutating them does not change stored state
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional

from flask import current_app
from werkzeug.security import generate_password_hash

from services.records import (
    User, Contact, Testimonial, GalleryItem,
    NewContact, NewTestimonial, NewGalleryItem,
)

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ('memory', 'database')


class StoreError(Exception):
    """Base exception for store invariant violations"""
    pass


class DuplicateRecordError(StoreError):
    """Raised when a unique field (username) is already taken"""
    pass


DEFAULT_PASSWORD_METHOD = 'pbkdf2:sha256'


def hash_password(password: str, method: str = DEFAULT_PASSWORD_METHOD) -> str:
    """Salted hash for stored user passwords"""
    return generate_password_hash(password, method=method)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def newest_first(records):
    """Sort records by creation time, newest first, id breaking ties"""
    return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)


class EntityStore(ABC):
    """Storage interface used by the auth gate and the request handlers."""

    backend = None

    # Users --------------------------------------------------------------

    @abstractmethod
    def create_user(self, username: str, password: str, is_admin: bool = False) -> User:
        ...

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]:
        ...

    @abstractmethod
    def count_users(self) -> int:
        ...

    # Contacts -----------------------------------------------------------

    @abstractmethod
    def create_contact(self, data: NewContact) -> Contact:
        ...

    @abstractmethod
    def get_contacts(self) -> List[Contact]:
        ...

    @abstractmethod
    def get_contact(self, contact_id: int) -> Optional[Contact]:
        ...

    @abstractmethod
    def mark_contact_as_read(self, contact_id: int) -> Optional[Contact]:
        ...

    # Testimonials -------------------------------------------------------

    @abstractmethod
    def create_testimonial(self, data: NewTestimonial, approved: bool = False) -> Testimonial:
        ...

    @abstractmethod
    def get_all_testimonials(self) -> List[Testimonial]:
        ...

    @abstractmethod
    def get_approved_testimonials(self) -> List[Testimonial]:
        ...

    @abstractmethod
    def get_testimonial(self, testimonial_id: int) -> Optional[Testimonial]:
        ...

    @abstractmethod
    def approve_testimonial(self, testimonial_id: int) -> Optional[Testimonial]:
        ...

    # Gallery ------------------------------------------------------------

    @abstractmethod
    def create_gallery_item(self, data: NewGalleryItem) -> GalleryItem:
        ...

    @abstractmethod
    def get_gallery_items(self) -> List[GalleryItem]:
        ...

    @abstractmethod
    def get_gallery_items_by_category(self, category: str) -> List[GalleryItem]:
        ...

    @abstractmethod
    def get_gallery_item(self, item_id: int) -> Optional[GalleryItem]:
        ...

    @abstractmethod
    def delete_gallery_item(self, item_id: int) -> bool:
        ...

    # Monitoring ---------------------------------------------------------

    def ping(self) -> bool:
        """True when the backing storage answers; raises otherwise"""
        return True

    def stats(self) -> Dict[str, int]:
        """Record counts per entity type"""
        return {
            'users': self.count_users(),
            'contacts': len(self.get_contacts()),
            'testimonials': len(self.get_all_testimonials()),
            'gallery_items': len(self.get_gallery_items()),
        }


class MemoryStore(EntityStore):
    """
    In-process store backed by one dictionary and one id counter per entity.

    Every operation runs under a single lock, so concurrent request threads
    see each operation as atomic and ids are handed out exactly once.
    """

    backend = 'memory'

    def __init__(self, password_method: str = DEFAULT_PASSWORD_METHOD):
        self.password_method = password_method
        self._lock = threading.Lock()
        self._users: Dict[int, User] = {}
        self._contacts: Dict[int, Contact] = {}
        self._testimonials: Dict[int, Testimonial] = {}
        self._gallery: Dict[int, GalleryItem] = {}
        self._next_ids = {'users': 1, 'contacts': 1, 'testimonials': 1, 'gallery': 1}

    def _next_id(self, kind: str) -> int:
        next_id = self._next_ids[kind]
        self._next_ids[kind] = next_id + 1
        return next_id

    @staticmethod
    def _copy(record):
        return replace(record) if record is not None else None

    # Users --------------------------------------------------------------

    def create_user(self, username, password, is_admin=False):
        password_hash = hash_password(password, self.password_method)
        with self._lock:
            if any(u.username == username for u in self._users.values()):
                raise DuplicateRecordError(f"Username already exists: {username}")
            user = User(
                id=self._next_id('users'),
                username=username,
                password_hash=password_hash,
                is_admin=is_admin,
            )
            self._users[user.id] = user
            logger.info(f"Created user: {username} (admin={is_admin})")
            return self._copy(user)

    def get_user(self, user_id):
        with self._lock:
            return self._copy(self._users.get(user_id))

    def get_user_by_username(self, username):
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return self._copy(user)
            return None

    def count_users(self):
        with self._lock:
            return len(self._users)

    # Contacts -----------------------------------------------------------

    def create_contact(self, data):
        with self._lock:
            contact = Contact(
                id=self._next_id('contacts'),
                name=data.name,
                email=data.email,
                phone=data.phone,
                service=data.service,
                message=data.message,
                is_read=False,
                created_at=utcnow(),
            )
            self._contacts[contact.id] = contact
            return self._copy(contact)

    def get_contacts(self):
        with self._lock:
            return [self._copy(c) for c in newest_first(self._contacts.values())]

    def get_contact(self, contact_id):
        with self._lock:
            return self._copy(self._contacts.get(contact_id))

    def mark_contact_as_read(self, contact_id):
        with self._lock:
            contact = self._contacts.get(contact_id)
            if contact is None:
                return None
            contact.is_read = True
            return self._copy(contact)

    # Testimonials -------------------------------------------------------

    def create_testimonial(self, data, approved=False):
        with self._lock:
            testimonial = Testimonial(
                id=self._next_id('testimonials'),
                name=data.name,
                location=data.location,
                rating=data.rating,
                text=data.text,
                service=data.service,
                is_approved=approved,
                created_at=utcnow(),
            )
            self._testimonials[testimonial.id] = testimonial
            return self._copy(testimonial)

    def get_all_testimonials(self):
        with self._lock:
            return [self._copy(t) for t in newest_first(self._testimonials.values())]

    def get_approved_testimonials(self):
        with self._lock:
            approved = [t for t in self._testimonials.values() if t.is_approved]
            return [self._copy(t) for t in newest_first(approved)]

    def get_testimonial(self, testimonial_id):
        with self._lock:
            return self._copy(self._testimonials.get(testimonial_id))

    def approve_testimonial(self, testimonial_id):
        with self._lock:
            testimonial = self._testimonials.get(testimonial_id)
            if testimonial is None:
                return None
            testimonial.is_approved = True
            return self._copy(testimonial)

    # Gallery ------------------------------------------------------------

    def create_gallery_item(self, data):
        with self._lock:
            item = GalleryItem(
                id=self._next_id('gallery'),
                title=data.title,
                category=data.category,
                description=data.description,
                image_url=data.image_url,
                created_at=utcnow(),
            )
            self._gallery[item.id] = item
            return self._copy(item)

    def get_gallery_items(self):
        with self._lock:
            return [self._copy(i) for i in newest_first(self._gallery.values())]

    def get_gallery_items_by_category(self, category):
        with self._lock:
            matching = [i for i in self._gallery.values() if i.category == category]
            return [self._copy(i) for i in newest_first(matching)]

    def get_gallery_item(self, item_id):
        with self._lock:
            return self._copy(self._gallery.get(item_id))

    def delete_gallery_item(self, item_id):
        with self._lock:
            return self._gallery.pop(item_id, None) is not None


def create_store(config) -> EntityStore:
    """
    Build the entity store selected by configuration

    Args:
        config: Flask app configuration (or any mapping)

    Returns:
        EntityStore instance

    Raises:
        RuntimeError: If the backend is unknown or the database is not configured
    """
    backend = (config.get('STORAGE_BACKEND') or 'memory').lower()
    password_method = config.get('PASSWORD_HASH_METHOD') or DEFAULT_PASSWORD_METHOD

    if backend == 'memory':
        logger.info("Using in-memory entity store (data is lost on restart)")
        return MemoryStore(password_method)

    if backend == 'database':
        from database.connection import create_db_engine, get_session_factory, init_db
        from services.db_store import DatabaseStore

        database_url = config.get('DATABASE_URL')
        if not database_url:
            raise RuntimeError("STORAGE_BACKEND=database requires DATABASE_URL to be set")

        engine = create_db_engine(database_url)
        init_db(engine)
        logger.info("Using database entity store")
        return DatabaseStore(get_session_factory(engine), password_method)

    raise RuntimeError(f"Unknown STORAGE_BACKEND '{backend}'. Expected one of {STORAGE_BACKENDS}")


def get_store() -> EntityStore:
    """Entity store of the current Flask app"""
    return current_app.entity_store
