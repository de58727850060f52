"""
Records and input value objects shared by the entity store, the validators
and the integration adapters.

Stored records are plain dataclasses; stores hand out copies so callers can
never change stored state by mutating a returned record. Input objects are
frozen: they are produced once by the validators and only read afterwards.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


# =============================================================================
# STORED RECORDS
# =============================================================================

@dataclass
class User:
    id: int
    username: str
    password_hash: str
    is_admin: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Sanitized view, never includes the password hash."""
        return {
            'id': self.id,
            'username': self.username,
            'isAdmin': self.is_admin,
        }


@dataclass
class Contact:
    id: int
    name: str
    email: str
    phone: Optional[str]
    service: str
    message: str
    is_read: bool
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'service': self.service,
            'message': self.message,
            'isRead': self.is_read,
            'createdAt': _iso(self.created_at),
        }


@dataclass
class Testimonial:
    id: int
    name: str
    location: Optional[str]
    rating: int
    text: str
    service: Optional[str]
    is_approved: bool
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'location': self.location,
            'rating': self.rating,
            'text': self.text,
            'service': self.service,
            'isApproved': self.is_approved,
            'createdAt': _iso(self.created_at),
        }


@dataclass
class GalleryItem:
    id: int
    title: str
    category: str
    description: Optional[str]
    image_url: str
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'category': self.category,
            'description': self.description,
            'imageUrl': self.image_url,
            'createdAt': _iso(self.created_at),
        }


# =============================================================================
# VALIDATED INPUT
# =============================================================================

@dataclass(frozen=True)
class NewContact:
    name: str
    email: str
    service: str
    message: str
    phone: Optional[str] = None


@dataclass(frozen=True)
class NewTestimonial:
    name: str
    rating: int
    text: str
    location: Optional[str] = None
    service: Optional[str] = None


@dataclass(frozen=True)
class NewGalleryItem:
    title: str
    category: str
    image_url: str
    description: Optional[str] = None


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {'role': self.role, 'content': self.content}


@dataclass(frozen=True)
class QuoteRequest:
    service_type: str
    project_description: str
    square_footage: Optional[str] = None
    timeline: Optional[str] = None
    location: Optional[str] = None


@dataclass(frozen=True)
class MaintenanceRequest:
    name: str
    email: str
    phone: str
    property_address: str
    issue_type: str
    description: str
    urgency: str
    preferred_contact_time: str
