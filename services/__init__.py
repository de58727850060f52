"""
Services package for the site API.
Contains the entity store backends and the email delivery service.
"""

from services.storage import EntityStore, MemoryStore, create_store, get_store

__all__ = [
    'EntityStore',
    'MemoryStore',
    'create_store',
    'get_store'
]
