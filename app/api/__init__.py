"""
API Blueprints Package

All HTTP route handlers for the application, organized by domain.
Each module defines a Flask Blueprint registered in app/__init__.py.

BLUEPRINT REFERENCE:
====================

Public site:
- contacts.py       : Contact form (/api/contacts)
- testimonials.py   : Testimonials and moderation (/api/testimonials*)
- gallery.py        : Project gallery and image uploads (/api/gallery*)
- maintenance.py    : Maintenance requests with email notification
- misc.py           : Uploaded file serving (/uploads/*)

AI:
- ai_chat.py        : Chatbot, quote estimates, admin content helpers

Admin:
- auth_routes.py    : Login, logout, session status (/api/auth/*)

Health and metrics endpoints live in health_checks.py at the project root.
"""

# All blueprints are imported and registered in app/__init__.py
# This file serves as documentation only

__all__ = []
