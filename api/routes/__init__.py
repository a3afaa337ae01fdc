"""
API Routes Package

This package contains route handlers organized by feature:
- registration.py: REST endpoints for the two-step registration flow
"""

from api.routes.registration import router as registration_router

__all__ = [
    "registration_router",
]
