"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .clients import router as clients_router
from .payments import router as payments_router
from .tickets import router as tickets_router

__all__ = [
    "auth_router",
    "clients_router",
    "payments_router",
    "tickets_router",
]
