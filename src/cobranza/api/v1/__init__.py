"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    clients_router,
    payments_router,
    tickets_router,
)

__all__ = [
    "auth_router",
    "clients_router",
    "payments_router",
    "tickets_router",
]
