"""SQLAlchemy models for the collection service."""

from .client import Client
from .payment import Payment
from .ticket_series import TicketSeries
from .user import User

__all__ = [
    "Client",
    "Payment",
    "TicketSeries",
    "User",
]
