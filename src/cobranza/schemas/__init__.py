"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .auth import LoginRequest, LoginResponse, UserSummary
from .client import ClientResponse
from .common import ErrorBody, ErrorResponse
from .payment import PaymentCreate, PaymentResponse

__all__ = [
    "ClientResponse",
    "ErrorBody", "ErrorResponse",
    "LoginRequest", "LoginResponse", "UserSummary",
    "PaymentCreate", "PaymentResponse",
]
