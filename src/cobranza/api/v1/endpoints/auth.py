"""Authentication endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from cobranza.api.v1.dependencies import SessionDep
from cobranza.core.errors import UnauthorizedError
from cobranza.schemas.auth import LoginRequest, LoginResponse, UserSummary
from cobranza.services import auth_service

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/login", response_model=LoginResponse, summary="Exchange credentials for a token")
def login(payload: LoginRequest, db: SessionDep) -> LoginResponse:
    """Validate username and password and return a bearer token."""
    user = auth_service.authenticate(db, payload.username, payload.password)
    if user is None:
        raise UnauthorizedError("Invalid credentials")
    return LoginResponse(
        access_token=auth_service.issue_token(user),
        token_type="bearer",
        user=UserSummary.model_validate(user),
    )
