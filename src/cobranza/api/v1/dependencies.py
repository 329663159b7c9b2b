"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session, sessionmaker

from cobranza.core.errors import UnauthorizedError
from cobranza.core.security import JWTError, decode_access_token
from cobranza.db.session import get_db, get_session_factory
from cobranza.models import User
from cobranza.services.auth_service import get_active_user

# HTTP Bearer scheme; missing credentials are reported with our own envelope.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
SessionFactoryDep = Annotated[sessionmaker[Session], Depends(get_session_factory)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from the bearer token.

    Raises:
        UnauthorizedError: If the token is missing, invalid, expired, or the
            user no longer exists or was deactivated.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Missing token")
    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError as err:
        raise UnauthorizedError("Invalid token") from err

    subject = payload.get("sub")
    if not subject:
        raise UnauthorizedError("Invalid token")

    user = get_active_user(db, str(subject))
    if user is None:
        raise UnauthorizedError("User not found")
    return user


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
