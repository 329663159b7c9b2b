"""Credential checks and token issuance for staff logins."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from cobranza.core import security
from cobranza.models import User

logger = logging.getLogger(__name__)

__all__ = ["authenticate", "issue_token", "get_active_user"]


def get_active_user(db: Session, user_uuid: str) -> User | None:
    """Return an active user by public uuid."""
    return db.execute(
        select(User).where(User.uuid == user_uuid, User.active.is_(True)).limit(1)
    ).scalar_one_or_none()


def authenticate(db: Session, username: str, password: str) -> User | None:
    """Return the active user matching ``username`` and ``password``."""
    user = db.execute(
        select(User).where(User.username == username, User.active.is_(True)).limit(1)
    ).scalar_one_or_none()
    if user is None:
        logger.info("Login rejected for unknown or inactive user %s", username)
        return None
    if not security.verify_password(password, user.password_hash):
        logger.info("Login rejected for user %s: bad password", username)
        return None
    return user


def issue_token(user: User) -> str:
    """Create an access token carrying the user's uuid, role and name."""
    return security.create_access_token(
        user.uuid,
        extra_claims={"role": user.role, "name": user.name},
    )
