# File: stopmotion/services/auth_service.py

"""
Authentication service.

Session-level helpers for:
  - User lookup
  - User creation with a hashed password
  - Password verification

These run inside a transaction owned by the caller (ProjectStore) and let
SQLAlchemy errors propagate; mapping them to store errors happens there.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from stopmotion.core.errors import InvalidCredentials, InvalidUsername, NotFound
from stopmotion.core.security import hash_password, verify_password
from stopmotion.models.user import User

logger = logging.getLogger(__name__)


def check_username(username: str) -> str:
    """Usernames are stored exactly as given but may not be blank."""
    if not username or not username.strip():
        raise InvalidUsername(username)
    return username


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.execute(select(User).where(User.username == username)).scalar_one_or_none()


def require_user(db: Session, username: str) -> User:
    user = get_user_by_username(db, username)
    if user is None:
        raise NotFound("User", username)
    return user


def create_user(db: Session, *, username: str, password: str) -> User:
    """
    Insert a user row and flush it so the unique constraint is checked now.
    """
    user = User(username=username, password_hash=hash_password(password))
    db.add(user)
    db.flush()
    return user


def authenticate_user(
    db: Session,
    *,
    username: str,
    password: str,
) -> User:
    """
    Return the user whose stored hash matches `password`.

    Raises NotFound for an unknown username and InvalidCredentials for a
    wrong password.
    """
    user = require_user(db, username)
    if not verify_password(password, user.password_hash):
        logger.info("[AUTH] Rejected password for '%s'", username)
        raise InvalidCredentials(username)
    return user
