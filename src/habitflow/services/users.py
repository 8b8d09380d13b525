"""Owner lookup for habits. Credentials are handled by the external auth provider."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Callable, Optional

from sqlmodel import Session, select

from ..logging_config import get_logger
from ..models.user import User

SessionFactory = Callable[[], AbstractContextManager[Session]]

logger = get_logger(__name__)


def get_user_by_username(username: str, session_factory: SessionFactory) -> Optional[User]:
    """Fetch a user by username."""
    username = username.strip()
    with session_factory() as session:
        user = session.exec(select(User).where(User.username == username)).first()
        if user:
            session.expunge(user)
        return user


def ensure_user(username: str, session_factory: SessionFactory) -> User:
    """Return the user named ``username``, creating the row on first use."""

    username = (username or "").strip()
    if not username:
        raise ValueError("Username is required")
    existing = get_user_by_username(username, session_factory)
    if existing:
        return existing

    with session_factory() as session:
        user = User(username=username)
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
    logger.info("User created", extra={"username": username})
    return user
