"""Account service: registration and credential check."""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .auth import MAX_PASSWORD_BYTES, get_password_hash, password_too_long, verify_password
from .database import storage_errors
from .errors import Conflict, Unauthorized, ValidationError
from .models import User

logger = logging.getLogger(__name__)

# Checked against when the username is unknown, so both failures cost one hash check
_DUMMY_HASH = get_password_hash("no-such-user")


def _require_credentials(username: Optional[str], password: Optional[str]) -> None:
    if username is None or not username.strip() or not password:
        raise ValidationError("Username and password are required")


def _identity(user: User) -> dict:
    return {"id": user.id, "username": user.username}


def register(session: Session, username: Optional[str], password: Optional[str]) -> dict:
    """Create a user. The unique index on username decides duplicates."""
    _require_credentials(username, password)
    if password_too_long(password):
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

    user = User(username=username, hashed_password=get_password_hash(password))
    with storage_errors(session):
        session.add(user)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            logger.info("Registration refused, username %r taken", username)
            raise Conflict("Username already exists")
        session.refresh(user)

    logger.info("User %s registered as %r", user.id, user.username)
    return _identity(user)


def login(session: Session, username: Optional[str], password: Optional[str]) -> dict:
    _require_credentials(username, password)

    with storage_errors(session):
        user = session.exec(select(User).where(User.username == username)).first()

    # Same error and same work either way so callers cannot tell which usernames exist
    if user is None:
        verify_password(password, _DUMMY_HASH)
        logger.info("Failed login for %r", username)
        raise Unauthorized("Invalid username or password")
    if not verify_password(password, user.hashed_password):
        logger.info("Failed login for %r", username)
        raise Unauthorized("Invalid username or password")

    return _identity(user)
