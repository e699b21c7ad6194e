# envoearn/services/identity.py
"""Login identities: signup, signin and admin delete over the users table."""
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from envoearn.errors import AuthenticationError, DependencyError, DuplicateEmailError
from envoearn.extensions import db
from envoearn.models import User

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def signup(email: str, password: str, is_admin: bool = False) -> User:
    """Create and commit an identity. Raises DuplicateEmailError or DependencyError."""
    user = User(email=_normalize_email(email), is_admin=is_admin)
    user.set_password(password)

    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateEmailError()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DependencyError(f"Could not create user account: {e}")

    logger.info("Identity %s created for %s", user.id, user.email)
    return user


def signin(email: str, password: str) -> User:
    user = User.query.filter_by(email=_normalize_email(email)).first()
    if not user or not user.check_password(password):
        raise AuthenticationError()
    return user


def admin_delete(user_id: int) -> bool:
    """Remove an identity. Returns False when there was nothing to delete."""
    user = db.session.get(User, user_id)
    if user is None:
        return False

    try:
        db.session.delete(user)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DependencyError(f"Could not delete user account {user_id}: {e}")

    logger.info("Identity %s deleted", user_id)
    return True
