# disc_insights/auth/crypto.py
import logging

from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from disc_insights.core.config import app_settings

_log = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__memory_cost=65536,  # KiB
    argon2__parallelism=4,
    argon2__time_cost=3,
)


def _pepper() -> str:
    pepper = app_settings.password_pepper
    if not pepper:
        raise EnvironmentError("PASSWORD_PEPPER environment variable not set.")
    return pepper


def hash_password(password: str) -> str:
    """Hashes a password using Argon2 with a configured pepper."""
    if not password:
        raise ValueError("Password cannot be empty.")
    return pwd_context.hash(f"{password}{_pepper()}")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifies a plain password against a stored hash."""
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(f"{plain_password}{_pepper()}", hashed_password)
    except UnknownHashError:
        _log.warning(f"Attempted verification with unknown hash format: {hashed_password[:10]}...")
        return False
