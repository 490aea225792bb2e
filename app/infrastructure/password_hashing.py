# app/infrastructure/password_hashing.py

import logging
from fastapi_users.password import PasswordHelper
from pwdlib import PasswordHash
from pwdlib.exceptions import UnknownHashError
from pwdlib.hashers.bcrypt import BcryptHasher
from config.settings import settings
from exceptions.domain_exceptions import HashingException

logger = logging.getLogger(__name__)


# bcrypt only looks at the first 72 bytes of a secret
BCRYPT_MAX_PASSWORD_BYTES = 72


# Process-wide helper, cost taken from settings once at import
password_helper = PasswordHelper(
    PasswordHash((BcryptHasher(rounds=settings.BCRYPT_COST),))
)


def hash_password(password: str) -> str:
    """
    Hash a raw password with bcrypt

    Raises:
        HashingException: If the secret cannot be hashed (not a string,
            or longer than bcrypt's 72 byte limit)
    """
    if not isinstance(password, str):
        raise HashingException(
            message="Password must be a string",
            details={"type": type(password).__name__}
        )

    size = len(password.encode("utf-8"))
    if size > BCRYPT_MAX_PASSWORD_BYTES:
        raise HashingException(
            message="Password is too long to be hashed",
            details={"max_bytes": BCRYPT_MAX_PASSWORD_BYTES, "bytes": size}
        )

    try:
        return password_helper.hash(password)
    except (ValueError, TypeError) as e:
        logger.error(f"Password hashing failed: {e}")
        raise HashingException(message="Password could not be hashed") from e


def verify_password(hashed_password: str, password: str) -> bool:
    """Check a candidate password against a stored bcrypt hash"""
    if not hashed_password or not isinstance(password, str):
        return False

    # A longer candidate can never match; some bcrypt versions would truncate it
    if len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        return False

    try:
        verified, _ = password_helper.verify_and_update(password, hashed_password)
    except (UnknownHashError, ValueError, TypeError):
        return False
    return verified
