"""
Password hashing with bcrypt.

bcrypt only looks at the first 72 bytes of its input, so longer passwords
are refused outright instead of being truncated.
"""

import bcrypt

MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt with a fresh random salt.

    Two calls with the same password never return the same digest.

    Raises:
        ValueError: password longer than MAX_PASSWORD_BYTES when encoded
    """
    if password_too_long(password):
        raise ValueError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against its hash.

    Returns False for malformed or empty digests and for over-long
    passwords instead of raising.
    """
    if password_too_long(password):
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False
