# services/accounts/passwords.py
"""bcrypt password hashing.

bcrypt only looks at the first 72 bytes of a secret; longer passwords are
rejected at registration instead of being silently truncated.
"""

import bcrypt

from packages.common.errors import ValidationError

MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = 10) -> str:
    """Return the bcrypt hash of `password` as text."""
    raw = password.encode("utf-8")
    if len(raw) > MAX_PASSWORD_BYTES:
        raise ValidationError(detail="password longer than 72 bytes")
    return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(password: str, hashed: str) -> bool:
    """Return True if `password` matches the stored bcrypt `hashed` value."""
    raw = password.encode("utf-8")
    if len(raw) > MAX_PASSWORD_BYTES or not hashed:
        return False
    try:
        return bcrypt.checkpw(raw, hashed.encode("ascii"))
    except ValueError:
        # stored value is not a bcrypt hash
        return False
