"""Password hashing helpers (bcrypt)."""

import bcrypt

# bcrypt only looks at the first 72 bytes of input
_BCRYPT_MAX_BYTES = 72


def _pwd_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 10) -> str:
    """
    Hash password using bcrypt with cost factor >= 10.

    Returns the hash as text, ready for storage.
    """
    return bcrypt.hashpw(_pwd_bytes(password), bcrypt.gensalt(rounds=max(rounds, 10))).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison of a password against a stored hash."""
    try:
        return bcrypt.checkpw(_pwd_bytes(password), password_hash.encode())
    except ValueError:
        # malformed stored hash
        return False
