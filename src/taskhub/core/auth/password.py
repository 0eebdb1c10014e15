"""Password hashing utilities using bcrypt."""

import secrets

import bcrypt

DEFAULT_ROUNDS = 12

# bcrypt ignores everything past 72 bytes; reject instead of truncating silently
MAX_PASSWORD_BYTES = 72

GENERATED_PASSWORD_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZabcdefghjkmnpqrstuvwxyz23456789"


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password
        rounds: bcrypt cost factor

    Returns:
        Bcrypt hash string, salted so repeated calls differ

    Raises:
        ValueError: If the password is empty or longer than 72 bytes
    """
    encoded = password.encode("utf-8")
    if not encoded:
        raise ValueError("Password must not be empty")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(encoded, salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash.

    Never raises: a corrupt or malformed stored hash is a mismatch.

    Args:
        plain_password: Plain text password to check
        hashed_password: Bcrypt hash to check against

    Returns:
        True if password matches hash
    """
    if not plain_password or not hashed_password:
        return False
    encoded = plain_password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, hashed_password.encode("utf-8"))
    except ValueError:
        return False


def generate_password() -> str:
    """Generate a readable random password like ``aB3x-Kp9m-Tz2w``."""
    raw = "".join(secrets.choice(GENERATED_PASSWORD_ALPHABET) for _ in range(12))
    return f"{raw[:4]}-{raw[4:8]}-{raw[8:]}"
