"""Password hashing for Rentora accounts."""

from passlib.hash import pbkdf2_sha256 as hasher


def hash_password(password: str) -> str:
    """Hash a plain-text password for storage."""
    return hasher.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Check a plain-text password against a stored hash."""
    try:
        return hasher.verify(plain_password, password_hash)
    except ValueError:
        # Malformed or foreign hash
        return False
