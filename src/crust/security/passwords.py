"""Password hashing with argon2id.

Produces PHC-format strings (``$argon2id$...``) safe to store in a user
record. Hashing is CPU-bound; callers on the event loop push it to a
worker thread.

Usage::

    from crust.security.passwords import hash_password, verify_password

    hashed = hash_password("my-password")
    ok = verify_password("my-password", hashed)
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a password with argon2id.

    Raises ``ValueError`` for an empty password.
    """
    if not password:
        msg = "Password must not be empty."
        raise ValueError(msg)
    return _hasher.hash(password)


def verify_password(password: str, phc_hash: str) -> bool:
    """Check a password against a stored argon2 hash.

    Returns ``False`` for a mismatch, an empty input or a string that is
    not an argon2 hash.
    """
    if not password or not phc_hash:
        return False
    try:
        return _hasher.verify(phc_hash, password)
    except (VerificationError, InvalidHashError):
        return False
