"""Security helpers: password hashing and random identifiers.

::

    from crust.security import hash_password, random_string, verify_password

    hashed = hash_password("my-password")
    token_id = random_string(20)
"""

from crust.security.ids import random_string
from crust.security.passwords import hash_password, verify_password

__all__ = [
    "hash_password",
    "random_string",
    "verify_password",
]
