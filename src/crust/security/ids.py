"""Random identifiers for sessions, tokens, pizzas and orders."""

import secrets
import string

ALPHABET = string.ascii_lowercase + string.digits


def random_string(length: int = 20) -> str:
    """Return *length* random lowercase alphanumeric characters."""
    if length <= 0:
        msg = "length must be positive"
        raise ValueError(msg)
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
