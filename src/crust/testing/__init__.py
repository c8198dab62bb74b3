"""Test utilities for crust applications.

    from crust.testing import TestClient
"""

from crust.testing.client import TestClient

__all__ = ["TestClient"]
