"""Record storage."""

from crust.data.store import FileStore

__all__ = ["FileStore"]
