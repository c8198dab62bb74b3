"""Flat-file record store: one JSON file per record.

Each collection is a directory under the store root; each record is
``<key>.json`` inside it. Every file-system call runs in a worker thread
so each access is a suspension point on the event loop.

There is no locking. Two requests doing read-modify-write on the same
record race, and the last write wins.
"""

import json
import logging
from pathlib import Path
from typing import Any

import anyio.to_thread

from crust.errors import RecordExists, StoreError

logger = logging.getLogger("crust.store")

SUFFIX = ".json"


def _is_valid_key(key: Any) -> bool:
    if not isinstance(key, str) or not key:
        return False
    return not ("/" in key or "\\" in key or ".." in key or key.startswith("."))


def _check_key(key: str) -> str:
    if not _is_valid_key(key):
        msg = f"Invalid record key {key!r}"
        raise StoreError(msg)
    return key


class FileStore:
    """Keyed JSON records in one collection directory.

    Usage::

        users = FileStore(".data", "users")
        await users.create("a@bc.com", {"email": "a@bc.com"})
        record = await users.get("a@bc.com")
    """

    __slots__ = ("_collection", "_directory")

    def __init__(self, root: str | Path, collection: str) -> None:
        self._collection = _check_key(collection)
        self._directory = Path(root) / collection

    @property
    def collection(self) -> str:
        return self._collection

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        return self._directory / f"{_check_key(key)}{SUFFIX}"

    # -- Reads --

    async def get(self, key: str) -> Any | None:
        """Return the record for *key*, or None when it does not exist.

        A key that could never name a record reads as missing.
        """
        if not _is_valid_key(key):
            logger.debug("Read of invalid key %r in %s", key, self._collection)
            return None
        path = self._path(key)
        try:
            raw = await anyio.to_thread.run_sync(path.read_text, "utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StoreError(f"Could not read {self._collection}/{key}: {exc}") from exc
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise StoreError(f"Corrupt record {self._collection}/{key}") from exc

    async def keys(self) -> list[str]:
        """All record keys in the collection, sorted."""

        def scan() -> list[str]:
            if not self._directory.is_dir():
                return []
            return sorted(p.stem for p in self._directory.glob(f"*{SUFFIX}") if p.is_file())

        return await anyio.to_thread.run_sync(scan)

    async def list(self) -> list[Any]:
        """All records in the collection, sorted by key."""
        records = []
        for key in await self.keys():
            record = await self.get(key)
            if record is not None:
                records.append(record)
        return records

    # -- Writes --

    async def create(self, key: str, record: Any) -> Any:
        """Write a new record. Raises ``RecordExists`` if *key* is taken."""
        path = self._path(key)
        payload = json.dumps(record, indent=2)

        def write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("x", encoding="utf-8") as fh:
                fh.write(payload)

        try:
            await anyio.to_thread.run_sync(write)
        except FileExistsError as exc:
            raise RecordExists(key) from exc
        except OSError as exc:
            raise StoreError(f"Could not create {self._collection}/{key}: {exc}") from exc
        logger.debug("Created %s/%s", self._collection, key)
        return record

    async def put(self, key: str, record: Any) -> Any:
        """Write *record* under *key*, replacing any existing one."""
        path = self._path(key)
        payload = json.dumps(record, indent=2)

        def write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(payload, encoding="utf-8")

        try:
            await anyio.to_thread.run_sync(write)
        except OSError as exc:
            raise StoreError(f"Could not write {self._collection}/{key}: {exc}") from exc
        return record

    async def delete(self, key: str) -> None:
        """Remove the record. Raises ``StoreError`` when it does not exist."""
        path = self._path(key)
        try:
            await anyio.to_thread.run_sync(path.unlink)
        except FileNotFoundError as exc:
            raise StoreError(f"The record {self._collection}/{key} does not exist") from exc
        except OSError as exc:
            raise StoreError(f"Could not delete {self._collection}/{key}: {exc}") from exc
        logger.debug("Deleted %s/%s", self._collection, key)

    def __repr__(self) -> str:
        return f"FileStore({str(self._directory)!r})"
