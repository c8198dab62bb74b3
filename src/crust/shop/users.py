"""User accounts, keyed by e-mail address."""

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

import anyio.to_thread

from crust._internal import clock
from crust.data.store import FileStore
from crust.errors import ShopError
from crust.security.passwords import hash_password, verify_password

logger = logging.getLogger("crust.shop")

PROFILE_FIELDS = ("firstName", "lastName", "address")


def public(user: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of *user* without the password hash."""
    return {key: value for key, value in user.items() if key != "password"}


class Users:
    """User records::

        {"email", "firstName", "lastName", "address", "password",
         "admin", "orders", "createdAt"}

    Passwords are stored as argon2 hashes only.
    """

    __slots__ = ("_store",)

    def __init__(self, store: FileStore) -> None:
        self._store = store

    async def create(self, data: Mapping[str, Any], *, admin: bool = False) -> dict[str, Any]:
        """Create a user. Raises ``RecordExists`` for a taken e-mail."""
        email = str(data["email"])
        record: dict[str, Any] = {
            "email": email,
            "firstName": data.get("firstName", ""),
            "lastName": data.get("lastName", ""),
            "address": data.get("address", ""),
            "password": await self._hash(str(data["password"])),
            "admin": admin,
            "orders": [],
            "createdAt": clock.isoformat(),
        }
        await self._store.create(email, record)
        logger.info("User %s signed up", email)
        return record

    async def find(self) -> list[dict[str, Any]]:
        return await self._store.list()

    async def find_one(self, email: str) -> dict[str, Any] | None:
        if not email:
            return None
        return await self._store.get(email)

    async def update(self, email: str, changes: Mapping[str, Any]) -> dict[str, Any]:
        """Merge *changes* into the user; a new password is re-hashed.

        The e-mail is the record key and never changes.
        """
        user = await self.find_one(email)
        if user is None:
            msg = "Could not find the user"
            raise ShopError(msg)
        merged = {**user, **{key: value for key, value in changes.items() if key != "email"}}
        if changes.get("password"):
            merged["password"] = await self._hash(str(changes["password"]))
        else:
            merged["password"] = user["password"]
        await self._store.put(email, merged)
        return merged

    async def delete(self, email: str) -> None:
        await self._store.delete(email)
        logger.info("User %s deleted", email)

    async def authenticate(self, email: str, password: str) -> dict[str, Any] | None:
        """Return the user when the password matches, else None."""
        user = await self.find_one(email)
        if user is None:
            return None
        ok = await anyio.to_thread.run_sync(verify_password, password, user.get("password", ""))
        return user if ok else None

    async def recent(self, since: datetime) -> list[dict[str, Any]]:
        """Users created at or after *since*."""
        return [
            user
            for user in await self.find()
            if (created := clock.parse(user.get("createdAt", ""))) is not None and created >= since
        ]

    @staticmethod
    async def _hash(password: str) -> str:
        return await anyio.to_thread.run_sync(hash_password, password)
