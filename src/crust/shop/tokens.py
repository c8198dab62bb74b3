"""Bearer tokens: opaque ids mapping to a user and an expiry."""

import logging
from typing import Any

from crust._internal import clock
from crust.data.store import FileStore
from crust.errors import AuthError
from crust.http.request import Request
from crust.security.ids import random_string
from crust.shop.users import Users

logger = logging.getLogger("crust.shop")

TOKEN_LENGTH = 20
NOT_AUTHORIZED = "You are not authorized for this resource"
EXPIRED = "Your token is expired"


class Tokens:
    """Token records: ``{"id", "email", "expires"}`` (epoch seconds)."""

    __slots__ = ("_cookie_name", "_expiration", "_store", "_users")

    def __init__(
        self,
        store: FileStore,
        users: Users,
        expiration: int = 3600,
        *,
        cookie_name: str = "token",
    ) -> None:
        self._store = store
        self._users = users
        self._expiration = expiration
        self._cookie_name = cookie_name

    @property
    def cookie_name(self) -> str:
        return self._cookie_name

    async def issue(self, email: str) -> dict[str, Any]:
        """Create a token for *email* valid for the configured lifetime."""
        while True:
            token_id = random_string(TOKEN_LENGTH)
            if await self._store.get(token_id) is None:
                break
        record = {
            "id": token_id,
            "email": email,
            "expires": clock.timestamp() + self._expiration,
        }
        await self._store.create(token_id, record)
        return record

    async def find_one(self, token_id: str) -> dict[str, Any] | None:
        if not token_id:
            return None
        return await self._store.get(token_id)

    async def delete(self, token_id: str) -> None:
        await self._store.delete(token_id)

    async def authenticate(self, token_id: str | None) -> dict[str, Any]:
        """Resolve *token_id* to its user.

        Raises ``AuthError`` for a missing, unknown or expired token, or
        one whose user no longer exists.
        """
        if not token_id:
            raise AuthError(NOT_AUTHORIZED)
        record = await self.find_one(token_id)
        if record is None:
            raise AuthError(NOT_AUTHORIZED)
        if record.get("expires", 0) < clock.timestamp():
            raise AuthError(EXPIRED)
        user = await self._users.find_one(record.get("email", ""))
        if user is None:
            logger.warning("Token %s points at missing user %s", token_id, record.get("email"))
            raise AuthError(NOT_AUTHORIZED)
        return user

    def extract(self, request: Request) -> str | None:
        """Find the token on *request*.

        Looks in the ``token`` header, ``Authorization: Bearer``, the
        query, the body ``token`` field and finally the token cookie.
        """
        token = request.headers.get("token")
        if token:
            return token

        authorization = request.headers.get("authorization", "")
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()

        token = request.query.get("token")
        if token:
            return token

        if isinstance(request.body, dict):
            token = request.body.get("token")
            if isinstance(token, str) and token:
                return token

        return request.cookies.get(self._cookie_name) or None
