"""In-memory session store with read-once flash data.

One ``SessionStore`` belongs to one ``App``. It starts empty, grows with
every new visitor, is never persisted and never expires entries. The
router resolves a session for every request and always answers with a
``Set-Cookie`` for the resolved id.

Concurrent requests that share a session id mutate the same ``Session``
dict; the last write wins.
"""

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from crust.security.ids import random_string

logger = logging.getLogger("crust.server")

FLASH_KEY = "flash"
SESSION_ID_LENGTH = 20


class Session(dict[str, Any]):
    """A session record: an arbitrary bag plus flash helpers.

    Flash data survives exactly one read::

        session.flash({"errors": ["Bad input"]})
        session.get_flash()  # {"errors": ["Bad input"]}
        session.get_flash()  # None
    """

    def flash(self, data: Any) -> None:
        """Store *data* for the next request, replacing any earlier flash."""
        self[FLASH_KEY] = data

    def get_flash(self) -> Any:
        """Return and remove the flash data, or None when there is none."""
        return self.pop(FLASH_KEY, None)


class SessionStore:
    """Process-wide map from session id to ``Session``.

    Usage::

        store = SessionStore()
        session_id, session = store.get_or_create(request.cookies)
    """

    __slots__ = ("_cookie_name", "_sessions")

    def __init__(self, cookie_name: str = "sessionId") -> None:
        self._cookie_name = cookie_name
        self._sessions: dict[str, Session] = {}

    @property
    def cookie_name(self) -> str:
        return self._cookie_name

    def get_or_create(self, cookies: Mapping[str, str]) -> tuple[str, Session]:
        """Return the session named by the cookie, creating one if needed.

        Never fails: an absent or unknown id yields a fresh, unused id
        bound to an empty ``Session``.
        """
        session_id = cookies.get(self._cookie_name)
        if session_id:
            session = self._sessions.get(session_id)
            if session is not None:
                return session_id, session

        session_id = self._new_id()
        session = Session()
        self._sessions[session_id] = session
        logger.debug("New session %s", session_id)
        return session_id, session

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def _new_id(self) -> str:
        while True:
            candidate = random_string(SESSION_ID_LENGTH)
            if candidate not in self._sessions:
                return candidate

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __iter__(self) -> Iterator[str]:
        return iter(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)
