"""Per-request context.

Unlike a pure value object, the request is the shared scratchpad of a
handler chain: the router attaches cookies, the session and the decoded
body; the auth guard attaches the user and token; validation attaches
errors. It is created fresh per request and dropped with the response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from crust._internal.asgi import Scope
from crust.http.headers import Headers
from crust.http.query import QueryParams

if TYPE_CHECKING:
    from crust.sessions import Session


@dataclass(slots=True)
class Request:
    """A mutable HTTP request context.

    ``raw_body`` is read in full before dispatch; ``body`` holds the
    decoded form of it once the router has parsed it (POST/PUT/PATCH).
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    raw_body: bytes = b""
    body: Any = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)
    session_id: str | None = None
    session: Session | None = None
    user: dict[str, Any] | None = None
    token: str | None = None
    errors: list[str] = field(default_factory=list)
    client: tuple[str, int] | None = None

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def media_type(self) -> str:
        """Content-Type without parameters, lower-cased."""
        return (self.content_type or "").split(";", 1)[0].strip().lower()

    @property
    def wants_json(self) -> bool:
        """True when the client speaks JSON (``Content-Type: application/json``)."""
        return self.media_type == "application/json"

    @property
    def data(self) -> dict[str, Any]:
        """Input fields: the decoded body for writes, the query otherwise."""
        if self.method in ("POST", "PUT", "PATCH"):
            return self.body if isinstance(self.body, dict) else {}
        return self.query.to_dict()

    # -- Flash --

    def flash(self, data: Any) -> None:
        """Store one-time data in the session for the next request."""
        if self.session is None:
            msg = "No session attached to this request."
            raise LookupError(msg)
        self.session.flash(data)

    def get_flash(self) -> Any:
        """Return and remove the flash data, or None."""
        if self.session is None:
            return None
        return self.session.get_flash()

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope, body: bytes = b"") -> Request:
        """Create a Request from an ASGI scope and its fully read body."""
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            raw_body=body,
            client=tuple(client) if client else None,
        )
