"""Crust exception hierarchy.

Shared across Router, App, the request handler, the record store and the
shop modules so every layer raises and catches the same types.
"""

from dataclasses import dataclass


class CrustError(Exception):
    """Base for all crust-specific errors."""


class ConfigurationError(CrustError):
    """Raised when app configuration or route registration is invalid."""


@dataclass(frozen=True, slots=True)
class HTTPError(CrustError):
    """An error that maps directly to an HTTP status code.

    Raised by the router or the request pipeline. The ASGI handler
    catches these and answers with the status and detail.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route or file matched the request."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class BodyDecodeError(HTTPError):
    """400: the request body could not be decoded for its Content-Type."""

    def __init__(self, detail: str = "Malformed request body") -> None:
        super().__init__(status=400, detail=detail)


class AuthError(CrustError):
    """Missing, unknown or expired bearer token, or insufficient rights."""

    def __init__(self, detail: str, status: int = 401) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status = status


class ShopError(CrustError):
    """A shop rule was violated (empty cart, order already paid, ...)."""


class UpstreamError(CrustError):
    """A payment or e-mail provider call failed or answered unexpectedly."""

    def __init__(self, provider: str, status: int | None, detail: str) -> None:
        self.provider = provider
        self.status = status
        self.detail = detail
        if status is None:
            super().__init__(f"{provider}: {detail}")
        else:
            super().__init__(f"{provider} returned {status}: {detail}")


class StoreError(CrustError):
    """The record store could not read or write a record."""


class RecordExists(StoreError):  # noqa: N818
    """A create targeted a key that already has a record."""

    def __init__(self, key: str) -> None:
        super().__init__("The record exists and cannot be overwritten")
        self.key = key


class TemplateNotFound(CrustError):  # noqa: N818
    """A page or included fragment does not exist under the template root."""
