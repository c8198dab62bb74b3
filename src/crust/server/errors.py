"""Error responses for the request pipeline.

Maps ``HTTPError`` exceptions and unexpected failures to ``Response``
objects. Route handlers format their own domain errors; only what
escapes them reaches this module.
"""

import logging

from crust.errors import HTTPError
from crust.http.request import Request
from crust.http.response import Response, ResponseWriter

logger = logging.getLogger("crust.server")

GENERIC_ERROR_BODY = "Something went wrong\n"


def _carry_cookies(response: Response, writer: ResponseWriter | None) -> Response:
    """Keep cookies queued before the failure (the session cookie)."""
    if writer is None or writer.finished:
        return response
    return response.with_cookies(writer.pending_cookies)


def handle_http_error(
    exc: HTTPError,
    request: Request,
    writer: ResponseWriter | None = None,
) -> Response:
    """Answer an ``HTTPError`` with its status.

    JSON clients get ``{"errors": [detail]}``; everyone else gets the
    detail as plain text.
    """
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    detail = exc.detail or f"Error {exc.status}"
    if request.wants_json:
        response = ResponseWriter().send({"errors": [detail]}, exc.status)
    else:
        response = Response(body=detail + "\n", status=exc.status, content_type="text/plain")
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return _carry_cookies(response, writer)


def handle_internal_error(
    exc: Exception,
    request: Request,
    writer: ResponseWriter | None = None,
    *,
    debug: bool = False,
) -> Response:
    """Log an unexpected exception and answer 500."""
    logger.exception("500 %s %s", request.method, request.path)

    body = GENERIC_ERROR_BODY
    if debug:
        body = f"{GENERIC_ERROR_BODY}{type(exc).__name__}: {exc}\n"
    response = Response(body=body, status=500, content_type="text/plain")
    return _carry_cookies(response, writer)


def handle_unanswered(request: Request, writer: ResponseWriter) -> Response:
    """The chain ended without a terminal call; answer 500."""
    logger.warning("No response written for %s %s", request.method, request.path)
    response = Response(body=GENERIC_ERROR_BODY, status=500, content_type="text/plain")
    return _carry_cookies(response, writer)
