"""ASGI handler: translates ASGI scope/messages to crust types.

The only component that touches raw ASGI request messages. Reads the
whole body, builds a ``Request`` and a ``ResponseWriter``, dispatches
through the router and sends the resulting ``Response`` back. No
exception escapes: a failing request never takes the process down.
"""

from crust._internal.asgi import Receive, Scope, Send, read_body
from crust.errors import HTTPError
from crust.http.request import Request
from crust.http.response import Response, ResponseWriter
from crust.routing.router import Router
from crust.server.errors import handle_http_error, handle_internal_error, handle_unanswered
from crust.server.sender import send_response


async def dispatch(
    request: Request,
    *,
    router: Router,
    debug: bool = False,
) -> Response:
    """Run *request* through the router and return the response to send."""
    writer = ResponseWriter()
    try:
        await router.process(request, writer)
    except HTTPError as exc:
        return handle_http_error(exc, request, writer)
    except Exception as exc:
        return handle_internal_error(exc, request, writer, debug=debug)

    if writer.response is None:
        return handle_unanswered(request, writer)
    return writer.response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    debug: bool = False,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    body = await read_body(receive)
    request = Request.from_asgi(scope, body)
    response = await dispatch(request, router=router, debug=debug)
    await send_response(response, send)
