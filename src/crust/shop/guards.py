"""Chain handlers shared by the shop routes: auth, admin and error replies.

JSON clients (``Content-Type: application/json``) get status codes and
``{"errors": [...]}`` bodies. Browser forms get the messages flashed into
the session and a redirect to a page that shows them.
"""

from collections.abc import Sequence
from typing import Any

from crust._internal.types import ChainHandler
from crust.errors import AuthError
from crust.http.request import Request
from crust.http.response import ResponseWriter
from crust.shop.tokens import Tokens

ADMIN_ONLY = "Only admin can access to this resource"
ERROR_PAGE = "/error"


def echoed_fields(request: Request) -> dict[str, Any]:
    """The submitted fields to refill a form with, minus the password."""
    if not isinstance(request.body, dict):
        return {}
    return {key: value for key, value in request.body.items() if key != "password"}


def respond_error(
    request: Request,
    response: ResponseWriter,
    messages: Sequence[str],
    status: int = 500,
    redirect_to: str = ERROR_PAGE,
) -> None:
    """Answer with error *messages* in the client's format."""
    if request.wants_json:
        response.send({"errors": list(messages)}, status)
        return
    request.flash({"errors": list(messages), "fields": echoed_fields(request)})
    response.redirect(redirect_to)


def authenticated(tokens: Tokens) -> ChainHandler:
    """Resolve the bearer token into ``request.user`` and ``request.token``.

    Stops the chain with 401 (JSON) or a redirect to the error page.
    """

    async def require_token(request: Request, response: ResponseWriter, next: Any) -> None:
        token = tokens.extract(request)
        try:
            user = await tokens.authenticate(token)
        except AuthError as exc:
            respond_error(request, response, [exc.detail], exc.status)
            return
        request.user = user
        request.token = token
        await next()

    return require_token


def admin_only(request: Request, response: ResponseWriter, next: Any) -> Any:
    """Stop the chain unless the authenticated user is an admin."""
    if not (request.user or {}).get("admin"):
        respond_error(request, response, [ADMIN_ONLY], 403)
        return None
    return next()


def reject_invalid(
    request: Request,
    response: ResponseWriter,
    redirect_to: str = ERROR_PAGE,
) -> bool:
    """Answer 422 (or flash + redirect) when validation left errors.

    Returns True when a response was written and the handler should stop.
    """
    if not request.errors:
        return False
    respond_error(request, response, request.errors, 422, redirect_to)
    return True
