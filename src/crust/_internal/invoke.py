"""Invoke helpers: call sync or async handlers uniformly.

Chain handlers and lifecycle hooks can be ``def`` or ``async def``;
the chain runner, the app lifespan and the test client all call them
through ``invoke``.

Usage::

    from crust._internal.invoke import invoke

    result = await invoke(handler, request, response, next)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
