"""Sequential handler chain with an explicit continuation.

Every route owns an ordered tuple of handlers with the signature
``(request, response, next)``. A handler advances the chain by calling
``next()``; a handler that never calls it ends the chain (usually after
writing a response). Handlers may be plain functions or coroutines.

``next()`` returns an awaitable. Async handlers ``await next()`` to run
the rest of the chain inline; sync handlers just call ``next()`` and the
executor advances once they return.
"""

from collections.abc import Generator, Sequence
from typing import Any

from crust._internal.invoke import invoke
from crust._internal.types import ChainHandler


class Next:
    """Continuation handed to the handler at position ``index - 1``.

    Runs ``handlers[index:]`` at most once, no matter how many times it is
    called or awaited.
    """

    __slots__ = ("_called", "_done", "_handlers", "_index", "_request", "_response")

    def __init__(
        self,
        handlers: Sequence[ChainHandler],
        request: Any,
        response: Any,
        index: int,
    ) -> None:
        self._handlers = handlers
        self._request = request
        self._response = response
        self._index = index
        self._called = False
        self._done = False

    @property
    def called(self) -> bool:
        """True once the owning handler asked to advance."""
        return self._called

    def __call__(self) -> "Next":
        self._called = True
        return self

    def __await__(self) -> Generator[Any, None, None]:
        self._called = True
        return self._advance().__await__()

    async def _advance(self) -> None:
        if self._done:
            return
        self._done = True
        await run_chain(self._handlers, self._request, self._response, self._index)

    async def settle(self) -> None:
        """Advance if the handler called ``next()`` without awaiting it."""
        if self._called and not self._done:
            await self._advance()


async def run_chain(
    handlers: Sequence[ChainHandler],
    request: Any,
    response: Any,
    index: int = 0,
) -> None:
    """Run ``handlers[index]`` and, if it advances, the rest of the chain.

    An index past the end or a non-callable entry ends the chain silently.
    """
    if index < 0 or index >= len(handlers):
        return
    handler = handlers[index]
    if not callable(handler):
        return

    continuation = Next(handlers, request, response, index + 1)
    await invoke(handler, request, response, continuation)
    await continuation.settle()
