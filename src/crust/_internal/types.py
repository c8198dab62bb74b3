"""Shared type aliases used across crust modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Chain handler: (request, response, next), optionally returning an awaitable
ChainHandler: TypeAlias = Callable[..., Any]

# Lifecycle hook: sync or async, no arguments
Hook: TypeAlias = Callable[[], Any]
