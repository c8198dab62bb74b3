"""Exact-path routing and the handler chain."""

from crust.routing.chain import Next, run_chain
from crust.routing.router import Router, decode_body

__all__ = ["Next", "Router", "decode_body", "run_chain"]
