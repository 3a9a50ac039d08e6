"""Example methods served by the bundled transports."""
import asyncio
from typing import Any

from .jsonrpc import CallContext, InvalidParams, JSONRPCHandler


async def echo(ctx: CallContext, params: Any) -> Any:
    return params


async def add(ctx: CallContext, params: Any) -> float:
    """Sum a pair of numbers given as ``[a, b]``."""
    if (
        not isinstance(params, list)
        or len(params) != 2
        or not all(isinstance(p, (int, float)) and not isinstance(p, bool) for p in params)
    ):
        raise InvalidParams("params must be an array of two numbers")
    return params[0] + params[1]


async def sleep(ctx: CallContext, params: Any) -> str:
    """Sleep for ``params`` milliseconds, stopping early once the call expires."""
    if not isinstance(params, (int, float)) or isinstance(params, bool) or params < 0:
        raise InvalidParams("params must be a non-negative number of milliseconds")
    remaining = params / 1000
    while remaining > 0 and not ctx.expired:
        step = min(remaining, 0.01)
        await asyncio.sleep(step)
        remaining -= step
    return "ok"


def register_example_methods(rpc: JSONRPCHandler) -> None:
    """Register echo, add and sleep."""
    rpc.register_method("echo", echo)
    rpc.register_method("add", add)
    rpc.register_method("sleep", sleep)
