"""JSON-RPC 2.0 request handler."""
import asyncio
import contextvars
import inspect
import logging
import threading
from datetime import timedelta
from typing import Any, Callable, List, Optional, Set, Union

from .codec import Payload, decode_payload, encode_batch, encode_response
from .context import CallContext
from .errors import (
    DeadlineExceeded,
    InvalidRequest,
    MethodNotFound,
    ParseError,
    RPCError,
    new_internal_error,
)
from .models import JSONRPCRequest, JSONRPCResponse
from .registry import Handler, MethodRegistry

logger = logging.getLogger(__name__)


class JSONRPCHandler:
    """Handles JSON-RPC 2.0 payloads and routes calls to registered methods.

    Usage:
        rpc = JSONRPCHandler()
        rpc.set_default_timeout(5)

        @rpc.method("echo")
        async def echo(ctx, params):
            return params

        body = await rpc.serve(b'{"jsonrpc": "2.0", "method": "echo", "params": "hi", "id": 1}')
        # body is None for notifications; otherwise send it through your transport

    Handlers receive a CallContext and the request params exactly as
    decoded. Coroutine functions run on the event loop, anything else runs
    on a dedicated thread per call so that blocking handlers never queue
    behind each other. Raise RPCError (or a subclass) to choose the error
    code; any other exception becomes a -32000 internal error.

    A handler that outlives its deadline is answered with DeadlineExceeded
    but is not stopped: it keeps running in the background and its result
    is dropped. Pass ``cancel_on_timeout=True`` to cancel coroutine
    handlers instead. Threads can never be interrupted.
    """

    def __init__(
        self,
        default_timeout: Union[float, timedelta] = 0,
        cancel_on_timeout: bool = False
    ):
        self.methods = MethodRegistry()
        self.default_timeout = 0.0
        self.cancel_on_timeout = cancel_on_timeout
        self._detached: Set[asyncio.Future] = set()
        self.set_default_timeout(default_timeout)

    @classmethod
    def from_config(cls, config) -> "JSONRPCHandler":
        """Build a handler from a ServerConfig."""
        return cls(
            default_timeout=config.default_timeout,
            cancel_on_timeout=config.cancel_on_timeout,
        )

    @property
    def serving(self) -> bool:
        return self.methods.frozen

    def set_default_timeout(self, timeout: Union[float, timedelta]) -> None:
        """Set the per-call deadline in seconds. Zero disables it."""
        if self.serving:
            raise RuntimeError("Cannot change the timeout: server is already serving")
        if isinstance(timeout, timedelta):
            timeout = timeout.total_seconds()
        if timeout < 0:
            raise ValueError(f"timeout must not be negative, got {timeout}")
        self.default_timeout = float(timeout)

    def register_method(self, method_name: str, handler: Handler) -> None:
        """Register a JSON-RPC method handler.

        Args:
            method_name: Name of the JSON-RPC method (e.g., "echo")
            handler: Callable taking (ctx, params); may be async

        Re-registering a name replaces the previous handler.
        """
        self.methods.register(method_name, handler)

    define_method = register_method

    def method(self, method_name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Decorator form of register_method; defaults to the function name."""
        def decorator(func: Handler) -> Handler:
            self.register_method(method_name or func.__name__, func)
            return func
        return decorator

    async def serve(self, payload: Payload) -> Optional[bytes]:
        """Serve a single request or a batch.

        Returns the encoded response, or None when nothing must be sent
        (a notification or a batch made only of notifications).
        """
        self.methods.freeze()
        try:
            data = decode_payload(payload)
        except ParseError as e:
            return self._encode(JSONRPCResponse.failure(None, e))

        # A top-level null is a parse error (via handle_call), not an empty
        # batch; only a real [] is answered with InvalidRequest.
        if isinstance(data, list):
            if not data:
                return self._encode(JSONRPCResponse.failure(None, InvalidRequest()))
            return await self._serve_batch(data)

        return self._encode(await self.handle_call(data))

    async def serve_single(self, payload: Payload) -> Optional[bytes]:
        """Serve a payload as exactly one call; arrays are not batches here."""
        self.methods.freeze()
        try:
            data = decode_payload(payload)
        except ParseError as e:
            return self._encode(JSONRPCResponse.failure(None, e))
        return self._encode(await self.handle_call(data))

    async def handle_call(self, raw: Any) -> Optional[JSONRPCResponse]:
        """Handle one decoded call.

        Args:
            raw: JSON value of a single call (usually a dict)

        Returns:
            JSONRPCResponse with result or error, or None for a notification
        """
        try:
            request = JSONRPCRequest.from_raw(raw)
            request.ensure_valid()
        except RPCError as e:
            # Ids from malformed requests are never echoed back
            return JSONRPCResponse.failure(None, e)

        try:
            result = await self._dispatch(request)
        except RPCError as e:
            response = JSONRPCResponse.failure(request.id, e)
        else:
            response = JSONRPCResponse.success(request.id, result)

        if request.is_notification:
            return None
        return response

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for handlers that were left running after their deadline."""
        if self._detached:
            await asyncio.wait(set(self._detached), timeout=timeout)

    @property
    def pending(self) -> int:
        """Number of timed-out handlers still running."""
        return len(self._detached)

    async def _serve_batch(self, entries: List[Any]) -> Optional[bytes]:
        logger.debug(f"Serving batch of {len(entries)} calls")
        responses = await asyncio.gather(*(self.handle_call(entry) for entry in entries))
        return encode_batch(self._encode(response) for response in responses)

    async def _dispatch(self, request: JSONRPCRequest) -> Any:
        handler = self.methods.get(request.method)
        if handler is None:
            raise MethodNotFound()

        ctx = CallContext.with_timeout(request.method, request.id, self.default_timeout)
        logger.debug(f"Calling {request.method} (id={request.id!r})")
        try:
            return await self._run_with_deadline(handler, ctx, request.params)
        except RPCError:
            raise
        except Exception as e:
            logger.error(f"Internal error handling {request.method}: {e}", exc_info=True)
            raise new_internal_error(str(e)) from e

    async def _run_with_deadline(self, handler: Handler, ctx: CallContext, params: Any) -> Any:
        remaining = ctx.remaining()
        if remaining is None:
            return await self._invoke(handler, ctx, params)

        task = asyncio.ensure_future(self._invoke(handler, ctx, params))
        try:
            done, _ = await asyncio.wait({task}, timeout=remaining)
        except asyncio.CancelledError:
            task.cancel()
            raise
        if task in done:
            return task.result()

        ctx.expire()
        logger.warning(
            f"Method {ctx.method} (id={ctx.id!r}) exceeded its {self.default_timeout}s deadline"
        )
        if self.cancel_on_timeout:
            task.cancel()
        self._detach(task)
        raise DeadlineExceeded()

    async def _invoke(self, handler: Handler, ctx: CallContext, params: Any) -> Any:
        if inspect.iscoroutinefunction(handler):
            return await handler(ctx, params)
        result = await self._run_in_thread(handler, ctx, params)
        if inspect.isawaitable(result):
            return await result
        return result

    @staticmethod
    def _run_in_thread(func: Callable, *args: Any) -> asyncio.Future:
        """Run ``func`` on its own daemon thread and return a future for it.

        Blocking calls never queue behind each other, and a handler hanging
        past its deadline only holds its own thread.
        """
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        context = contextvars.copy_context()

        def resolve(result: Any, exc: Optional[BaseException]) -> None:
            if future.done():
                # Cancelled while the thread was running
                return
            if exc is not None:
                future.set_exception(exc)
            else:
                future.set_result(result)

        def target() -> None:
            try:
                result = context.run(func, *args)
            except BaseException as e:
                outcome = (None, e)
            else:
                outcome = (result, None)
            try:
                loop.call_soon_threadsafe(resolve, *outcome)
            except RuntimeError:
                logger.debug(f"Event loop closed before {func!r} finished")

        name = f"rpc-{getattr(func, '__name__', 'handler')}"
        threading.Thread(target=target, name=name, daemon=True).start()
        return future

    def _detach(self, task: asyncio.Future) -> None:
        self._detached.add(task)
        task.add_done_callback(self._reap)

    def _reap(self, task: asyncio.Future) -> None:
        self._detached.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.debug(f"Handler failed after its deadline: {exc!r}")

    @staticmethod
    def _encode(response: Optional[JSONRPCResponse]) -> Optional[bytes]:
        if response is None:
            return None
        return encode_response(response)
