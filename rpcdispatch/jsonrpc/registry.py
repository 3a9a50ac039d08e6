"""Method name to handler mapping."""
import logging
from typing import Any, Awaitable, Callable, Dict, Iterator, Optional, Union

from .context import CallContext

logger = logging.getLogger(__name__)

Handler = Callable[[CallContext, Any], Union[Any, Awaitable[Any]]]


class MethodRegistry:
    """Dispatch table shared by every call of a server.

    Registration happens during setup. Once ``freeze()`` is called (the
    server does so on its first request) the table is read-only, which is
    what makes unsynchronized concurrent lookups safe.
    """

    def __init__(self):
        self._methods: Dict[str, Handler] = {}
        self._frozen = False

    def register(self, method_name: str, handler: Handler) -> None:
        if self._frozen:
            raise RuntimeError(
                f"Cannot register {method_name!r}: server is already serving"
            )
        if not isinstance(method_name, str) or not method_name:
            raise ValueError("method name must be a non-empty string")
        if not callable(handler):
            raise TypeError(f"handler for {method_name!r} is not callable")
        if method_name in self._methods:
            logger.warning(f"Overwriting JSON-RPC method: {method_name}")
        self._methods[method_name] = handler
        logger.info(f"Registered JSON-RPC method: {method_name}")

    def get(self, method_name: str) -> Optional[Handler]:
        return self._methods.get(method_name)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, method_name: object) -> bool:
        return method_name in self._methods

    def __len__(self) -> int:
        return len(self._methods)

    def __iter__(self) -> Iterator[str]:
        return iter(self._methods)
