"""Per-call execution context handed to every handler."""
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class CallContext:
    """Carries the call identity and its optional deadline.

    ``deadline`` is a ``time.monotonic()`` timestamp so that handlers running
    on their own threads can check it as well as coroutine handlers. The engine
    never stops a handler that overruns; it only marks the context expired.
    Long-running handlers may poll ``expired`` and bail out early.
    """

    method: str
    id: Any = None
    deadline: Optional[float] = None
    _expired: threading.Event = field(default_factory=threading.Event, repr=False, compare=False)

    @classmethod
    def with_timeout(cls, method: str, request_id: Any, timeout: float) -> "CallContext":
        deadline = time.monotonic() + timeout if timeout > 0 else None
        return cls(method=method, id=request_id, deadline=deadline)

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when unbounded."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    @property
    def expired(self) -> bool:
        if self._expired.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def expire(self) -> None:
        self._expired.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block a handler thread until the context expires or ``timeout`` elapses."""
        remaining = self.remaining()
        if remaining is not None and (timeout is None or remaining < timeout):
            timeout = remaining
        return self._expired.wait(timeout) or self.expired
