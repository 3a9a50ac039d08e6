"""JSON-RPC 2.0 error codes and exceptions."""
from typing import Any, Optional


class ErrorCode:
    """JSON-RPC 2.0 standard error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602

    # Server default, used for timeouts and uncoded handler failures
    INTERNAL_ERROR = -32000


class RPCError(Exception):
    """Error carrying a JSON-RPC code and message.

    Handlers raise this (or a subclass) to control the error object sent to
    the client. Any other exception is reported as an internal error.
    """

    default_code = ErrorCode.INTERNAL_ERROR
    default_message = "Internal error"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[int] = None,
        data: Any = None
    ):
        self.code = self.default_code if code is None else code
        self.message = self.default_message if message is None else message
        self.data = data
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code}, message={self.message!r})"


class ParseError(RPCError):
    default_code = ErrorCode.PARSE_ERROR
    default_message = "Parse error"


class InvalidRequest(RPCError):
    default_code = ErrorCode.INVALID_REQUEST
    default_message = "Invalid request"


class MethodNotFound(RPCError):
    default_code = ErrorCode.METHOD_NOT_FOUND
    default_message = "Method not found"


class InvalidParams(RPCError):
    default_code = ErrorCode.INVALID_PARAMS
    default_message = "Invalid Params"


class InternalError(RPCError):
    """Wraps a handler failure that carried no code of its own."""


class DeadlineExceeded(InternalError):
    """The handler did not finish before the call deadline."""

    default_message = "context deadline exceeded"


def new_error(code: int, message: str, data: Any = None) -> RPCError:
    """Build an error with a caller-chosen code."""
    return RPCError(message, code=code, data=data)


def new_internal_error(message: str) -> RPCError:
    """Build an internal (-32000) error with the given message."""
    return InternalError(message)

