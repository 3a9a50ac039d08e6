"""Transport independent JSON-RPC 2.0 dispatcher."""
from .models import JSONRPCRequest, JSONRPCResponse, JSONRPCError
from .errors import (
    ErrorCode,
    RPCError,
    ParseError,
    InvalidRequest,
    MethodNotFound,
    InvalidParams,
    InternalError,
    DeadlineExceeded,
    new_error,
    new_internal_error,
)
from .context import CallContext
from .handler import JSONRPCHandler

__all__ = [
    "JSONRPCRequest",
    "JSONRPCResponse",
    "JSONRPCError",
    "ErrorCode",
    "RPCError",
    "ParseError",
    "InvalidRequest",
    "MethodNotFound",
    "InvalidParams",
    "InternalError",
    "DeadlineExceeded",
    "new_error",
    "new_internal_error",
    "CallContext",
    "JSONRPCHandler",
]
