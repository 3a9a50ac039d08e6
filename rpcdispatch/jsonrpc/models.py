"""JSON-RPC 2.0 request/response models."""
from pydantic import (
    BaseModel,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    model_serializer,
    model_validator,
)
from typing import Any, Optional, Union, Literal

from .errors import InvalidRequest, ParseError, RPCError

JSONRPC_VERSION = "2.0"

# Numeric ids are echoed as the decoded number, not the original text:
# 1e2 comes back as 100.0 and 1.0 stays 1.0.
RequestId = Optional[Union[StrictBool, StrictInt, StrictFloat, StrictStr]]


class JSONRPCRequest(BaseModel):
    """JSON-RPC 2.0 request model.

    Decoding is lenient about *values* (any version string, empty method) so
    that structural problems can be reported as an invalid request instead
    of a parse error. Wrong JSON *types* fail decoding.
    """

    jsonrpc: Optional[StrictStr] = None
    method: Optional[StrictStr] = None
    params: Any = None
    id: RequestId = None

    @classmethod
    def from_raw(cls, raw: Any) -> "JSONRPCRequest":
        """Decode an already-parsed JSON value, raising ParseError."""
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise ParseError() from e

    @property
    def is_valid(self) -> bool:
        return self.jsonrpc == JSONRPC_VERSION and bool(self.method)

    @property
    def is_notification(self) -> bool:
        """True when the request carried no ``id`` member at all."""
        return "id" not in self.model_fields_set

    def ensure_valid(self) -> None:
        if not self.is_valid:
            raise InvalidRequest()


class JSONRPCError(BaseModel):
    """JSON-RPC 2.0 error model."""

    code: int
    message: str
    data: Optional[Any] = None

    @classmethod
    def from_exception(cls, exc: RPCError) -> "JSONRPCError":
        return cls(code=exc.code, message=exc.message, data=exc.data)

    @model_serializer(mode="wrap")
    def _omit_missing_data(self, handler):
        data = handler(self)
        if self.data is None:
            data.pop("data", None)
        return data


class JSONRPCResponse(BaseModel):
    """JSON-RPC 2.0 response model.

    Serializes with ``id`` and ``jsonrpc`` always present and exactly one of
    ``result`` or ``error``.
    """

    id: RequestId = None
    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    result: Optional[Any] = None
    error: Optional[JSONRPCError] = None

    @model_validator(mode="after")
    def _result_xor_error(self) -> "JSONRPCResponse":
        if self.error is not None and self.result is not None:
            raise ValueError("response cannot carry both result and error")
        return self

    @classmethod
    def success(cls, request_id: Any, result: Any) -> "JSONRPCResponse":
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: Any, exc: RPCError) -> "JSONRPCResponse":
        return cls(id=request_id, error=JSONRPCError.from_exception(exc))

    @model_serializer(mode="wrap")
    def _wire_shape(self, handler):
        data = handler(self)
        body = {"id": data["id"], "jsonrpc": data["jsonrpc"]}
        if self.error is not None:
            body["error"] = data["error"]
        else:
            body["result"] = data["result"]
        return body
