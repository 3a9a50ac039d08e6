"""Wire encoding and decoding for JSON-RPC payloads.

``None`` stands for "no response" throughout: a transport receiving it must
not write anything. ``b""`` only appears when a response could not be
encoded, which is logged.
"""
import json
import logging
from typing import Any, Iterable, List, Optional, Union

from pydantic import TypeAdapter

from .errors import ParseError
from .models import JSONRPCResponse

logger = logging.getLogger(__name__)

Payload = Union[bytes, bytearray, str]

_response_list = TypeAdapter(List[JSONRPCResponse])


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


def decode_payload(payload: Payload) -> Any:
    """Parse raw request bytes into a JSON value.

    Raises:
        ParseError: payload is not well-formed JSON
    """
    try:
        return json.loads(payload, parse_constant=_reject_constant)
    except (ValueError, TypeError, RecursionError) as e:
        raise ParseError() from e


def encode_response(response: JSONRPCResponse) -> bytes:
    """Serialize one response; never raises."""
    try:
        return response.model_dump_json().encode("utf-8")
    except Exception as e:
        logger.error(f"Failed to encode response for id={response.id!r}: {e}", exc_info=True)
        return b""


def encode_batch(parts: Iterable[Optional[bytes]]) -> Optional[bytes]:
    """Join encoded responses into a JSON array.

    Absent and empty entries are skipped. Returns None when nothing is left,
    so an all-notification batch produces no output rather than ``[]``.
    """
    kept = [part for part in parts if part]
    if not kept:
        return None
    return b"[" + b",".join(kept) + b"]"


def decode_response(data: Payload) -> JSONRPCResponse:
    return JSONRPCResponse.model_validate_json(data)


def decode_batch_response(data: Payload) -> List[JSONRPCResponse]:
    return _response_list.validate_json(data)
