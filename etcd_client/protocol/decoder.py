"""
Response Decoder Module

Maps a terminal HTTP answer onto either a Response or a classified error.

Two failure kinds are kept apart so callers can tell them apart:
- EtcdError: the body decoded as the store's error envelope
  {"errorCode": 100, "message": "Key not found", "cause": "/foo", "index": 5}
- MalformedResponseError: the body is not a valid envelope of either kind
"""

import json
import logging
from typing import Any, Dict

from ..errors import EtcdError, MalformedResponseError, error_for_code
from .messages import Node, Response

logger = logging.getLogger(__name__)


def _load_object(status_code: int, body: bytes) -> Dict[str, Any]:
    """Parse a body as a JSON object or raise MalformedResponseError."""
    try:
        data = json.loads(body)
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedResponseError(
            f"invalid JSON in response: {e}", status_code=status_code, body=body
        ) from e

    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"expected JSON object, got {type(data).__name__}",
            status_code=status_code,
            body=body,
        )
    return data


def decode_response(status_code: int, body: bytes) -> Response:
    """
    Decode a 200 body into a Response.

    Args:
        status_code: HTTP status of the answer
        body: Raw response body

    Returns:
        The decoded success envelope

    Raises:
        MalformedResponseError: body is not JSON, or lacks an "action"
    """
    data = _load_object(status_code, body)

    action = data.get("action")
    if not isinstance(action, str):
        raise MalformedResponseError(
            "response envelope has no action", status_code=status_code, body=body
        )

    try:
        node = Node.from_dict(data.get("node") or {})
        prev = data.get("prevNode")
        prev_node = Node.from_dict(prev) if prev else None
    except (AttributeError, TypeError, ValueError) as e:
        raise MalformedResponseError(
            f"invalid node in response: {e}", status_code=status_code, body=body
        ) from e

    return Response(action=action, node=node, prev_node=prev_node)


def decode_error(status_code: int, body: bytes) -> EtcdError:
    """
    Decode a non-200 body into the matching EtcdError.

    The error is returned, not raised, so the caller decides where it
    surfaces.

    Raises:
        MalformedResponseError: body is not JSON, or lacks an integer "errorCode"
    """
    data = _load_object(status_code, body)

    error_code = data.get("errorCode")
    if isinstance(error_code, bool) or not isinstance(error_code, int):
        raise MalformedResponseError(
            f"error envelope has no errorCode (HTTP {status_code})",
            status_code=status_code,
            body=body,
        )

    index = data.get("index", 0)
    if isinstance(index, bool) or not isinstance(index, int):
        index = 0

    error_cls = error_for_code(error_code)
    logger.debug(f"decoded error {error_code} ({error_cls.__name__}) from HTTP {status_code}")
    return error_cls(
        error_code=error_code,
        message=str(data.get("message") or ""),
        cause=str(data.get("cause") or ""),
        index=index,
        status_code=status_code,
    )
