"""Protocol module for the etcd client."""

from .decoder import decode_error, decode_response
from .messages import Method, Node, Response
from .options import (
    VALID_DELETE_OPTIONS,
    VALID_GET_OPTIONS,
    VALID_OPTIONS,
    VALID_POST_OPTIONS,
    VALID_PUT_OPTIONS,
    OptionType,
    RequestSpec,
    build_delete,
    build_get,
    build_post,
    build_put,
    form_body,
    key_path,
    options_to_query,
)

__all__ = [
    "Method",
    "Node",
    "Response",
    "OptionType",
    "RequestSpec",
    "VALID_GET_OPTIONS",
    "VALID_PUT_OPTIONS",
    "VALID_POST_OPTIONS",
    "VALID_DELETE_OPTIONS",
    "VALID_OPTIONS",
    "build_get",
    "build_put",
    "build_post",
    "build_delete",
    "form_body",
    "key_path",
    "options_to_query",
    "decode_response",
    "decode_error",
]
