"""
Request Builder Module

Turns a key operation into a RequestSpec: the HTTP method, the path relative
to the API root (with its option query string) and the form-encoded body.

Options are validated against a fixed per-method allow-list:

    GET     recursive, consistent, sorted, wait (bool), waitIndex (uint64)
    PUT     prevValue (str), prevIndex (uint64), prevExist (bool)
    POST    (none)
    DELETE  recursive (bool)

An unknown option or a wrongly typed value raises InvalidOptionError before
any request is sent.
"""

import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional
from urllib.parse import quote, urlencode

from ..errors import InvalidOptionError
from .messages import Method

UINT64_MAX = 2 ** 64 - 1


class OptionType(Enum):
    """Expected type of an option value."""
    BOOL = "bool"
    UINT64 = "uint64"
    STRING = "string"


ValidOptions = Mapping[str, OptionType]

VALID_GET_OPTIONS: ValidOptions = MappingProxyType({
    "recursive": OptionType.BOOL,
    "consistent": OptionType.BOOL,
    "sorted": OptionType.BOOL,
    "wait": OptionType.BOOL,
    "waitIndex": OptionType.UINT64,
})

VALID_PUT_OPTIONS: ValidOptions = MappingProxyType({
    "prevValue": OptionType.STRING,
    "prevIndex": OptionType.UINT64,
    "prevExist": OptionType.BOOL,
})

VALID_POST_OPTIONS: ValidOptions = MappingProxyType({})

VALID_DELETE_OPTIONS: ValidOptions = MappingProxyType({
    "recursive": OptionType.BOOL,
})

VALID_OPTIONS: Mapping[Method, ValidOptions] = MappingProxyType({
    Method.GET: VALID_GET_OPTIONS,
    Method.PUT: VALID_PUT_OPTIONS,
    Method.POST: VALID_POST_OPTIONS,
    Method.DELETE: VALID_DELETE_OPTIONS,
})


@dataclass(frozen=True)
class RequestSpec:
    """
    A fully built, not yet sent request.

    Attributes:
        method: HTTP method
        path: Path relative to the API root, e.g. "keys/foo?recursive=true"
        body: Form-encoded body ("" when the request has none)
    """
    method: Method
    path: str
    body: str = ""


def _format_option(name: str, value: Any, expected: OptionType) -> str:
    """
    Validate one option value and render it for the query string.

    bool is a subclass of int, so booleans are rejected for uint64 options
    and ints are rejected for bool options.
    """
    if expected is OptionType.BOOL:
        if not isinstance(value, bool):
            raise InvalidOptionError(
                f"option {name} should be bool, got {type(value).__name__}"
            )
        return "true" if value else "false"

    if expected is OptionType.UINT64:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidOptionError(
                f"option {name} should be uint64, got {type(value).__name__}"
            )
        if value < 0 or value > UINT64_MAX:
            raise InvalidOptionError(f"option {name} out of uint64 range: {value}")
        return str(value)

    if not isinstance(value, str):
        raise InvalidOptionError(
            f"option {name} should be string, got {type(value).__name__}"
        )
    return value


def options_to_query(options: Optional[Mapping[str, Any]], valid: ValidOptions) -> str:
    """
    Convert an option set into a query string.

    Args:
        options: Option name -> value, in the order they should appear
        valid: Allow-list for the method

    Returns:
        "" for an empty option set, otherwise "?name=value&..."

    Raises:
        InvalidOptionError: Unknown option name or wrongly typed value

    Examples:
        >>> options_to_query({"recursive": True}, VALID_GET_OPTIONS)
        '?recursive=true'
    """
    if not options:
        return ""

    pairs = []
    for name, value in options.items():
        expected = valid.get(name)
        if expected is None:
            raise InvalidOptionError(f"invalid option {name!r}")
        pairs.append((name, _format_option(name, value, expected)))

    return "?" + urlencode(pairs)


def key_path(key: str) -> str:
    """
    Build the API path for a key.

    Duplicate and trailing slashes are collapsed and every segment is
    percent-quoted, so "/foo//bar/" becomes "keys/foo/bar".
    """
    segments = [quote(segment, safe="") for segment in re.split(r"/+", key) if segment]
    return "/".join(["keys"] + segments)


def form_body(value: str = "", ttl: int = 0) -> str:
    """
    Encode a PUT/POST body.

    value is only sent when non-empty, ttl only when positive.
    """
    fields = []
    if value:
        fields.append(("value", value))
    if ttl and ttl > 0:
        fields.append(("ttl", str(ttl)))
    return urlencode(fields)


def build_get(key: str, options: Optional[Mapping[str, Any]] = None) -> RequestSpec:
    """Build a GET request."""
    path = key_path(key) + options_to_query(options, VALID_OPTIONS[Method.GET])
    return RequestSpec(method=Method.GET, path=path)


def build_put(
        key: str,
        value: str = "",
        ttl: int = 0,
        options: Optional[Mapping[str, Any]] = None,
) -> RequestSpec:
    """Build a PUT request."""
    path = key_path(key) + options_to_query(options, VALID_OPTIONS[Method.PUT])
    return RequestSpec(method=Method.PUT, path=path, body=form_body(value, ttl))


def build_post(key: str, value: str = "", ttl: int = 0) -> RequestSpec:
    """Build a POST request (in-order key creation under a directory)."""
    return RequestSpec(method=Method.POST, path=key_path(key), body=form_body(value, ttl))


def build_delete(key: str, options: Optional[Mapping[str, Any]] = None) -> RequestSpec:
    """Build a DELETE request."""
    path = key_path(key) + options_to_query(options, VALID_OPTIONS[Method.DELETE])
    return RequestSpec(method=Method.DELETE, path=path)
