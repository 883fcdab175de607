"""Request parameter parsing.

Query string and body are flattened into one read-only mapping with unique
keys. Body values win over query values on conflict; for repeated keys the
first occurrence wins.
"""

import json as json_module
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any
from urllib.parse import parse_qsl

from wren.errors import HTTPError

_FORM_TYPE = "application/x-www-form-urlencoded"


def parse_query(query_string: bytes | str) -> dict[str, str]:
    """Parse a query string into a dict, keeping the first value per key."""
    if isinstance(query_string, bytes):
        query_string = query_string.decode("latin-1")
    result: dict[str, str] = {}
    for key, value in parse_qsl(query_string, keep_blank_values=True):
        result.setdefault(key, value)
    return result


def parse_body(body: bytes, content_type: str | None) -> dict[str, Any]:
    """Parse a urlencoded or JSON body.

    Other content types contribute no parameters; the raw body stays
    available on the request. A malformed JSON body or a form body that is
    not valid UTF-8 is a 400.
    """
    if not body:
        return {}
    ct = (content_type or _FORM_TYPE).split(";", 1)[0].strip().lower()
    if ct == _FORM_TYPE:
        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise HTTPError(status=400, detail=f"Form body is not valid UTF-8: {exc}") from exc
        return parse_query(text)
    if ct == "application/json" or ct.endswith("+json"):
        try:
            decoded = json_module.loads(body)
        except ValueError as exc:
            raise HTTPError(status=400, detail=f"Malformed JSON body: {exc}") from exc
        if isinstance(decoded, dict):
            return decoded
        return {}
    return {}


def merge_params(query: Mapping[str, Any], body: Mapping[str, Any]) -> Mapping[str, Any]:
    """Combine query and body parameters into a read-only mapping."""
    return MappingProxyType({**query, **body})
