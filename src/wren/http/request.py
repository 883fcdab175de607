"""Immutable HTTP request.

Frozen metadata plus the fully-read body. The request is honest about
what it is: received data that doesn't change while it is dispatched.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from wren.http.headers import Headers
from wren.http.params import merge_params, parse_body, parse_query

_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``segments`` holds the path segments beyond the controller's mount
    point. The transport builds the request with every segment of the
    path; the router replaces them with the remainder once the mount
    prefix is stripped (see ``with_segments``).

    ``params`` merges the query string with a urlencoded or JSON body.
    ``metadata`` is opaque per-request data supplied by the transport.
    """

    method: str
    path: str
    segments: tuple[str, ...] = ()
    params: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    headers: Headers = field(default_factory=Headers)
    metadata: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    body: bytes = b""
    query_string: str = ""

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Full request URL (path + query string)."""
        if self.query_string:
            return f"{self.path}?{self.query_string}"
        return self.path

    @property
    def text(self) -> str:
        """The body decoded as UTF-8."""
        return self.body.decode("utf-8")

    def with_segments(self, segments: tuple[str, ...]) -> Request:
        """Return a copy carrying only the segments beyond the mount point."""
        return replace(self, segments=segments)

    # -- Factory --

    @classmethod
    def from_asgi(
        cls,
        scope: Mapping[str, Any],
        body: bytes = b"",
        metadata: Mapping[str, Any] | None = None,
    ) -> Request:
        """Create a Request from an ASGI scope and its already-read body."""
        headers = Headers(tuple(scope.get("headers", ())))
        raw_query: bytes = scope.get("query_string", b"")
        query = parse_query(raw_query)
        form = parse_body(body, headers.get("content-type"))
        path: str = scope["path"]
        meta = dict(metadata or {})
        if scope.get("client"):
            meta.setdefault("client", tuple(scope["client"]))
        return cls(
            method=scope["method"].upper(),
            path=path,
            segments=split_path(path),
            params=merge_params(query, form),
            headers=headers,
            metadata=MappingProxyType(meta),
            body=body,
            query_string=raw_query.decode("latin-1"),
        )


def split_path(path: str) -> tuple[str, ...]:
    """Split a URL path into its non-empty segments."""
    return tuple(part for part in path.strip("/").split("/") if part)
