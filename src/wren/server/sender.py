"""Emit one wren Response as the two ASGI ``http.response.*`` messages."""

from wren._internal.asgi import Send
from wren.http.response import Response

# Statuses that never carry a message body
_BODYLESS = frozenset({204, 304})


def encode_headers(response: Response, length: int) -> list[tuple[bytes, bytes]]:
    """Content-Type, the response's own headers, then Content-Length."""
    encoded = [(b"content-type", response.content_type.encode("latin-1"))]
    encoded.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in response.headers
    )
    encoded.append((b"content-length", str(length).encode("latin-1")))
    return encoded


async def send_response(response: Response, send: Send, *, method: str = "GET") -> None:
    """Send *response* through *send*.

    1xx, 204 and 304 responses go out without a body. HEAD gets the
    headers a GET would get, Content-Length included, and an empty body.
    """
    status = response.status
    body = b"" if status < 200 or status in _BODYLESS else response.body_bytes
    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": encode_headers(response, len(body)),
        }
    )
    await send({"type": "http.response.body", "body": b"" if method == "HEAD" else body})
