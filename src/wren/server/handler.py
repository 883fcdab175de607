"""ASGI handler. Translates ASGI scope/messages to wren types.

The only component that touches raw ASGI directly. Reads the body,
builds the immutable Request, strips the mount prefix, hands the request
to the dispatcher, and sends exactly one Response back through send().
"""

import logging
from contextvars import Token

from wren._internal.asgi import Receive, Scope, Send
from wren.context import request_var
from wren.dispatch import Dispatcher
from wren.errors import HTTPError
from wren.http.headers import Headers
from wren.http.request import Request, split_path
from wren.http.response import Response
from wren.routing.router import Router
from wren.server.sender import send_response

logger = logging.getLogger("wren.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    dispatcher: Dispatcher,
    max_content_length: int,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    try:
        body = await read_body(receive, max_content_length)
        request = Request.from_asgi(scope, body)
    except HTTPError as exc:
        # The request never became dispatchable; answer with what we know
        bare = Request(
            method=scope["method"].upper(),
            path=scope["path"],
            segments=split_path(scope["path"]),
            headers=Headers(tuple(scope.get("headers", ()))),
        )
        response = await dispatcher.error_response(exc, bare)
        await send_response(response, send, method=bare.method)
        return

    token: Token[Request] = request_var.set(request)
    try:
        response = await _dispatch(request, router, dispatcher)
    finally:
        request_var.reset(token)

    await send_response(response, send, method=request.method)


async def _dispatch(request: Request, router: Router, dispatcher: Dispatcher) -> Response:
    try:
        match = router.match(request.path)
        return await dispatcher.dispatch(request.with_segments(match.segments), match.mount)
    except Exception as exc:
        return await dispatcher.error_response(exc, request)


async def read_body(receive: Receive, max_content_length: int) -> bytes:
    """Read the full request body, refusing anything over the limit."""
    chunks: list[bytes] = []
    size = 0
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            break
        chunk = message.get("body", b"")
        if chunk:
            size += len(chunk)
            if size > max_content_length:
                raise HTTPError(status=413, detail="Request body too large")
            chunks.append(chunk)
        if not message.get("more_body", False):
            break
    return b"".join(chunks)
