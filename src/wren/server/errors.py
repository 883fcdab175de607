"""Error handling for wren requests.

Maps HTTPError exceptions and unexpected failures to Response objects,
using registered error handlers or plain defaults. Nothing is retried.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from wren.errors import HandlerError, HTTPError, NotFound, TemplateNotFound
from wren.http.request import Request
from wren.http.response import Response
from wren.views import serialize

logger = logging.getLogger("wren.server")

type ErrorHandlers = dict[int | type, Callable[..., Any]]


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    Supports both sync and async error handlers.
    """
    sig = inspect.signature(handler)
    params = list(sig.parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result

    return serialize(result)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    # Try exact exception type, then status code
    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        # Keep the exception's status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    resp = Response(body=detail, content_type="text/plain; charset=utf-8").with_status(exc.status)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    original = exc.original if isinstance(exc, HandlerError) else exc
    logger.error(
        "500 %s %s", request.method, request.path, exc_info=(type(original), original, original.__traceback__)
    )

    handler = (
        error_handlers.get(type(exc))
        or error_handlers.get(type(original))
        or error_handlers.get(500)
    )
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        if response.status == 200:
            response = response.with_status(500)
        return response

    body = "Internal Server Error"
    if debug:
        body = f"{type(exc).__name__}: {exc}"
    return Response(body=body, status=500, content_type="text/plain; charset=utf-8")


async def error_response(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool = False,
) -> Response:
    """Turn any exception raised inside the pipeline into a terminal response."""
    if isinstance(exc, HTTPError):
        return await handle_http_error(exc, request, error_handlers, debug)
    if isinstance(exc, TemplateNotFound):
        logger.error("template %r missing for %s %s", exc.name, request.method, request.path)
    return await handle_internal_error(exc, request, error_handlers, debug)


async def not_found_response(
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool = False,
    detail: str = "Not Found",
) -> Response:
    """The not-found response used when a chain step fails without a response."""
    return await handle_http_error(NotFound(detail), request, error_handlers, debug)
