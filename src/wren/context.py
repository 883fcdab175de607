"""Request-scoped context.

Provides:
- ``DispatchContext``: the explicit per-dispatch record handed to the
  controller and, on request, to actions and hooks.
- ``request_var``: the current ``Request`` for this task/thread.

Nothing here is module-level mutable state: ``request_var`` is a
``ContextVar`` (task-local under asyncio) and ``DispatchContext`` is
created fresh by the dispatcher for every request.
"""

from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

from wren.http.request import Request

request_var: ContextVar[Request] = ContextVar("wren_request")
"""The current request. Set by the ASGI handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


@dataclass(slots=True)
class DispatchContext:
    """Everything the pipeline knows about one request, owned by one dispatch.

    ``action``, ``identifier`` and ``args`` are filled in once the
    resolver has run. ``component_config`` maps component name to the
    merged configuration bundle used for that component this request.
    """

    request: Request
    controller: str
    action: str | None = None
    identifier: str | None = None
    args: tuple[str, ...] = ()
    component_config: dict[str, Mapping[str, Any]] = field(default_factory=dict)
