"""Invoke helpers. Call sync or async callables uniformly.

Wren actions, hooks, and error handlers can be ``def`` or ``async def``.
Any code that calls user-provided code must handle both cases. This
module provides a single helper so the sync/async check lives in exactly
one place.

Usage::

    from wren._internal.invoke import invoke

    result = await invoke(controller.pre_process_request, request)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync: already a value
        def index_action(self, request):
            return {"items": []}

        # async: a coroutine to await
        async def index_action(self, request):
            return {"items": await store.all()}
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
