"""Ordered component chain for one controller.

Built once when the app freezes, then shared read-only by every request
to that controller. Per-request state (the merged configuration bundles)
lives in the caller's ``DispatchContext``.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from wren._internal.invoke import invoke
from wren.components.protocol import Component, Halt, Replace, outcome_of
from wren.http.request import Request
from wren.http.response import Response

if TYPE_CHECKING:
    from wren.controller import Controller

logger = logging.getLogger("wren.dispatch")


@dataclass(frozen=True, slots=True)
class Link:
    """A component plus the static configuration its controller gave it."""

    component: Component
    config: Mapping[str, Any]

    @property
    def name(self) -> str:
        return self.component.name


class ComponentChain:
    """An immutable, ordered sequence of components.

    Usage::

        chain = ComponentChain((Link(access, {}), Link(log, {})))
        halted = await chain.run_before(request, controller, configs)
        if halted is None:
            ...
            response = await chain.run_after(response, request, configs, not_found)
    """

    __slots__ = ("_links",)

    def __init__(self, links: tuple[Link, ...] = ()) -> None:
        self._links = links

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(link.name for link in self._links)

    def __len__(self) -> int:
        return len(self._links)

    def __repr__(self) -> str:
        return f"ComponentChain({', '.join(self.names)})"

    async def run_before(
        self,
        request: Request,
        controller: Controller,
        configs: dict[str, Mapping[str, Any]],
    ) -> Halt | None:
        """Run every ``before`` step in declared order.

        The controller's ``prepare_component`` hook is called for each
        component right before its step; the merged bundle is recorded in
        *configs* for the post-phase.

        Returns the ``Halt`` that stopped the phase, or ``None`` when every
        component let the request through.
        """
        for link in self._links:
            extra = await invoke(controller.prepare_component, link.name, request)
            config = MappingProxyType({**link.config, **(extra or {})})
            configs[link.name] = config

            outcome = outcome_of(
                await invoke(link.component.before, request, controller, config),
                post=False,
            )
            if isinstance(outcome, (Halt, Replace)):
                logger.debug(
                    "%s %s short-circuited by component %r",
                    request.method,
                    request.path,
                    link.name,
                )
                return outcome if isinstance(outcome, Halt) else Halt(outcome.response)
        return None

    async def run_after(
        self,
        response: Response,
        request: Request,
        configs: Mapping[str, Mapping[str, Any]],
        not_found: Callable[[], Awaitable[Response]],
    ) -> Response:
        """Run every ``after`` step in declared order.

        ``Replace`` swaps the response and continues. ``Halt(response)``
        stops with that response; ``Halt()`` stops with ``not_found()``.
        """
        for link in self._links:
            config = configs.get(link.name, link.config)
            outcome = outcome_of(
                await invoke(link.component.after, response, request, config),
                post=True,
            )
            match outcome:
                case Replace(response=replacement):
                    response = replacement
                case Halt(response=None):
                    logger.debug("component %r failed %s %s", link.name, request.method, request.path)
                    return await not_found()
                case Halt(response=final):
                    return final
        return response
