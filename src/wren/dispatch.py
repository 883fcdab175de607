"""The dispatcher: one inbound request to exactly one Response.

Pipeline for a request that reached a mounted controller::

    components.before (declared order; may short-circuit)
    controller.pre_process_request
    resolve action (override hook -> explicit name -> verb default)
    init_<action>_action, or convention view <Action><Controller>View, or DefaultView
    <action>_action
    render (skipped when the action returned a Response)
    controller.post_process_response
    components.after (declared order; may replace or fail)

A short-circuit in the pre-phase ends dispatch on the spot: no hooks, no
action, no post-phase. Every failure after the pre-phase becomes an error
response that still runs through the post-phase, so logging and auditing
components see every outcome.

Cancellation is honoured between stages; ``Controller.close`` runs on
every exit path.
"""

import logging
from functools import partial
from typing import Any

from anyio.lowlevel import checkpoint_if_cancelled

from wren._internal.invoke import invoke
from wren.actions import ControllerSpec
from wren.context import DispatchContext
from wren.controller import Controller
from wren.errors import HandlerError, HTTPError
from wren.http.request import Request
from wren.http.response import Response
from wren.resolver import resolve
from wren.routing.router import Mount
from wren.server.errors import ErrorHandlers, error_response, not_found_response
from wren.templating import TemplateSource
from wren.views import DefaultView, Layout, View, as_layout, as_view, render

logger = logging.getLogger("wren.dispatch")


class Dispatcher:
    """Runs the action-controller pipeline.

    Holds only startup-fixed, read-only collaborators, so one instance
    serves every concurrent request. Everything per-request lives in the
    ``DispatchContext`` and the controller instance created by ``dispatch``.
    """

    __slots__ = (
        "debug",
        "default_layout",
        "error_handlers",
        "template_suffix",
        "templates",
        "views",
    )

    def __init__(
        self,
        *,
        templates: TemplateSource,
        views: dict[str, type[View]] | None = None,
        error_handlers: ErrorHandlers | None = None,
        default_layout: str | None = None,
        template_suffix: str = ".html",
        debug: bool = False,
    ) -> None:
        self.templates = templates
        self.views = views or {}
        self.error_handlers = error_handlers or {}
        self.default_layout = default_layout
        self.template_suffix = template_suffix
        self.debug = debug

    async def dispatch(self, request: Request, mount: Mount) -> Response:
        """Dispatch *request*, whose segments are already relative to *mount*."""
        spec = mount.spec
        context = DispatchContext(request=request, controller=spec.name)
        controller = spec.cls(context)
        try:
            return await self._run(controller, context, mount)
        finally:
            await invoke(controller.close)

    async def error_response(self, exc: Exception, request: Request) -> Response:
        return await error_response(exc, request, self.error_handlers, self.debug)

    async def not_found(self, request: Request) -> Response:
        return await not_found_response(request, self.error_handlers, self.debug)

    # -- Stages --

    async def _run(self, controller: Controller, context: DispatchContext, mount: Mount) -> Response:
        request = context.request
        configs = context.component_config

        try:
            halted = await mount.chain.run_before(request, controller, configs)
        except Exception as exc:
            return await self.error_response(exc, request)
        if halted is not None:
            if halted.response is not None:
                return halted.response
            return await self.not_found(request)

        try:
            await checkpoint_if_cancelled()
            response = await self._process(controller, context, mount.spec)
        except Exception as exc:
            response = await self.error_response(exc, request)

        await checkpoint_if_cancelled()
        return await mount.chain.run_after(
            response, request, configs, partial(self.not_found, request)
        )

    async def _process(
        self,
        controller: Controller,
        context: DispatchContext,
        spec: ControllerSpec,
    ) -> Response:
        request = context.request
        await invoke(controller.pre_process_request, request)

        first = request.segments[0] if request.segments else None
        override = await invoke(controller.resolve_action, first, request)
        resolution = resolve(request.method, request.segments, spec.actions, override)
        action = resolution.action
        context.action = action.name
        context.identifier = resolution.identifier
        context.args = resolution.args
        logger.debug(
            "%s %s -> %s.%s (identifier=%r)",
            request.method,
            request.path,
            spec.name,
            action.name,
            resolution.identifier,
        )

        await checkpoint_if_cancelled()
        if action.init_hook is not None:
            await invoke(action.init_hook, controller, **action.bind_init(context))
            view = as_view(controller.view, self.views) if controller.view is not None else DefaultView()
        else:
            view = self._convention_view(controller, spec, action.name)
        controller.view = view
        layout = self._layout(controller)

        await checkpoint_if_cancelled()
        try:
            data = await invoke(action.handler, controller, **action.bind(context))
        except HTTPError:
            raise
        except Exception as exc:
            raise HandlerError(action.name, exc) from exc

        await checkpoint_if_cancelled()
        response = render(
            data,
            view,
            layout,
            self.templates,
            template_name=spec.template_name(action.name, self.template_suffix),
        )

        replaced = await invoke(controller.post_process_response, response, request)
        return response if replaced is None else _checked(replaced)

    # -- View selection --

    def _convention_view(self, controller: Controller, spec: ControllerSpec, action: str) -> View:
        """Pick the view when the action has no init hook.

        A view already set by ``pre_process_request`` wins; then the
        registered ``<Action><Controller>View``; then ``DefaultView``.
        """
        if controller.view is not None:
            return as_view(controller.view, self.views)
        cls = self.views.get(spec.view_name(action))
        if cls is not None:
            return as_view(cls, self.views)
        return DefaultView()

    def _layout(self, controller: Controller) -> Layout | None:
        if controller.layout is not None:
            return as_layout(controller.layout, self.views)
        if self.default_layout:
            return Layout(self.default_layout)
        return None


def _checked(value: Any) -> Response:
    if not isinstance(value, Response):
        msg = (
            f"post_process_response returned {type(value).__name__}; "
            f"return the response or a replacement Response."
        )
        raise TypeError(msg)
    return value
