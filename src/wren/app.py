"""Wren application class.

Mutable during setup (controller mounts, components, views, error handlers,
template filters). Frozen when the first ASGI event arrives.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from kida import Environment

from wren._internal.asgi import Receive, Scope, Send
from wren.actions import ControllerSpec, compile_controller
from wren.components.chain import ComponentChain, Link
from wren.components.protocol import Component
from wren.config import AppConfig
from wren.controller import Controller
from wren.dispatch import Dispatcher
from wren.errors import ConfigurationError
from wren.routing.router import Mount, Router
from wren.server.errors import ErrorHandlers
from wren.server.handler import handle_request
from wren.templating import KidaTemplates, TemplateSource, create_environment
from wren.views import View

logger = logging.getLogger("wren.app")


@dataclass(slots=True)
class _PendingMount:
    """A controller waiting to be compiled."""

    prefix: str
    controller: type[Controller]


class App:
    """The wren application.

    Usage::

        app = App(AppConfig(template_dir="templates"))
        app.add_component(RequestLogComponent())

        @app.controller("/widgets")
        class WidgetsController(Controller):
            components = ("request_log",)

            def index_action(self):
                return {"items": []}

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread compiles the app, even when several workers receive their
        first request at the same time. After freezing, every shared
        structure is read-only.
    """

    __slots__ = (
        "_components",
        "_custom_kida_env",
        "_custom_templates",
        "_dispatcher",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_pending_mounts",
        "_router",
        "_template_filters",
        "_template_globals",
        "_views",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        kida_env: Environment | None = None,
        templates: TemplateSource | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._pending_mounts: list[_PendingMount] = []
        self._components: dict[str, Component] = {}
        self._views: dict[str, type[View]] = {}
        self._error_handlers: ErrorHandlers = {}
        self._template_filters: dict[str, Callable[..., Any]] = {}
        self._template_globals: dict[str, Any] = {}
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._custom_kida_env: Environment | None = kida_env
        self._custom_templates: TemplateSource | None = templates

        # Compiled state, set during _freeze()
        self._router: Router | None = None
        self._dispatcher: Dispatcher | None = None

    # -- Controller registration --

    def mount(self, prefix: str, controller: type[Controller]) -> None:
        """Serve *controller* under the path *prefix*."""
        self._check_not_frozen()
        self._pending_mounts.append(_PendingMount(prefix, controller))

    def controller(self, prefix: str) -> Callable[[type[Controller]], type[Controller]]:
        """Mount a controller class via decorator."""

        def decorator(cls: type[Controller]) -> type[Controller]:
            self.mount(prefix, cls)
            return cls

        return decorator

    # -- Components --

    def add_component(self, component: Component) -> None:
        """Register a component instance under its ``name``.

        Controllers refer to components by name in their ``components``
        tuple; the order there is the order they run in.
        """
        self._check_not_frozen()
        name = getattr(component, "name", "")
        if not name:
            msg = f"Component {component!r} has no name."
            raise ConfigurationError(msg)
        if name in self._components:
            msg = f"A component named {name!r} is already registered."
            raise ConfigurationError(msg)
        self._components[name] = component

    # -- Views --

    def view[V: type[View]](self, cls: V | None = None, *, name: str | None = None) -> Any:
        """Register a view class, by default under its class name.

        Registered names are what the ``<Action><Controller>View``
        convention and string ``view``/``layout`` references look up::

            @app.view
            class IndexWidgetsView(View):
                template = "widgets/list.html"
        """

        def decorator(view_cls: V) -> V:
            self._check_not_frozen()
            if not (isinstance(view_cls, type) and issubclass(view_cls, View)):
                msg = f"{view_cls!r} is not a View subclass."
                raise ConfigurationError(msg)
            self._views[name or view_cls.__name__] = view_cls
            return view_cls

        if cls is not None:
            return decorator(cls)
        return decorator

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register an error handler via decorator."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Template integration --

    def template_filter(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template filter."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._template_filters[name or func.__name__] = func
            return func

        return decorator

    def template_global(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template global."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._template_globals[name or func.__name__] = func
            return func

        return decorator

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        assert self._router is not None
        assert self._dispatcher is not None

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            dispatcher=self._dispatcher,
            max_content_length=self.config.max_content_length,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Freeze at startup so configuration errors surface before traffic."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    logger.exception("startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        logging.getLogger("wren").setLevel(self.config.log_level.upper())

        # 1. Compile controllers and their component chains into the mount table
        router = Router()
        for pending in self._pending_mounts:
            spec = compile_controller(pending.controller)
            router.add(Mount(pending.prefix, spec, self._build_chain(spec)))
        router.compile()

        # 2. Template collaborator
        templates = self._custom_templates
        if templates is None:
            if self._custom_kida_env is not None:
                env = self._custom_kida_env
                if self._template_filters:
                    env.update_filters(self._template_filters)
                for name, value in self._template_globals.items():
                    env.add_global(name, value)
            else:
                env = create_environment(
                    self.config, self._template_filters, self._template_globals
                )
            templates = KidaTemplates(env)

        # 3. Dispatcher over read-only snapshots of the registries
        self._dispatcher = Dispatcher(
            templates=templates,
            views=dict(self._views),
            error_handlers=dict(self._error_handlers),
            default_layout=self.config.default_layout,
            template_suffix=self.config.template_suffix,
            debug=self.config.debug,
        )
        self._router = router
        self._frozen = True
        logger.debug(
            "app frozen: %s",
            ", ".join(f"{m.prefix} -> {m.spec.cls.__name__}" for m in router.mounts),
        )

    def _build_chain(self, spec: ControllerSpec) -> ComponentChain:
        """Resolve a controller's component names against the registry.

        Each component gets the controller's static configuration for it,
        frozen for the lifetime of the app.
        """
        declared = spec.cls.components
        stray = sorted(set(spec.cls.component_config) - set(declared))
        if stray:
            msg = (
                f"{spec.cls.__name__}.component_config configures components it "
                f"does not run: {', '.join(stray)}"
            )
            raise ConfigurationError(msg)

        links: list[Link] = []
        for name in declared:
            component = self._components.get(name)
            if component is None:
                msg = (
                    f"{spec.cls.__name__} uses component {name!r}, which is not "
                    f"registered. Call app.add_component() first."
                )
                raise ConfigurationError(msg)
            static = spec.cls.component_config.get(name, {})
            links.append(Link(component, MappingProxyType(dict(static))))
        return ComponentChain(tuple(links))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register controllers, components, and views before the first request."
            )
            raise RuntimeError(msg)
