"""Compiled action tables.

Controllers declare actions by method name. That convention is applied
exactly once, when the app freezes: ``compile_controller`` walks the
class, builds an immutable ``name -> Action`` table, and works out which
keyword arguments each action wants. At request time the dispatcher only
does dictionary lookups.
"""

import inspect
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from wren.context import DispatchContext
from wren.controller import Controller
from wren.errors import ConfigurationError
from wren.http.request import Request

ACTION_SUFFIX = "_action"
INIT_PREFIX = "init_"

# Actions that answer bare verbs; never reachable by explicit name.
DEFAULT_ACTIONS = frozenset({"index", "object", "create", "update", "delete"})

# Values an action or init hook can ask for by parameter name.
INJECTABLE = frozenset({"request", "identifier", "args", "params", "context"})

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


@dataclass(frozen=True, slots=True)
class Action:
    """One resolved, callable action on a controller class."""

    name: str
    handler: Callable[..., Any]
    wants: frozenset[str]
    init_hook: Callable[..., Any] | None = None
    init_wants: frozenset[str] = frozenset()

    def bind(self, context: DispatchContext) -> dict[str, Any]:
        """Keyword arguments for the handler."""
        return _kwargs(self.wants, context)

    def bind_init(self, context: DispatchContext) -> dict[str, Any]:
        """Keyword arguments for the init hook."""
        return _kwargs(self.init_wants, context)


@dataclass(frozen=True, slots=True)
class ControllerSpec:
    """A controller class compiled for dispatch.

    ``title`` is the CamelCase form used by the view naming convention;
    ``name`` is the snake_case form used for template paths.
    """

    cls: type[Controller]
    name: str
    title: str
    actions: Mapping[str, Action]

    def view_name(self, action: str) -> str:
        """Conventional view class name: ``<Action><Controller>View``."""
        return f"{camel(action)}{self.title}View"

    def template_name(self, action: str, suffix: str = ".html") -> str:
        """Conventional template path: ``<controller>/<action><suffix>``."""
        return f"{self.name}/{action}{suffix}"


def compile_controller(cls: type[Controller]) -> ControllerSpec:
    """Build the read-only action table for *cls*.

    Raises:
        ConfigurationError: If *cls* is not a ``Controller`` subclass, an
            action asks for an argument the dispatcher cannot supply, or
            an init hook has no matching action.
    """
    if not (isinstance(cls, type) and issubclass(cls, Controller)):
        msg = f"{cls!r} is not a Controller subclass."
        raise ConfigurationError(msg)

    title = cls.__name__.removesuffix("Controller") or cls.__name__
    name = cls.name or snake(title)

    handlers: dict[str, Callable[..., Any]] = {}
    hooks: dict[str, Callable[..., Any]] = {}
    for attr, member in inspect.getmembers(cls, inspect.isfunction):
        # Base-class hooks such as resolve_action are not actions.
        if not attr.endswith(ACTION_SUFFIX) or attr.startswith("_") or hasattr(Controller, attr):
            continue
        if attr.startswith(INIT_PREFIX):
            hooks[attr.removeprefix(INIT_PREFIX).removesuffix(ACTION_SUFFIX)] = member
        else:
            handlers[attr.removesuffix(ACTION_SUFFIX)] = member

    orphans = sorted(set(hooks) - set(handlers))
    if orphans:
        msg = (
            f"{cls.__name__} declares init hooks without actions: "
            + ", ".join(f"init_{o}_action" for o in orphans)
        )
        raise ConfigurationError(msg)

    actions: dict[str, Action] = {}
    for action_name, handler in handlers.items():
        hook = hooks.get(action_name)
        actions[action_name] = Action(
            name=action_name,
            handler=handler,
            wants=_wanted(cls, handler),
            init_hook=hook,
            init_wants=_wanted(cls, hook) if hook is not None else frozenset(),
        )

    return ControllerSpec(cls=cls, name=name, title=title, actions=MappingProxyType(actions))


def camel(name: str) -> str:
    """``show_all`` -> ``ShowAll``."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def snake(name: str) -> str:
    """``BlogPosts`` -> ``blog_posts``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _wanted(cls: type[Controller], func: Callable[..., Any]) -> frozenset[str]:
    """Inspect *func* once and return the injectable names it declares.

    The first positional parameter is ``self``. Every other parameter must
    be injectable by name (or typed ``Request``) or carry a default.
    """
    sig = inspect.signature(func)
    params = list(sig.parameters.values())[1:]
    wanted: set[str] = set()
    for param in params:
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if param.annotation in (Request, "Request") and param.name not in INJECTABLE:
            msg = (
                f"{cls.__name__}.{func.__name__}: annotate the request "
                f"parameter as 'request', not {param.name!r}."
            )
            raise ConfigurationError(msg)
        if param.name in INJECTABLE:
            wanted.add(param.name)
        elif param.default is inspect.Parameter.empty:
            msg = (
                f"{cls.__name__}.{func.__name__}: cannot supply parameter "
                f"{param.name!r}. Injectable parameters: {', '.join(sorted(INJECTABLE))}."
            )
            raise ConfigurationError(msg)
    return frozenset(wanted)


def _kwargs(wants: frozenset[str], context: DispatchContext) -> dict[str, Any]:
    values: dict[str, Any] = {
        "request": context.request,
        "identifier": context.identifier,
        "args": context.args,
        "params": context.request.params,
        "context": context,
    }
    return {name: values[name] for name in wants}
