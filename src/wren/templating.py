"""Template collaborator: kida environment setup and the loader/processor seam.

Views never talk to kida directly. They go through a ``TemplateSource``::

    resource = templates.load_template("widgets/index.html")  # or TemplateNotFound
    html = templates.process(resource, {"items": items})

``KidaTemplates`` is the production implementation. The environment is
created once during ``App._freeze()`` and shared read-only by every
request.
"""

from collections.abc import Callable, Mapping
from typing import Any, Protocol

from kida import ChoiceLoader, Environment, FileSystemLoader
from kida.environment.exceptions import TemplateNotFoundError

from wren.config import AppConfig
from wren.errors import TemplateNotFound


class TemplateSource(Protocol):
    """Loads template resources by name and processes them against data."""

    def load_template(self, name: str) -> Any: ...

    def process(self, resource: Any, data: Mapping[str, Any]) -> str: ...


class KidaTemplates:
    """``TemplateSource`` backed by a kida ``Environment``."""

    __slots__ = ("env",)

    def __init__(self, env: Environment) -> None:
        self.env = env

    def load_template(self, name: str) -> Any:
        try:
            return self.env.get_template(name)
        except TemplateNotFoundError as exc:
            raise TemplateNotFound(name) from exc

    def process(self, resource: Any, data: Mapping[str, Any]) -> str:
        # kida receives its own copy so views never see their data mutated
        return resource.render(dict(data))


def create_environment(
    config: AppConfig,
    filters: dict[str, Callable[..., Any]],
    globals_: dict[str, Any],
) -> Environment:
    """Create a kida Environment from app configuration.

    Called once during ``App._freeze()``. Supports multiple template
    directories via ``config.component_dirs`` for shared layouts and
    partials.
    """
    loaders = [FileSystemLoader(str(config.template_dir))]
    loaders.extend(FileSystemLoader(str(d)) for d in config.component_dirs)

    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=config.autoescape,
        auto_reload=config.debug,
        trim_blocks=config.trim_blocks,
        lstrip_blocks=config.lstrip_blocks,
    )

    if filters:
        env.update_filters(filters)

    for name, value in globals_.items():
        env.add_global(name, value)

    return env
