"""Views and layouts: turn action data into a Response.

A view renders in three overridable steps, mirroring how the template
collaborator is used::

    resource = view.load(templates, name)        # TemplateNotFound if absent
    payload = view.process(templates, resource, data)
    response = view.response_for(payload)

Subclasses can override any step, or ``display`` for fully custom output.
A ``Layout`` is a view whose data is ``{"content": <inner output>}``.

``render`` is the entry point the dispatcher uses. It is a pure function of
(data, view, layout) plus the read-only templates: ``data`` is never
mutated and nothing is cached.
"""

import json as json_module
import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any, ClassVar

from kida.utils.html import Markup

from wren.errors import ConfigurationError, TemplateNotFound
from wren.http.response import Redirect, Response
from wren.templating import TemplateSource

logger = logging.getLogger("wren.views")


class View:
    """Renders action data through one template.

    ``template`` pins the template name; when unset, the dispatcher passes
    the conventional ``<controller>/<action>.html``.
    """

    template: str | None = None
    content_type: ClassVar[str] = "text/html; charset=utf-8"

    def __init__(self, template: str | None = None) -> None:
        if template is not None:
            self.template = template

    def display(self, data: Any, templates: TemplateSource, template_name: str) -> Response:
        name = self.template or template_name
        resource = self.load(templates, name)
        return self.response_for(self.process(templates, resource, data))

    def load(self, templates: TemplateSource, name: str) -> Any:
        return templates.load_template(name)

    def process(self, templates: TemplateSource, resource: Any, data: Any) -> str:
        return templates.process(resource, context_for(data))

    def response_for(self, payload: str) -> Response:
        return Response(body=payload, content_type=self.content_type)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} template={self.template!r}>"


class DefaultView(View):
    """The framework default view.

    Renders the conventional template when one exists. Otherwise the data
    itself becomes the response (see ``serialize``).
    """

    def display(self, data: Any, templates: TemplateSource, template_name: str) -> Response:
        try:
            return super().display(data, templates, template_name)
        except TemplateNotFound as exc:
            # A missing include inside an existing template is still an error
            if exc.name != (self.template or template_name):
                raise
            return serialize(data)


class Layout(View):
    """An outer view wrapping an inner view's output as ``content``.

    Only output of the layout's own media type is wrapped; a JSON body
    from ``DefaultView`` passes through an HTML layout untouched.
    """

    def wrap(self, inner: Response, templates: TemplateSource) -> Response:
        """Render this layout around *inner*, keeping its status and headers."""
        if not self.template:
            msg = f"{type(self).__name__} has no template."
            raise ConfigurationError(msg)
        if _media_type(inner.content_type) != _media_type(self.content_type):
            logger.debug(
                "layout %s bypassed: inner %s is not %s",
                self.template,
                _media_type(inner.content_type),
                _media_type(self.content_type),
            )
            return inner
        outer = self.display({"content": Markup(inner.text)}, templates, self.template)
        return replace(inner, body=outer.body, content_type=outer.content_type)


def render(
    data: Any,
    view: View,
    layout: Layout | None,
    templates: TemplateSource,
    *,
    template_name: str,
) -> Response:
    """Produce the final Response for an action's return value.

    - ``Response`` -> returned unchanged, the view is never consulted
    - ``Redirect`` -> redirect response
    - anything else -> ``view.display`` then, if set, ``layout.wrap``
    """
    if isinstance(data, Response):
        return data
    if isinstance(data, Redirect):
        return data.to_response()
    inner = view.display(data, templates, template_name)
    if layout is None:
        return inner
    return layout.wrap(inner, templates)


def context_for(data: Any) -> dict[str, Any]:
    """Template context for *data*; non-mappings are exposed as ``data``."""
    if data is None:
        return {}
    if isinstance(data, Mapping):
        return dict(data)
    return {"data": data}


def serialize(value: Any) -> Response:
    """Turn plain data into a Response without a template.

    Dispatch order:

    1. ``Response``         -> pass through
    2. ``Redirect``         -> redirect response
    3. ``None``             -> 200, empty body
    4. ``str``              -> 200, text/html
    5. ``bytes``            -> 200, application/octet-stream
    6. ``(value, int)``     -> serialize value, override status
    7. ``dict`` / ``list``  -> 200, application/json
    """
    match value:
        case Response():
            return value
        case Redirect():
            return value.to_response()
        case None:
            return Response(body="")
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case tuple((inner, int() as status)) if not isinstance(status, bool):
            return serialize(inner).with_status(status)
        case Mapping() | list():
            payload = dict(value) if isinstance(value, Mapping) else value
            return Response(
                body=json_module.dumps(payload, default=str),
                content_type="application/json; charset=utf-8",
            )
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                f"Return str, bytes, dict, list, Response, or Redirect."
            )
            raise TypeError(msg)


def as_view(ref: Any, registry: Mapping[str, type[View]]) -> View:
    """Turn a controller's ``view``/``layout`` value into a View instance.

    Accepts an instance, a ``View`` subclass, or a registered class name.

    Raises:
        ConfigurationError: If the reference is unknown or the class
            cannot be constructed without arguments.
    """
    if isinstance(ref, View):
        return ref
    cls = registry.get(ref) if isinstance(ref, str) else ref
    if cls is None:
        msg = f"No view registered as {ref!r}. Register it with @app.view."
        raise ConfigurationError(msg)
    if not (isinstance(cls, type) and issubclass(cls, View)):
        msg = f"{ref!r} is not a View."
        raise ConfigurationError(msg)
    try:
        return cls()
    except Exception as exc:
        msg = f"Cannot construct view {cls.__name__}: {exc}"
        raise ConfigurationError(msg) from exc


def as_layout(ref: Any, registry: Mapping[str, type[View]]) -> Layout:
    """Like ``as_view``, but the result must be a ``Layout``."""
    layout = as_view(ref, registry)
    if not isinstance(layout, Layout):
        msg = f"{type(layout).__name__} is not a Layout."
        raise ConfigurationError(msg)
    return layout


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()
