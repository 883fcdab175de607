"""Wren: an action-controller web framework on ASGI.

One controller class per resource, actions by naming convention,
ordered components around every request, kida templates for views.

Basic usage::

    from wren import App, Controller

    app = App()

    @app.controller("/widgets")
    class WidgetsController(Controller):
        def index_action(self):
            return {"items": ["sprocket", "gear"]}

        def object_action(self, identifier):
            return {"widget": identifier}

Serve ``app`` with any ASGI server.
"""

__version__ = "0.1.0-dev"
__all__ = [
    "App",
    "AppConfig",
    "BaseComponent",
    "ConfigurationError",
    "Continue",
    "Controller",
    "DefaultView",
    "DispatchContext",
    "HTTPError",
    "Halt",
    "HandlerError",
    "Layout",
    "MethodNotAllowed",
    "NotFound",
    "Redirect",
    "Replace",
    "Request",
    "Response",
    "TemplateNotFound",
    "View",
    "WrenError",
    "get_request",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "App":
        from wren.app import App

        return App

    if name == "AppConfig":
        from wren.config import AppConfig

        return AppConfig

    if name == "Controller":
        from wren.controller import Controller

        return Controller

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from wren.http import response as _resp

        return getattr(_resp, name)

    if name in ("View", "DefaultView", "Layout"):
        from wren import views as _views

        return getattr(_views, name)

    if name in ("BaseComponent", "Continue", "Replace", "Halt"):
        from wren.components import protocol as _components

        return getattr(_components, name)

    if name in ("DispatchContext", "get_request"):
        from wren import context as _ctx

        return getattr(_ctx, name)

    if name in (
        "ConfigurationError",
        "HTTPError",
        "HandlerError",
        "MethodNotAllowed",
        "NotFound",
        "TemplateNotFound",
        "WrenError",
    ):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
