"""Wren exception hierarchy.

Shared across the resolver, dispatcher, views, and components so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when a controller or the app declares an impossible state.

    Registration problems surface during ``App._freeze()`` at startup.
    A view that cannot be constructed surfaces per request.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    Raised by the resolver, components, hooks, or handlers. The dispatcher
    catches these and turns them into a terminal error response.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no mount, no action, or no chain continuation for the request."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: the controller exists but refuses this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class TemplateNotFound(WrenError):  # noqa: N818
    """A view resolved, but its template is absent and no default applies."""

    status = 500

    def __init__(self, name: str) -> None:
        super().__init__(f"Template not found: {name!r}")
        self.name = name


class HandlerError(WrenError):
    """An action handler raised something other than ``HTTPError``.

    The original exception is kept as ``original`` and as ``__cause__``.
    """

    status = 500

    def __init__(self, action: str, original: BaseException) -> None:
        super().__init__(f"Action {action!r} failed: {original!r}")
        self.action = action
        self.original = original
