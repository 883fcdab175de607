"""Component protocol and chain outcomes.

A component is a named unit with two callbacks::

    before(request, controller, config) -> Outcome
    after(response, request, config) -> Outcome

Both may be ``def`` or ``async def``. Every step answers with exactly one
of three outcomes, consumed uniformly by the chain:

- ``Continue()``: carry on.
- ``Replace(response)``: swap the response and carry on (post-phase).
- ``Halt(response)``: stop here. ``Halt()`` without a response means
  failure; the dispatcher answers with its not-found response.

Components are created once per application and shared by every request,
so they must not keep per-request state on ``self``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Protocol

from wren.http.request import Request
from wren.http.response import Response

if TYPE_CHECKING:
    from wren.controller import Controller


@dataclass(frozen=True, slots=True)
class Continue:
    """Proceed to the next step."""


@dataclass(frozen=True, slots=True)
class Replace:
    """Proceed with a different response."""

    response: Response


@dataclass(frozen=True, slots=True)
class Halt:
    """Stop the pipeline. No response means failure (not found)."""

    response: Response | None = None


type Outcome = Continue | Replace | Halt

CONTINUE = Continue()


class Component(Protocol):
    """Protocol for wren components. ``BaseComponent`` implements it."""

    name: str

    def before(
        self, request: Request, controller: Controller, config: Mapping[str, Any]
    ) -> Any: ...

    def after(self, response: Response, request: Request, config: Mapping[str, Any]) -> Any: ...


class BaseComponent:
    """Convenience base: both steps continue unless overridden.

    Subclasses set ``name`` and override ``before`` and/or ``after``::

        class Timing(BaseComponent):
            name = "timing"

            def after(self, response, request, config):
                return Replace(response.with_header("X-Served-By", "wren"))
    """

    name: ClassVar[str] = ""

    def before(
        self, request: Request, controller: Controller, config: Mapping[str, Any]
    ) -> Outcome:
        return CONTINUE

    def after(self, response: Response, request: Request, config: Mapping[str, Any]) -> Outcome:
        return CONTINUE

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


def outcome_of(value: Any, *, post: bool) -> Outcome:
    """Normalise whatever a component step returned into an ``Outcome``.

    ``None`` and ``True`` continue, ``False`` halts without a response.
    A bare ``Response`` halts in the pre-phase and replaces in the
    post-phase.
    """
    match value:
        case Continue() | Replace() | Halt():
            return value
        case None | True:
            return CONTINUE
        case False:
            return Halt()
        case Response():
            return Replace(value) if post else Halt(value)
        case _:
            msg = (
                f"Component step returned {type(value).__name__}. "
                f"Return Continue(), Replace(response), Halt(response), "
                f"a Response, a bool, or None."
            )
            raise TypeError(msg)
