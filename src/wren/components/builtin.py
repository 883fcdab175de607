"""Built-in components: access control, security headers, request log.

Each one is configured per controller through ``component_config`` and,
per request, through ``Controller.prepare_component``::

    class AdminController(Controller):
        components = ("access", "security_headers", "request_log")
        component_config = {"access": {"methods": ("GET", "POST")}}

        def prepare_component(self, name, request):
            if name == "access":
                return {"public": request.method == "GET"}
            return None
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from wren._internal.invoke import invoke
from wren.components.protocol import CONTINUE, BaseComponent, Halt, Outcome, Replace
from wren.errors import MethodNotAllowed
from wren.http.request import Request
from wren.http.response import Response

if TYPE_CHECKING:
    from wren.controller import Controller

logger = logging.getLogger("wren.components")

type AccessCheck = Callable[[Request], bool | Awaitable[bool]]


class AccessComponent(BaseComponent):
    """Refuse requests before they reach the controller.

    Config keys:
        methods: Allowed HTTP methods. Others get 405 with ``Allow``.
        public: When true, skip the access check for this request.

    Usage::

        app.add_component(AccessComponent(check=lambda r: "x-api-key" in r.headers))
    """

    name = "access"

    __slots__ = ("check",)

    def __init__(self, check: AccessCheck | None = None) -> None:
        self.check = check

    async def before(
        self, request: Request, controller: Controller, config: Mapping[str, Any]
    ) -> Outcome:
        methods = config.get("methods")
        if methods:
            allowed = frozenset(m.upper() for m in methods)
            if request.method not in allowed:
                err = MethodNotAllowed(allowed)
                return Halt(
                    Response(body=err.detail, status=err.status).with_headers(dict(err.headers))
                )

        if self.check is None or config.get("public", False):
            return CONTINUE

        if await invoke(self.check, request):
            return CONTINUE
        logger.info("access denied: %s %s", request.method, request.path)
        return Halt(Response(body="Forbidden", status=403))


@dataclass(frozen=True, slots=True)
class SecurityHeadersConfig:
    """Default header values. Per-controller config may override any field."""

    x_frame_options: str = "DENY"
    x_content_type_options: str = "nosniff"
    referrer_policy: str = "strict-origin-when-cross-origin"
    content_security_policy: str | None = (
        "default-src 'self'; base-uri 'self'; frame-ancestors 'none'; object-src 'none'"
    )


class SecurityHeadersComponent(BaseComponent):
    """Add X-Frame-Options, X-Content-Type-Options, Referrer-Policy and CSP.

    Applied only to text/html responses. Skipped for JSON and other
    content types.
    """

    name = "security_headers"

    __slots__ = ("defaults",)

    def __init__(self, defaults: SecurityHeadersConfig | None = None) -> None:
        self.defaults = defaults or SecurityHeadersConfig()

    def after(self, response: Response, request: Request, config: Mapping[str, Any]) -> Outcome:
        if not response.content_type.startswith("text/html"):
            return CONTINUE

        def pick(key: str) -> str | None:
            return config.get(key, getattr(self.defaults, key))

        secured = (
            response.with_header("X-Frame-Options", pick("x_frame_options") or "DENY")
            .with_header("X-Content-Type-Options", pick("x_content_type_options") or "nosniff")
            .with_header("Referrer-Policy", pick("referrer_policy") or "no-referrer")
        )
        csp = pick("content_security_policy")
        if csp:
            secured = secured.with_header("Content-Security-Policy", csp)
        return Replace(secured)


class RequestLogComponent(BaseComponent):
    """Log every outcome that reaches the post-phase, failures included.

    Config keys:
        level: Logging level name for successful responses (default ``info``).
            Responses with status >= 500 always log at ``error``.
    """

    name = "request_log"

    __slots__ = ("logger",)

    def __init__(self, logger_name: str = "wren.access") -> None:
        self.logger = logging.getLogger(logger_name)

    def after(self, response: Response, request: Request, config: Mapping[str, Any]) -> Outcome:
        if response.status >= 500:
            level = logging.ERROR
        else:
            level = logging.getLevelName(str(config.get("level", "info")).upper())
            if not isinstance(level, int):
                level = logging.INFO
        self.logger.log(level, "%s %s -> %d", request.method, request.url, response.status)
        return CONTINUE
