"""Components: ordered, reusable pre/post dispatch units.

A component is any object with a ``name`` plus ``before`` and ``after``
steps (see ``wren.components.protocol``). Controllers list the components
they run, in order, by name.

Built-in components:
    AccessComponent -- method allow-list and access check (403/405)
    RequestLogComponent -- log every outcome, failures included
    SecurityHeadersComponent -- X-Frame-Options, X-Content-Type-Options, CSP
"""

from wren.components.builtin import (
    AccessComponent,
    RequestLogComponent,
    SecurityHeadersComponent,
    SecurityHeadersConfig,
)
from wren.components.chain import ComponentChain, Link
from wren.components.protocol import (
    CONTINUE,
    BaseComponent,
    Component,
    Continue,
    Halt,
    Outcome,
    Replace,
    outcome_of,
)

__all__ = [
    "CONTINUE",
    "AccessComponent",
    "BaseComponent",
    "Component",
    "ComponentChain",
    "Continue",
    "Halt",
    "Link",
    "Outcome",
    "Replace",
    "RequestLogComponent",
    "SecurityHeadersComponent",
    "SecurityHeadersConfig",
    "outcome_of",
]
