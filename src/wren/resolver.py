"""Handler resolution.

Maps (verb, segments beyond the mount point) to exactly one action of a
compiled controller, or raises ``NotFound``. Priority order:

1. The controller's ``resolve_action`` override, when it returns a name.
2. An explicit method-style name in the first segment. With two or more
   segments the first one *must* name an action; with exactly one it
   names an action only if the controller declares one by that name.
3. Verb defaults (``index``, ``object``, ``create``, ``update``, ``delete``).
4. Whatever was chosen must exist in the action table.

Explicit names take precedence over verb defaults. The verb-default
actions themselves are never reachable by explicit name, so
``GET /widgets/delete`` cannot reach ``delete_action``.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from wren.actions import DEFAULT_ACTIONS, Action
from wren.errors import NotFound

READ_METHODS = frozenset({"GET", "HEAD"})
WRITE_METHODS = frozenset({"POST", "PUT", "PATCH"})


@dataclass(frozen=True, slots=True)
class Resolution:
    """The outcome of resolution: one action plus what the path carried."""

    action: Action
    identifier: str | None = None
    args: tuple[str, ...] = ()


def resolve(
    method: str,
    segments: Sequence[str],
    actions: Mapping[str, Action],
    override: str | None = None,
) -> Resolution:
    """Resolve one action for a request.

    Args:
        method: Upper-case HTTP verb.
        segments: Path segments beyond the controller's mount point.
        actions: The controller's compiled action table.
        override: Result of the controller's ``resolve_action`` hook.

    Raises:
        NotFound: If no action answers the request.
    """
    segments = tuple(segments)

    if override:
        rest = segments[1:]
        return Resolution(_lookup(override, actions), rest[0] if rest else None, rest)

    if segments:
        explicit = explicit_name(segments[0])
        if len(segments) > 1:
            if explicit is None or explicit in DEFAULT_ACTIONS:
                raise NotFound(f"No action for {segments[0]!r}")
            rest = segments[1:]
            return Resolution(_lookup(explicit, actions), rest[0], rest)
        if explicit is not None and explicit not in DEFAULT_ACTIONS and explicit in actions:
            return Resolution(actions[explicit])

    name, identifier = default_action(method, segments)
    return Resolution(_lookup(name, actions), identifier, segments)


def default_action(method: str, segments: Sequence[str]) -> tuple[str, str | None]:
    """Map a bare verb (plus at most one identifier) to a default action name.

    Raises:
        NotFound: For verb/path combinations without a default.
    """
    identifier = segments[0] if segments else None
    if len(segments) > 1:
        raise NotFound(f"No default action for {method} with {len(segments)} segments")
    if method in READ_METHODS:
        return ("object" if identifier is not None else "index"), identifier
    if method == "POST" and identifier is None:
        return "create", None
    if method in WRITE_METHODS and identifier is not None:
        return "update", identifier
    if method == "DELETE":
        return "delete", identifier
    raise NotFound(f"No default action for {method}")


def explicit_name(segment: str) -> str | None:
    """Normalise a path segment into an action name, if it can be one.

    ``list-all`` and ``list_all`` both become ``list_all``; anything that
    is not a valid identifier afterwards (``42``, ``a.b``) is not a name.
    """
    name = segment.replace("-", "_")
    if not name.isidentifier() or name.startswith("_"):
        return None
    return name


def _lookup(name: str, actions: Mapping[str, Action]) -> Action:
    action = actions.get(name)
    if action is None:
        raise NotFound(f"No action {name!r}")
    return action
