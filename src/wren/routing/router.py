"""Mount table with trie-based prefix matching.

Controllers are mounted under path prefixes during setup. The router is
compiled when the app freezes; ``match`` strips the longest mounted
prefix and hands back the remaining segments for handler resolution.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from wren.errors import ConfigurationError, NotFound
from wren.http.request import split_path

if TYPE_CHECKING:
    from wren.actions import ControllerSpec
    from wren.components.chain import ComponentChain


@dataclass(frozen=True, slots=True)
class Mount:
    """A compiled controller registered under a path prefix."""

    prefix: str
    spec: ControllerSpec
    chain: ComponentChain


@dataclass(frozen=True, slots=True)
class MountMatch:
    """Result of a successful match: the mount plus the leftover segments."""

    mount: Mount
    segments: tuple[str, ...]


class _TrieNode:
    """A node in the mount trie. Mutable during compilation only."""

    __slots__ = ("children", "mount")

    def __init__(self) -> None:
        self.children: dict[str, _TrieNode] = {}
        self.mount: Mount | None = None


class Router:
    """Compiled mount table.

    Usage::

        router = Router()
        router.add(Mount("/widgets", spec, chain))
        router.compile()
        match = router.match("/widgets/42")   # segments == ("42",)
    """

    __slots__ = ("_compiled", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._compiled = False

    def add(self, mount: Mount) -> None:
        """Add a mount. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add mounts after compilation."
            raise RuntimeError(msg)

        node = self._root
        for part in split_path(mount.prefix):
            node = node.children.setdefault(part, _TrieNode())

        if node.mount is not None:
            msg = (
                f"Mount point {mount.prefix!r} is already taken by "
                f"{node.mount.spec.cls.__name__}."
            )
            raise ConfigurationError(msg)
        node.mount = mount

    @property
    def mounts(self) -> list[Mount]:
        """Every registered mount, depth-first."""
        result: list[Mount] = []
        stack = [self._root]
        while stack:
            node = stack.pop()
            if node.mount is not None:
                result.append(node.mount)
            stack.extend(reversed(list(node.children.values())))
        return result

    def compile(self) -> None:
        """Freeze the router. No more mounts can be added."""
        self._compiled = True

    def match(self, path: str) -> MountMatch:
        """Find the deepest mount whose prefix matches *path*.

        Raises ``NotFound`` if no mount covers the path.
        """
        parts = split_path(path)
        node = self._root
        best: MountMatch | None = None
        if node.mount is not None:
            best = MountMatch(node.mount, parts)

        for depth, part in enumerate(parts, start=1):
            child = node.children.get(part)
            if child is None:
                break
            node = child
            if node.mount is not None:
                best = MountMatch(node.mount, parts[depth:])

        if best is None:
            raise NotFound(f"No controller mounted for {path!r}")
        return best
