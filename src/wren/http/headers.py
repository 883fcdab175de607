"""Immutable, case-insensitive HTTP request headers.

Built once from the ASGI byte pairs. Names are folded to lower case and
values decoded as latin-1 up front, so lookups during dispatch are plain
dictionary hits.
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType


class Headers(Mapping[str, str]):
    """Request headers keyed by lower-case name.

    ``headers[name]`` is the first value sent for *name*; ``get_list``
    returns every value in arrival order. ``raw`` keeps the original pairs
    for anything that needs to forward them untouched.
    """

    __slots__ = ("_index", "_raw")

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        index: dict[str, list[str]] = {}
        for name, value in raw:
            index.setdefault(name.decode("latin-1").lower(), []).append(value.decode("latin-1"))
        self._raw = raw
        self._index = MappingProxyType({k: tuple(v) for k, v in index.items()})

    @classmethod
    def from_dict(cls, headers: Mapping[str, str]) -> "Headers":
        """Build headers from a plain ``str -> str`` mapping."""
        return cls(
            tuple(
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in headers.items()
            )
        )

    def __getitem__(self, key: str) -> str:
        return self._index[key.lower()][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"Headers({dict(self.items())!r})"

    def get_list(self, key: str) -> list[str]:
        """Every value sent for *key*, in order."""
        return list(self._index.get(key.lower(), ()))

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """The original ASGI byte pairs."""
        return self._raw
