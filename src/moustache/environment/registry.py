"""Helper collection for the Moustache engine.

Helpers are named values (often callables used as lambdas or filters) that
form the bottom frame of every render's context stack.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any


class HelperCollection:
    """Dict-like collection of named helpers.

    Supports:
        - helpers.add('name', value) / helpers['name'] = value
        - helpers.get('name') / helpers['name']
        - 'name' in helpers / helpers.has('name')
        - helpers.remove('name') / helpers.clear()

    All mutations use copy-on-write, so `snapshot()` can hand the current dict
    to a render without copying it and without seeing later changes.
    """

    __slots__ = ("_helpers",)

    def __init__(self, helpers: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None):
        self._helpers: dict[str, Any] = {}
        if helpers is not None:
            self.update(helpers)

    def add(self, name: str, helper: Any) -> None:
        new = self._helpers.copy()
        new[name] = helper
        self._helpers = new

    __setitem__ = add

    def update(self, helpers: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> None:
        """Batch add helpers from a mapping or (name, value) pairs."""
        new = self._helpers.copy()
        new.update(helpers)
        self._helpers = new

    def __getitem__(self, name: str) -> Any:
        return self._helpers[name]

    def get(self, name: str, default: Any = None) -> Any:
        return self._helpers.get(name, default)

    def has(self, name: str) -> bool:
        return name in self._helpers

    def __contains__(self, name: object) -> bool:
        return name in self._helpers

    def remove(self, name: str) -> None:
        """Remove a helper.

        Raises:
            KeyError: If no helper has that name
        """
        if name not in self._helpers:
            raise KeyError(name)
        new = self._helpers.copy()
        del new[name]
        self._helpers = new

    def clear(self) -> None:
        self._helpers = {}

    def snapshot(self) -> Mapping[str, Any]:
        """Return the current helpers; never mutated afterwards."""
        return self._helpers

    def __len__(self) -> int:
        return len(self._helpers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._helpers)

    def items(self):
        return self._helpers.items()

    def __repr__(self) -> str:
        return f"<HelperCollection {sorted(self._helpers)}>"
