"""Render-time context stack.

A `Context` is an ordered stack of frames consulted top-down when a tag name
is resolved. Every render call builds its own Context; it is never shared
between concurrent renders.

Context values form a closed set of kinds, inspected through three capability
queries rather than ad hoc type checks at each call site:

- `is_sequence(value)`: iterated by sections (one push per element)
- `is_lambda(value)`: invoked by sections and interpolations
- `member_named(value, name)`: key of a mapping, or public attribute of an
  object (bound methods are called with no arguments)

Resolution:
    ```
    frames (top first):  {"a": {"c": 2}}   {"a": {"b": 1}}
    {{a.b}}  →  first frame with 'a' wins → {"c": 2}.b → MISSING
    ```
A dotted name only falls back across frames for its first segment.

"""

from __future__ import annotations

import inspect
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Final


class _Missing:
    """Sentinel for names that resolve to nothing."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()

_TEXT_TYPES = (str, bytes, bytearray)


def is_sequence(value: Any) -> bool:
    """Return True for list-like values that sections iterate."""
    return isinstance(value, Sequence) and not isinstance(value, _TEXT_TYPES)


def is_lambda(value: Any) -> bool:
    """Return True for callables that should be invoked as lambdas."""
    return callable(value) and not isinstance(value, type)


def member_named(value: Any, name: str) -> Any:
    """Look up a single name segment on a context value.

    Mappings are searched by key, other objects by public attribute. A bound
    method that needs no arguments is called and its result returned; one
    that takes arguments is returned as is and renders as a lambda.

    Returns:
        The member value, or MISSING if the value has no such member
    """
    if isinstance(value, Mapping):
        return value.get(name, MISSING)
    if value is None or value is MISSING or name.startswith("_"):
        return MISSING
    if isinstance(value, _TEXT_TYPES + (int, float, bool)) or is_sequence(value):
        return MISSING
    try:
        member = getattr(value, name)
    except AttributeError:
        return MISSING
    if inspect.ismethod(member) and _takes_no_arguments(member):
        return member()
    return member


def _takes_no_arguments(method: Any) -> bool:
    try:
        signature = inspect.signature(method)
    except (TypeError, ValueError):
        return False
    return not any(
        param.default is param.empty
        and param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD, param.KEYWORD_ONLY)
        for param in signature.parameters.values()
    )


class Context:
    """Stack of data frames for name resolution.

    Example:
        >>> ctx = Context([{"greeting": "hi"}])
        >>> ctx.push({"name": "Ada"})
        >>> ctx.find("greeting"), ctx.find("name")
        ('hi', 'Ada')
        >>> ctx.pop()
        {'name': 'Ada'}
        >>> ctx.find("name")
        MISSING

    """

    __slots__ = ("_stack",)

    def __init__(self, frames: Iterable[Any] = ()):
        # Bottom of the stack first; lookups walk it in reverse.
        self._stack: list[Any] = list(frames)

    def push(self, value: Any) -> None:
        """Push a value as the new top frame."""
        self._stack.append(value)

    def pop(self) -> Any:
        """Remove and return the top frame."""
        return self._stack.pop()

    @property
    def depth(self) -> int:
        """Number of frames on the stack."""
        return len(self._stack)

    def find_dot(self) -> Any:
        """Return the top frame's value (the implicit iterator ``.``)."""
        return self._stack[-1] if self._stack else MISSING

    last = find_dot

    def find(self, name: str) -> Any:
        """Resolve a (possibly dotted) name.

        Args:
            name: ``.``, a plain name, or a dotted path like ``user.name``

        Returns:
            The resolved value, or MISSING
        """
        if name == ".":
            return self.find_dot()

        first, *rest = name.split(".")
        value = self._find_in_stack(first)
        for segment in rest:
            if value is MISSING:
                break
            value = member_named(value, segment)
        return value

    def _find_in_stack(self, name: str) -> Any:
        for frame in reversed(self._stack):
            value = member_named(frame, name)
            if value is not MISSING:
                return value
        return MISSING

    @staticmethod
    def is_truthy(value: Any) -> bool:
        """Section truthiness.

        MISSING, False, None, the empty string and empty sequences are falsy.
        Everything else, including ``0`` and empty mappings, is truthy.
        """
        if value is MISSING or value is None or value is False:
            return False
        if isinstance(value, _TEXT_TYPES):
            return len(value) > 0
        if is_sequence(value):
            return len(value) > 0
        return True

    def __repr__(self) -> str:
        return f"<Context depth={len(self._stack)}>"
