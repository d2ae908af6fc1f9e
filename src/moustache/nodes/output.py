"""Output nodes for the Moustache token tree."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from moustache.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Text(Node):
    """Literal text between tags."""

    value: str


@dataclass(frozen=True, slots=True)
class Variable(Node):
    """Interpolation: {{name}}, {{{name}}} or {{&name}}

    ``otag``/``ctag`` are the delimiters in effect at the tag, used when an
    interpolation lambda's result is rendered.
    """

    name: str
    escape: bool = True
    filters: Sequence[str] = ()
    otag: str = "{{"
    ctag: str = "}}"
