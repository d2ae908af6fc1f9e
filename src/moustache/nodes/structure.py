"""Structure nodes for the Moustache token tree."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from moustache.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Template(Node):
    """Root node of a parsed template."""

    body: Sequence[Node]
    pragmas: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class Section(Node):
    """Section {{#name}}...{{/name}} or inverted section {{^name}}...{{/name}}

    ``start``/``end`` delimit the raw inner source handed to section lambdas:
    from just past the opening tag to the start of the closing tag.
    """

    name: str
    body: Sequence[Node]
    inverted: bool = False
    filters: Sequence[str] = ()
    start: int = 0
    end: int = 0
    otag: str = "{{"
    ctag: str = "}}"


@dataclass(frozen=True, slots=True)
class Partial(Node):
    """Partial inclusion: {{>name}}"""

    name: str
    indent: str = ""
