"""No-output marker nodes for the Moustache token tree.

Kept in the tree so that a parsed template still accounts for every tag in
its source, including the ones removed by standalone-line trimming.
"""

from __future__ import annotations

from dataclasses import dataclass

from moustache.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Comment(Node):
    """Comment: {{! text }}"""

    value: str


@dataclass(frozen=True, slots=True)
class SetDelimiter(Node):
    """Delimiter change: {{=<% %>=}}"""

    otag: str
    ctag: str


@dataclass(frozen=True, slots=True)
class Pragma(Node):
    """Pragma: {{%FILTERS}}"""

    name: str
