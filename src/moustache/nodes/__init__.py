"""Moustache token tree nodes.

The parser turns the flat token list into a tree of immutable nodes:

    ```
    Template
    ├── Text
    ├── Variable
    ├── Section ── body ── (any node)
    ├── Partial
    └── Comment / SetDelimiter / Pragma   (no output)
    ```

"""

from moustache.nodes.base import Node
from moustache.nodes.markers import Comment, Pragma, SetDelimiter
from moustache.nodes.output import Text, Variable
from moustache.nodes.structure import Partial, Section, Template

__all__ = [
    "Comment",
    "Node",
    "Partial",
    "Pragma",
    "Section",
    "SetDelimiter",
    "Template",
    "Text",
    "Variable",
]
