"""Base node class for the Moustache token tree."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all tree nodes.

    All nodes track their source location for error reporting.
    Nodes are immutable, so parsed trees can be cached and shared.

    """

    lineno: int
    col_offset: int
