"""Moustache compiler — node tree to render closures."""

from moustache.compiler.core import Compiler

__all__ = ["Compiler"]
