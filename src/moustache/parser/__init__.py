"""Moustache parser — token list to token tree.

Example:
    >>> from moustache.lexer import tokenize
    >>> from moustache.parser import parse
    >>> tree = parse(tokenize("{{#items}}{{.}}{{/items}}"))
    >>> type(tree.body[0]).__name__
    'Section'

"""

from moustache.parser.core import PRAGMA_FILTERS, Parser, parse

__all__ = ["PRAGMA_FILTERS", "Parser", "parse"]
