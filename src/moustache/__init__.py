"""Moustache — logic-less Mustache templates for Python.

Quickstart:
    >>> from moustache import Engine
    >>> engine = Engine()
    >>> engine.render("Hello {{planet}}", {"planet": "World"})
    'Hello World'

Partials and file-based templates:
    >>> from moustache import Engine, FileSystemLoader
    >>> engine = Engine(
    ...     loader=FileSystemLoader("views/"),
    ...     partials_loader=FileSystemLoader("views/partials/"),
    ... )
    >>> engine.render("page", {"title": "Home"})

Architecture:
Template Source → Lexer → Parser → Node tree → Compiler → render closures

Pipeline stages:
1. **Lexer**: Tokenizes source, trims standalone lines, applies delimiter changes
2. **Parser**: Matches sections by name into an immutable node tree
3. **Compiler**: Turns the tree into a tree of render closures
4. **Template**: Wraps the closures with the render() interface

Parsed trees can be persisted with a `FileSystemCache`; compiled Templates
are cached in-process by the Engine, keyed by source and escaping settings.

Thread-Safety:
- Compile-if-absent is guarded by a lock; each source compiles once
- Rendering uses only local state (a per-call Context and output buffer)
- Helpers use copy-on-write updates

Logging:
Events go to the ``moustache`` logger, which has a ``NullHandler`` until the
application configures logging (or passes ``Engine(logger=...)``).

"""

import logging

from moustache._types import Token, TokenType
from moustache.environment import (
    SPEC_VERSION,
    VERSION,
    CacheWriteError,
    ChoiceLoader,
    ConfigurationError,
    DictLoader,
    Engine,
    ErrorCode,
    FileSystemLoader,
    HelperCollection,
    SourceSnippet,
    StringLoader,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
)
from moustache.cache import FileSystemCache, MemoryCache
from moustache.context import MISSING, Context
from moustache.template import LambdaHelper, Template
from moustache.utils.html import html_escape
from moustache.utils.logs import logger

logger.addHandler(logging.NullHandler())

__version__ = VERSION

__all__ = [
    "MISSING",
    "SPEC_VERSION",
    "VERSION",
    "CacheWriteError",
    "ChoiceLoader",
    "ConfigurationError",
    "Context",
    "DictLoader",
    "Engine",
    "ErrorCode",
    "FileSystemCache",
    "FileSystemLoader",
    "HelperCollection",
    "LambdaHelper",
    "MemoryCache",
    "SourceSnippet",
    "StringLoader",
    "Template",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "Token",
    "TokenType",
    "html_escape",
]
