"""Moustache Environment — configuration, loaders and errors.

Exports:
- `Engine`: Central configuration and template management
- Loaders: `StringLoader`, `DictLoader`, `FileSystemLoader`, `ChoiceLoader`
- `HelperCollection`: Copy-on-write helper mapping
- Exceptions: `TemplateError` and its subclasses, `ErrorCode`

"""

from moustache.environment.core import SPEC_VERSION, VERSION, Engine
from moustache.environment.exceptions import (
    CacheWriteError,
    ConfigurationError,
    ErrorCode,
    SourceSnippet,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    build_source_snippet,
)
from moustache.environment.loaders import (
    ChoiceLoader,
    DictLoader,
    FileSystemLoader,
    Loader,
    StringLoader,
)
from moustache.environment.registry import HelperCollection

__all__ = [
    "SPEC_VERSION",
    "VERSION",
    "CacheWriteError",
    "ChoiceLoader",
    "ConfigurationError",
    "DictLoader",
    "Engine",
    "ErrorCode",
    "FileSystemLoader",
    "HelperCollection",
    "Loader",
    "SourceSnippet",
    "StringLoader",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "build_source_snippet",
]
