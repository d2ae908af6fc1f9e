"""Moustache Engine — central configuration and template management hub.

The Engine holds all configuration (loaders, helpers, escaping, charset,
caches, logger) and is the entry point for loading and rendering templates.

Architecture:
    ```
    Engine
    ├── _loader / _partials_loader   # Template source providers
    ├── _helpers: HelperCollection   # Bottom context frame of every render
    ├── _escape / _charset           # Escaped-interpolation configuration
    ├── _cache: FileSystemCache?     # Persistent parsed-tree cache
    ├── _templates: dict             # In-process Template cache
    ├── _lambda_templates: LRU       # Templates for lambda results
    └── _logger                      # stdlib Logger or LoggerAdapter
    ```

Pipeline for an uncached source:
    ```
    source ─▶ tokenize ─▶ parse ─▶ (persistent cache dump) ─▶ Compiler ─▶ Template
               └────── skipped on a persistent cache hit ──────┘
    ```

Thread-Safety:
    - Compile-if-absent runs under a lock, so concurrent first access to the
      same source compiles it exactly once
    - Populated cache entries are never mutated
    - Each render builds its own Context

Example:
    >>> engine = Engine(partials={"user": "<b>{{name}}</b>"})
    >>> engine.render("Hello {{planet}}", {"planet": "World"})
    'Hello World'
    >>> engine.render("{{#users}}{{> user}}{{/users}}", {"users": [{"name": "Ada"}]})
    '<b>Ada</b>'

"""

from __future__ import annotations

import hashlib
import logging
import os
import threading
from collections import OrderedDict
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from moustache.environment.exceptions import ConfigurationError, TemplateNotFoundError
from moustache.environment.loaders import DictLoader, Loader, StringLoader
from moustache.environment.registry import HelperCollection
from moustache.utils.html import normalize_charset
from moustache.utils.logs import LoggerLike, is_logger, log_event
from moustache.utils.logs import logger as default_logger

if TYPE_CHECKING:
    from moustache.nodes import Template as TemplateNode
    from moustache.template import Template

VERSION = "2.1.0"
SPEC_VERSION = "1.1.2"

DEFAULT_CLASS_PREFIX = "Moustache_Template_"

# Compiled lambda templates kept in-process, least recently used evicted first.
LAMBDA_CACHE_SIZE = 256


class Engine:
    """Central configuration and template management hub.

    Args:
        template_class_prefix: Prefix of cache keys (default ``Moustache_Template_``)
        cache: Directory for the persistent cache, or a cache object with
            ``load``/``dump`` (e.g. `FileSystemCache`, `MemoryCache`)
        cache_file_mode: Permission bits for cache files created from a
            ``cache`` directory path
        loader: Main template loader (default: `StringLoader`)
        partials_loader: Partials loader (default: `DictLoader`)
        partials: Mapping of partial name to source, stored on the partials loader
        helpers: Mapping or (name, value) pairs forming the bottom context frame
        escape: Callable used instead of HTML escaping for ``{{name}}``
        charset: Charset for the default HTML escaping (default ``UTF-8``)
        logger: ``logging.Logger`` or ``logging.LoggerAdapter``
            (default: the ``moustache`` logger)
        autoescape: When False, ``{{name}}`` is emitted unescaped

    Raises:
        ConfigurationError: For options of the wrong type

    Example:
            >>> engine = Engine(helpers={"shout": lambda text, h: h.render(text).upper()})
            >>> engine.render("{{#shout}}hi {{name}}{{/shout}}", {"name": "ada"})
            'HI ADA'

    """

    def __init__(
        self,
        *,
        template_class_prefix: str = DEFAULT_CLASS_PREFIX,
        cache: Any = None,
        cache_file_mode: int | None = None,
        loader: Loader | None = None,
        partials_loader: Loader | None = None,
        partials: Mapping[str, str] | None = None,
        helpers: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None,
        escape: Callable[[str], str] | None = None,
        charset: str = "UTF-8",
        logger: LoggerLike | None = None,
        autoescape: bool = True,
    ):
        self._template_class_prefix = template_class_prefix
        self._autoescape = autoescape
        self._templates: dict[str, Template] = {}
        self._lambda_templates: OrderedDict[str, Template] = OrderedDict()
        self._lock = threading.Lock()

        self._logger: LoggerLike = default_logger
        if logger is not None:
            self.set_logger(logger)

        if escape is not None and not callable(escape):
            raise ConfigurationError("Engine escape option must be callable")
        self._escape = escape

        try:
            normalize_charset(charset)
        except LookupError as e:
            raise ConfigurationError(f"Unknown charset '{charset}'") from e
        self._charset = charset

        self._cache_file_mode = cache_file_mode
        self._cache = self._make_cache(cache)

        self._loader: Loader = StringLoader()
        if loader is not None:
            self.set_loader(loader)

        self._partials_loader: Loader = DictLoader()
        if partials_loader is not None:
            self.set_partials_loader(partials_loader)
        if partials is not None:
            self.set_partials(partials)

        self._helpers = HelperCollection()
        if helpers is not None:
            self.set_helpers(helpers)

    # =========================================================================
    # Configuration
    # =========================================================================

    def _make_cache(self, cache: Any) -> Any:
        from moustache.cache import FileSystemCache

        self._owns_cache = False
        if cache is None:
            return None
        if isinstance(cache, (str, os.PathLike)):
            self._owns_cache = True
            return FileSystemCache(cache, self._cache_file_mode, self._logger)
        if callable(getattr(cache, "load", None)) and callable(getattr(cache, "dump", None)):
            return cache
        raise ConfigurationError(
            f"Engine cache must be a directory path or a cache object, "
            f"got {type(cache).__name__}"
        )

    @property
    def cache(self) -> Any:
        """Persistent cache, or None when disabled."""
        return self._cache

    @property
    def template_class_prefix(self) -> str:
        return self._template_class_prefix

    @property
    def escape(self) -> Callable[[str], str] | None:
        """Custom escape callback, or None for HTML escaping."""
        return self._escape

    @property
    def charset(self) -> str:
        return self._charset

    @property
    def autoescape(self) -> bool:
        return self._autoescape

    @property
    def loader(self) -> Loader:
        """Main template loader."""
        return self._loader

    def set_loader(self, loader: Loader) -> None:
        self._loader = self._check_loader(loader, "loader")

    @property
    def partials_loader(self) -> Loader:
        """Loader consulted by ``{{> name}}`` tags."""
        return self._partials_loader

    def set_partials_loader(self, loader: Loader) -> None:
        self._partials_loader = self._check_loader(loader, "partials_loader")

    def set_partials(self, partials: Mapping[str, str]) -> None:
        """Store partial sources on the partials loader.

        Raises:
            ConfigurationError: If the partials loader cannot store templates
        """
        set_templates = getattr(self._partials_loader, "set_templates", None)
        if not callable(set_templates):
            raise ConfigurationError(
                f"Unable to set partials on an immutable partials loader "
                f"({type(self._partials_loader).__name__})"
            )
        set_templates(partials)

    @staticmethod
    def _check_loader(loader: Any, option: str) -> Loader:
        if not callable(getattr(loader, "get_source", None)):
            raise ConfigurationError(
                f"Engine {option} must implement get_source(name), got {type(loader).__name__}"
            )
        return loader

    @property
    def helpers(self) -> HelperCollection:
        """Helpers available to every render as the bottom context frame."""
        return self._helpers

    def set_helpers(self, helpers: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> None:
        """Replace all helpers.

        Raises:
            ConfigurationError: If helpers is not a mapping or iterable of pairs
        """
        if isinstance(helpers, HelperCollection):
            helpers = dict(helpers.items())
        if isinstance(helpers, (str, bytes)) or not isinstance(helpers, (Mapping, Iterable)):
            raise ConfigurationError("Engine helpers must be a mapping or iterable of pairs")
        try:
            collection = HelperCollection(helpers)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                "Engine helpers must be a mapping or iterable of pairs"
            ) from e
        self._helpers = collection

    def add_helper(self, name: str, helper: Any) -> None:
        self._helpers.add(name, helper)

    def get_helper(self, name: str) -> Any:
        """Return a helper.

        Raises:
            KeyError: If no helper has that name
        """
        return self._helpers[name]

    def has_helper(self, name: str) -> bool:
        return name in self._helpers

    def remove_helper(self, name: str) -> None:
        self._helpers.remove(name)

    @property
    def logger(self) -> LoggerLike:
        return self._logger

    def set_logger(self, logger: LoggerLike) -> None:
        """Set the logger for engine and persistent cache events.

        Raises:
            ConfigurationError: If logger is not a Logger or LoggerAdapter
        """
        if not is_logger(logger):
            raise ConfigurationError(
                f"Engine logger must be a logging.Logger or logging.LoggerAdapter, "
                f"got {type(logger).__name__}"
            )
        self._logger = logger
        if getattr(self, "_owns_cache", False):
            self._cache.set_logger(logger)

    # =========================================================================
    # Loading and rendering
    # =========================================================================

    def render(self, template: str, data: Any = None) -> str:
        """Load a template by name and render it.

        With the default `StringLoader` the name is the template source.
        """
        return self.load_template(template).render(data)

    def load_template(self, name: str) -> Template:
        """Load a template through the main loader.

        Raises:
            TemplateNotFoundError: If the loader cannot find the name
            TemplateSyntaxError: If the source does not parse
        """
        source, filename = self._loader.get_source(name)
        return self._load_source(source, filename or name)

    def load_partial(self, name: str) -> Template | None:
        """Load a partial, or return None (and log a warning) if it is missing."""
        try:
            source, filename = self._partials_loader.get_source(name)
        except TemplateNotFoundError:
            log_event(self._logger, logging.WARNING, 'Partial not found: "%(name)s"', name=name)
            return None
        return self._load_source(source, filename or name)

    def load_lambda(self, source: str, delims: str | None = None) -> Template:
        """Load the template text returned by a lambda.

        Args:
            source: Lambda result
            delims: Delimiter-change tag (e.g. ``{{=<% %>=}}``) put on its own
                line before the source, so the text is parsed with the
                delimiters in effect where the lambda was called

        Lambda templates are kept in a least-recently-used cache of
        `LAMBDA_CACHE_SIZE` entries and never written to the persistent cache.
        """
        if delims is not None:
            source = delims + "\n" + source
        class_name = self.get_template_class_name(source)

        template = self._templates.get(class_name)
        if template is not None:
            return template

        with self._lock:
            template = self._lambda_templates.get(class_name)
            if template is not None:
                self._lambda_templates.move_to_end(class_name)
                return template
            template = self._compile_template(source, class_name, None, persist=False)
            self._lambda_templates[class_name] = template
            if len(self._lambda_templates) > LAMBDA_CACHE_SIZE:
                self._lambda_templates.popitem(last=False)
        return template

    def get_template_class_name(self, source: str) -> str:
        """Return the cache key for a source under this engine's configuration."""
        key = f"version:{VERSION},escape:{self._escape_mode()},charset:{self._charset},source:{source}"
        return self._template_class_prefix + hashlib.md5(key.encode("utf-8")).hexdigest()

    def _escape_mode(self) -> str:
        if not self._autoescape:
            return "none"
        return "custom" if self._escape is not None else "default"

    def clear_cache(self) -> None:
        """Drop all compiled templates held in-process."""
        with self._lock:
            self._templates.clear()
            self._lambda_templates.clear()

    def _load_source(self, source: str, name: str | None = None) -> Template:
        class_name = self.get_template_class_name(source)

        template = self._templates.get(class_name)
        if template is not None:
            return template

        with self._lock:
            # Double-check after acquiring the lock
            template = self._templates.get(class_name)
            if template is None:
                template = self._compile_template(source, class_name, name)
                self._templates[class_name] = template
        return template

    def _parse(
        self, source: str, class_name: str, name: str | None, persist: bool = True
    ) -> TemplateNode:
        from moustache.lexer import tokenize
        from moustache.parser import parse

        cache = self._cache if persist else None
        if cache is not None:
            tree = cache.load(class_name)
            if tree is not None:
                return tree
            log_event(
                self._logger,
                logging.DEBUG,
                'Template cache miss for "%(class_name)s"',
                class_name=class_name,
            )
        elif persist:
            log_event(
                self._logger,
                logging.DEBUG,
                'Template cache disabled, parsing "%(class_name)s" at runtime',
                class_name=class_name,
            )

        tree = parse(tokenize(source, name=name), name=name, source=source)
        if cache is not None:
            cache.dump(class_name, tree)
        return tree

    def _compile_template(
        self, source: str, class_name: str, name: str | None, persist: bool = True
    ) -> Template:
        from moustache.compiler import Compiler
        from moustache.template import Template

        tree = self._parse(source, class_name, name, persist)

        log_event(
            self._logger,
            logging.INFO,
            'Compiling template to "%(class_name)s"',
            class_name=class_name,
        )
        render_func = Compiler(self).compile(
            tree,
            name=name,
            source=source,
            custom_escape=self._escape is not None,
            charset=self._charset,
            autoescape=self._autoescape,
        )

        log_event(
            self._logger,
            logging.DEBUG,
            'Instantiating template: "%(class_name)s"',
            class_name=class_name,
        )
        return Template(self, render_func, class_name=class_name, name=name, source=source)

    def __repr__(self) -> str:
        return (
            f"<Engine loader={type(self._loader).__name__} "
            f"templates={len(self._templates)} helpers={len(self._helpers)}>"
        )
