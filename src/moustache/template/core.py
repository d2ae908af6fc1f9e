"""Moustache Template — compiled template object ready for rendering.

The Template class wraps a compiled render closure and provides the
``render()`` API. Templates are immutable and thread-safe for concurrent
rendering: each call builds its own `Context`.

Architecture:
    ```
    Template
    ├── _engine_ref: WeakRef[Engine]    # Prevents circular refs
    ├── _render_func: callable           # Context -> str closure tree
    ├── _class_name                      # Cache key
    └── _name, _source                   # For error messages and lambdas
    ```

Memory Safety:
Uses ``weakref.ref(engine)`` to break the cycle
``Template → Engine → template cache → Template``.

"""

from __future__ import annotations

import weakref
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from moustache.context import Context
from moustache.template.helpers import indent_lines

if TYPE_CHECKING:
    from moustache.environment import Engine


class Template:
    """Compiled template ready for rendering.

    Attributes:
        name: Template identifier (for error messages)
        class_name: Cache key derived from source and engine configuration
        source: Template source text

    Example:
            >>> from moustache import Engine
            >>> engine = Engine()
            >>> t = engine.load_template("Hello, {{ name }}!")
            >>> t.render({"name": "World"})
            'Hello, World!'
            >>> t.render(name="World")
            'Hello, World!'

    """

    __slots__ = ("_class_name", "_engine_ref", "_name", "_render_func", "_source")

    def __init__(
        self,
        engine: Engine,
        render_func: Callable[[Context], str],
        *,
        class_name: str,
        name: str | None = None,
        source: str = "",
    ):
        self._engine_ref: weakref.ref[Engine] = weakref.ref(engine)
        self._render_func = render_func
        self._class_name = class_name
        self._name = name
        self._source = source

    @property
    def name(self) -> str | None:
        """Template name."""
        return self._name

    @property
    def class_name(self) -> str:
        """Cache key of this template."""
        return self._class_name

    @property
    def source(self) -> str:
        """Template source."""
        return self._source

    def render(self, data: Any = None, /, **kwargs: Any) -> str:
        """Render template with the given data.

        The engine's helpers form the bottom frame, then ``data``, then any
        keyword arguments, so keywords shadow data and data shadows helpers.

        Args:
            data: Mapping or object used as the root context frame
            **kwargs: Extra variables pushed above ``data``

        Returns:
            Rendered template as string
        """
        context = Context()
        engine = self._engine_ref()
        if engine is not None and engine.helpers:
            context.push(engine.helpers.snapshot())
        if data is not None:
            context.push(data)
        if kwargs:
            context.push(kwargs)
        return self._render_func(context)

    def render_internal(self, context: Context, indent: str = "") -> str:
        """Render against an existing context (partials and lambdas).

        Args:
            context: The caller's context stack
            indent: Prefix applied to every output line
        """
        return indent_lines(self._render_func(context), indent)

    def __repr__(self) -> str:
        return f"<Template {self._name or self._class_name}>"
