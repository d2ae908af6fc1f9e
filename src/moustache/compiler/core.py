"""Moustache Compiler Core — main Compiler class.

The Compiler turns a parsed node tree into a tree of render closures. No
source code is generated or evaluated: each node becomes a Python closure
``fn(ctx, append)`` that writes its output through ``append``.

Design Principles:
1. **Closure tree**: one closure per output-producing node, built once
2. **StringBuilder**: output via ``buf.append()``, joined once at the end
3. **Compile-time binding**: escape function, raw section source and
   delimiter tags are resolved while compiling, not per render
4. **O(1) dispatch**: dict-based node type → handler lookup

Generated shape:
    ```python
    def render(ctx):
        buf = []
        body(ctx, buf.append)    # Text, Variable, Section, Partial closures
        return "".join(buf)
    ```

"""

from __future__ import annotations

import weakref
from collections.abc import Callable, Sequence
from functools import partial
from typing import TYPE_CHECKING

from moustache.compiler.output import OutputCompilationMixin
from moustache.compiler.sections import SectionCompilationMixin
from moustache.utils.html import html_escape

if TYPE_CHECKING:
    from moustache.compiler.output import RenderFn
    from moustache.context import Context
    from moustache.environment import Engine
    from moustache.nodes import Node
    from moustache.nodes import Template as TemplateNode


class Compiler(OutputCompilationMixin, SectionCompilationMixin):
    """Compile a Moustache node tree into a render function.

    Attributes:
        _engine_ref: Weak reference to the owning Engine (partials, lambdas)
        _name: Template name for error messages
        _source: Template source, sliced for section lambdas
        _escape: Escape function for escaped interpolation, or None
        _node_dispatch: Node type name → compile handler

    Example:
            >>> from moustache import Engine
            >>> from moustache.compiler import Compiler
            >>> from moustache.context import Context
            >>> from moustache.lexer import tokenize
            >>> from moustache.parser import parse
            >>>
            >>> source = "Hello, {{name}}!"
            >>> render = Compiler(Engine()).compile(parse(tokenize(source)), source=source)
            >>> render(Context([{"name": "World"}]))
            'Hello, World!'

    """

    __slots__ = ("_engine_ref", "_escape", "_name", "_node_dispatch", "_source")

    def __init__(self, engine: Engine):
        self._engine_ref: weakref.ref[Engine] = weakref.ref(engine)
        self._name: str | None = None
        self._source = ""
        self._escape: Callable[[str], str] | None = None
        self._node_dispatch: dict[str, Callable[[Node], RenderFn | None]] = {
            "Text": self._compile_text,
            "Variable": self._compile_variable,
            "Section": self._compile_section,
            "Partial": self._compile_partial,
            "Comment": self._compile_marker,
            "SetDelimiter": self._compile_marker,
            "Pragma": self._compile_marker,
        }

    def compile(
        self,
        node: TemplateNode,
        *,
        name: str | None = None,
        source: str = "",
        custom_escape: bool = False,
        charset: str = "UTF-8",
        autoescape: bool = True,
    ) -> Callable[[Context], str]:
        """Compile a template tree to a render function.

        Args:
            node: Root Template node
            name: Template name for error messages
            source: Template source the tree was parsed from
            custom_escape: Use the engine's escape callback instead of
                HTML escaping
            charset: Charset for the default HTML escaping
            autoescape: When False, escaped interpolation is emitted raw

        Returns:
            ``render(ctx) -> str``
        """
        self._name = name
        self._source = source
        self._escape = self._select_escape(custom_escape, charset, autoescape)

        body = self._compile_body(node.body)

        def render(ctx: Context) -> str:
            buf: list[str] = []
            body(ctx, buf.append)
            return "".join(buf)

        return render

    def _select_escape(
        self, custom_escape: bool, charset: str, autoescape: bool
    ) -> Callable[[str], str] | None:
        if not autoescape:
            return None
        if custom_escape:
            return self._engine().escape
        return partial(html_escape, charset=charset)

    def _compile_body(self, nodes: Sequence[Node]) -> RenderFn:
        """Compile a node list into a single closure."""
        renderers = tuple(
            fn for fn in (self._node_dispatch[type(n).__name__](n) for n in nodes) if fn
        )

        if len(renderers) == 1:
            return renderers[0]

        def render_body(ctx: Context, append: Callable[[str], None]) -> None:
            for fn in renderers:
                fn(ctx, append)

        return render_body

    def _engine(self) -> Engine:
        engine = self._engine_ref()
        if engine is None:
            raise RuntimeError(
                f"Engine has been garbage collected while rendering '{self._name or '<template>'}'"
            )
        return engine
