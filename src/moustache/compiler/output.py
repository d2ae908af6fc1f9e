"""Output compilation for the Moustache compiler.

Provides the mixin for text, interpolation and no-output marker nodes, plus
the name lookup shared with sections (including FILTERS pragma chains).

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from moustache.context import Context, is_lambda
from moustache.environment.exceptions import (
    ErrorCode,
    TemplateRuntimeError,
    build_source_snippet,
)
from moustache.template.helpers import LambdaHelper, call_lambda, delimiter_tag, to_str

if TYPE_CHECKING:
    from moustache.environment import Engine
    from moustache.nodes import Node, Text, Variable

RenderFn = Callable[[Context, Callable[[str], None]], None]


class OutputCompilationMixin:
    """Mixin for compiling output nodes.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    if TYPE_CHECKING:
        _name: str | None
        _escape: Callable[[str], str] | None

        def _engine(self) -> Engine: ...

    def _compile_text(self, node: Text) -> RenderFn | None:
        """Compile literal text: append("literal text")"""
        value = node.value
        if not value:
            return None

        def render_text(ctx: Context, append: Callable[[str], None]) -> None:
            append(value)

        return render_text

    def _compile_variable(self, node: Variable) -> RenderFn:
        """Compile {{name}} / {{{name}}} / {{&name}}.

        Lambda values are called with the tag name, their result is rendered
        as a template with the tag's delimiters, then escaped like any other
        value.
        """
        lookup = self._compile_lookup(node.name, node.filters, node)
        escape = self._escape if node.escape else None
        delims = delimiter_tag(node.otag, node.ctag)
        name = node.name
        template_name = self._name
        expression = f"{node.otag}{name}{node.ctag}"
        engine = self._engine

        def render_variable(ctx: Context, append: Callable[[str], None]) -> None:
            value = lookup(ctx)
            if is_lambda(value):
                _engine = engine()
                result = call_lambda(value, name, LambdaHelper(_engine, ctx, delims))
                value = _engine.load_lambda(to_str(result), delims).render_internal(ctx)
            text = to_str(
                value,
                expression=expression,
                template_name=template_name,
                lineno=node.lineno,
            )
            if escape is not None and text:
                text = escape(text)
            append(text)

        return render_variable

    def _compile_marker(self, node: Node) -> None:
        """Comments, pragmas and delimiter changes produce no output."""
        return None

    def _compile_lookup(
        self, name: str, filters: Sequence[str], node: Node
    ) -> Callable[[Context], Any]:
        """Build ``lookup(ctx) -> value`` for a tag name and its filter chain."""
        if not filters:

            def lookup(ctx: Context) -> Any:
                return ctx.find(name)

            return lookup

        template_name = self._name
        source = self._source

        def lookup_filtered(ctx: Context) -> Any:
            value = ctx.find(name)
            for filter_name in filters:
                func = ctx.find(filter_name)
                if not is_lambda(func):
                    raise TemplateRuntimeError(
                        f"Unknown filter '{filter_name}'",
                        expression=f"{name} | {' | '.join(filters)}",
                        template_name=template_name,
                        lineno=node.lineno,
                        suggestion=(
                            f"Add a callable named '{filter_name}' to the data or the helpers"
                        ),
                        source_snippet=(
                            build_source_snippet(source, node.lineno, column=node.col_offset)
                            if source
                            else None
                        ),
                        code=ErrorCode.UNKNOWN_FILTER,
                    )
                value = func(value)
            return value

        return lookup_filtered
