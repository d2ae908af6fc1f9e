"""Section and partial compilation for the Moustache compiler.

Section semantics:
    ```
    value is a lambda      → call with raw inner source, render the result
    value is falsy         → nothing (inverted: body once, no push)
    value is a sequence    → body once per element, element pushed
    any other truthy value → body once, value pushed
    ```

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from moustache.context import Context, is_lambda, is_sequence
from moustache.template.helpers import LambdaHelper, call_lambda, delimiter_tag, to_str

if TYPE_CHECKING:
    from moustache.compiler.output import RenderFn
    from moustache.environment import Engine
    from moustache.nodes import Node, Partial, Section


class SectionCompilationMixin:
    """Mixin for compiling sections, inverted sections and partials.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.

    """

    if TYPE_CHECKING:
        _source: str

        def _engine(self) -> Engine: ...

        def _compile_body(self, nodes: Sequence[Node]) -> RenderFn: ...

        def _compile_lookup(
            self, name: str, filters: Sequence[str], node: Node
        ) -> Callable[[Context], Any]: ...

    def _compile_section(self, node: Section) -> RenderFn:
        """Compile {{#name}}...{{/name}} and {{^name}}...{{/name}}."""
        body = self._compile_body(node.body)
        lookup = self._compile_lookup(node.name, node.filters, node)

        if node.inverted:

            def render_inverted(ctx: Context, append: Callable[[str], None]) -> None:
                if not Context.is_truthy(lookup(ctx)):
                    body(ctx, append)

            return render_inverted

        raw = self._source[node.start : node.end]
        delims = delimiter_tag(node.otag, node.ctag)
        engine = self._engine

        def render_section(ctx: Context, append: Callable[[str], None]) -> None:
            value = lookup(ctx)

            if is_lambda(value):
                _engine = engine()
                result = call_lambda(value, raw, LambdaHelper(_engine, ctx, delims))
                append(_engine.load_lambda(to_str(result), delims).render_internal(ctx))
                return

            if not Context.is_truthy(value):
                return

            items = value if is_sequence(value) else (value,)
            for item in items:
                ctx.push(item)
                try:
                    body(ctx, append)
                finally:
                    ctx.pop()

        return render_section

    def _compile_partial(self, node: Partial) -> RenderFn:
        """Compile {{>name}}.

        Missing partials render nothing; the engine logs a warning.
        """
        name = node.name
        indent = node.indent
        engine = self._engine

        def render_partial(ctx: Context, append: Callable[[str], None]) -> None:
            partial = engine().load_partial(name)
            if partial is not None:
                append(partial.render_internal(ctx, indent))

        return render_partial
