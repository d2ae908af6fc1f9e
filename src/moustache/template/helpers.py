"""Runtime helpers called by compiled templates.

Pure functions, plus the `LambdaHelper` handed to lambdas so they can render
text against the context they were called from.

Thread-Safety:
All functions are stateless and safe for concurrent use.

"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from moustache.context import MISSING, is_sequence
from moustache.environment.exceptions import ErrorCode, TemplateRuntimeError
from moustache.lexer import DEFAULT_CTAG, DEFAULT_OTAG

if TYPE_CHECKING:
    from moustache.context import Context
    from moustache.environment import Engine


def to_str(
    value: Any,
    *,
    expression: str | None = None,
    template_name: str | None = None,
    lineno: int | None = None,
) -> str:
    """Convert a context value to output text.

    ``None`` and MISSING render as the empty string, booleans as
    ``"true"``/``"false"``, everything else through ``str()``.

    Raises:
        TemplateRuntimeError: For mappings and sequences, which have no
            meaningful textual form
    """
    if value is None or value is MISSING:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Mapping) or is_sequence(value):
        raise TemplateRuntimeError(
            f"Cannot interpolate a {type(value).__name__}",
            expression=expression,
            values={"value": value},
            template_name=template_name,
            lineno=lineno,
            suggestion="Iterate it with a section, or interpolate one of its members",
            code=ErrorCode.UNPRINTABLE_VALUE,
        )
    return str(value)


def call_lambda(func: Callable[..., Any], *args: Any) -> Any:
    """Call a lambda with as many leading positional args as it accepts.

    Section lambdas get ``(text, helper)``, interpolation lambdas
    ``(name, helper)``; a zero-argument lambda gets neither.
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return func(*args)

    accepted = 0
    for param in signature.parameters.values():
        if param.kind is param.VAR_POSITIONAL:
            return func(*args)
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            accepted += 1
    return func(*args[:accepted])


def delimiter_tag(otag: str, ctag: str) -> str | None:
    """Return the delimiter-change tag for non-default delimiters."""
    if otag == DEFAULT_OTAG and ctag == DEFAULT_CTAG:
        return None
    return f"{DEFAULT_OTAG}={otag} {ctag}={DEFAULT_CTAG}"


def indent_lines(text: str, indent: str) -> str:
    r"""Prefix every line of text with indent.

    Lines end at ``\n`` only; other characters ``str.splitlines`` treats as
    line breaks (form feed, ``\u2028``, ...) stay inside the line.
    """
    if not indent or not text:
        return text
    lines = text.split("\n")
    last = lines.pop()
    indented = [indent + line for line in lines]
    indented.append(indent + last if last else last)
    return "\n".join(indented)


class LambdaHelper:
    """Render text against the context a lambda was called from.

    Passed as the second argument to lambdas that accept one:

        >>> def bold(text, helper):
        ...     return "<b>" + helper.render(text) + "</b>"
        >>> engine.render("{{#bold}}Hi {{name}}{{/bold}}", {"bold": bold, "name": "Ada"})
        '<b>Hi Ada</b>'

    """

    __slots__ = ("_context", "_delims", "_engine")

    def __init__(self, engine: Engine, context: Context, delims: str | None = None):
        self._engine = engine
        self._context = context
        self._delims = delims

    def render(self, text: Any) -> str:
        """Render text as a template with the current context."""
        template = self._engine.load_lambda(to_str(text), self._delims)
        return template.render_internal(self._context)

    def __repr__(self) -> str:
        return f"<LambdaHelper {self._context!r}>"
