"""Exceptions for the Moustache template system.

Exception Hierarchy:
TemplateError (base)
├── TemplateNotFoundError     # Template not found by loader
├── TemplateSyntaxError       # Lex/parse-time syntax error
├── TemplateRuntimeError      # Render-time error (unknown filter, bad value)
├── ConfigurationError        # Invalid Engine option
└── CacheWriteError           # Persistent cache could not be written

Unresolved names are not errors: logic-less templates render them as empty
output and treat them as falsy in sections.

Example:
    ```
    Syntax Error: Unclosed section 'items'
      --> page.mustache:3:4
       |
      3 |     {{#items}}
       |     ^
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes for Moustache errors.

    Format: M-{CATEGORY}-{NUMBER}
    Categories: LEX (lexer), PAR (parser), RUN (runtime), TPL (template
    loading), CFG (configuration)
    """

    # Lexer errors (M-LEX-xxx)
    UNCLOSED_TAG = "M-LEX-001"
    INVALID_DELIMITERS = "M-LEX-002"
    EMPTY_TAG = "M-LEX-003"

    # Parser errors (M-PAR-xxx)
    UNEXPECTED_CLOSE = "M-PAR-001"
    MISMATCHED_CLOSE = "M-PAR-002"
    UNCLOSED_SECTION = "M-PAR-003"

    # Runtime errors (M-RUN-xxx)
    UNKNOWN_FILTER = "M-RUN-001"
    UNPRINTABLE_VALUE = "M-RUN-002"
    RUNTIME_ERROR = "M-RUN-003"

    # Template loading errors (M-TPL-xxx)
    TEMPLATE_NOT_FOUND = "M-TPL-001"
    SYNTAX_ERROR = "M-TPL-002"
    CACHE_WRITE = "M-TPL-003"

    # Configuration errors (M-CFG-xxx)
    INVALID_OPTION = "M-CFG-001"

    @property
    def category(self) -> str:
        """Error category (e.g., 'runtime', 'lexer', 'parser', 'template')."""
        prefix = self.value.split("-")[1]
        return {
            "LEX": "lexer",
            "PAR": "parser",
            "RUN": "runtime",
            "TPL": "template",
            "CFG": "configuration",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source context around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
        column: Optional column offset for caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        """Format snippet in Rust-inspired diagnostic style."""
        parts: list[str] = ["   |"]
        for lineno, content in self.lines:
            marker = ">" if lineno == self.error_line else " "
            parts.append(f"{marker}{lineno:>2} | {content}")
            if lineno == self.error_line and self.column is not None:
                parts.append(f"   | {' ' * self.column}^")
        parts.append("   |")
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
    column: int | None = None,
) -> SourceSnippet:
    """Build a SourceSnippet from template source.

    Args:
        source: Full template source text.
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
        column: Optional column offset for caret pointer.

    Returns:
        SourceSnippet with surrounding context lines.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


class TemplateError(Exception):
    """Base exception for all Moustache template errors.

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as a one-header summary prefixed with its code."""
        header = str(self)
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        return header


class TemplateNotFoundError(TemplateError):
    """Template not found by any configured loader.

    Raised by `Engine.load_template(name)`. `Engine.load_partial(name)`
    catches it and logs a warning instead.
    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateSyntaxError(TemplateError):
    """Lex or parse-time syntax error in template source.

    When ``source`` and ``lineno`` are provided, the error message includes
    a source snippet with the offending line.  If ``col_offset`` is also
    given, a caret (``^``) points at the exact column.
    """

    code: ErrorCode | None = ErrorCode.SYNTAX_ERROR

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        source: str | None = None,
        col_offset: int | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.lineno = lineno
        self.name = name
        self.source = source
        self.col_offset = col_offset
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        location = self.name or "<template>"
        if self.lineno:
            location += f":{self.lineno}"
            if self.col_offset is not None:
                location += f":{self.col_offset}"

        header = f"Syntax Error: {self.message}\n  --> {location}"

        if self.source and self.lineno:
            lines = self.source.splitlines()
            if 0 < self.lineno <= len(lines):
                error_line = lines[self.lineno - 1]
                snippet = f"\n   |\n{self.lineno:>3} | {error_line}"
                if self.col_offset is not None:
                    snippet += f"\n   | {' ' * self.col_offset}^"
                return header + snippet

        return header


class TemplateRuntimeError(TemplateError):
    """Render-time error with debugging context.

    Output Format:
            ```
            Runtime Error: Unknown filter 'shout'
              Location: <template>:1
              Expression: {{ name | shout }}
              Suggestion: Add a callable named 'shout' to the data or the helpers
            ```

    Attributes:
        message: Error description
        expression: Template tag that failed
        values: Dict of names → values for context
        template_name: Name of the template
        lineno: Line number in template source
        suggestion: Actionable fix suggestion
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        values: dict[str, Any] | None = None,
        template_name: str | None = None,
        lineno: int | None = None,
        suggestion: str | None = None,
        source_snippet: SourceSnippet | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.expression = expression
        self.values = values or {}
        self.template_name = template_name
        self.lineno = lineno
        self.suggestion = suggestion
        self.source_snippet = source_snippet
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self.message}"]

        if self.template_name or self.lineno:
            loc = self.template_name or "<template>"
            if self.lineno:
                loc += f":{self.lineno}"
            parts.append(f"  Location: {loc}")

        if self.source_snippet:
            parts.append(self.source_snippet.format())

        if self.expression:
            parts.append(f"  Expression: {self.expression}")

        if self.values:
            parts.append("  Values:")
            for name, value in self.values.items():
                type_name = type(value).__name__
                value_repr = repr(value)
                if len(value_repr) > 80:
                    value_repr = value_repr[:77] + "..."
                parts.append(f"    {name} = {value_repr} ({type_name})")

        if self.suggestion:
            parts.append(f"\n  Suggestion: {self.suggestion}")

        return "\n".join(parts)


class ConfigurationError(TemplateError, ValueError):
    """An Engine option has the wrong type or cannot be applied.

    Raised at setup time, never during render:
        - ``escape`` is not callable
        - ``helpers`` is not a mapping or iterable of pairs
        - ``logger`` is not a ``logging.Logger`` / ``logging.LoggerAdapter``
        - ``partials`` given for a loader that cannot store templates
    """

    code: ErrorCode | None = ErrorCode.INVALID_OPTION


class CacheWriteError(TemplateError, OSError):
    """The persistent template cache could not be written.

    Once a cache location is configured, caching is expected to work: a
    failure to create the directory or persist a file aborts the render
    instead of silently falling back to uncached compilation.
    """

    code: ErrorCode | None = ErrorCode.CACHE_WRITE

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)
