"""Token types for the Moustache lexer.

The lexer produces a flat list of `Token` objects. Each token remembers the
delimiters that were active when it was scanned, so that lambdas and error
messages can reproduce the exact lexical scope of a tag.

Sigils:
    ```
    {{name}}        VARIABLE
    {{{name}}}      UNESCAPED
    {{&name}}       UNESCAPED
    {{#name}}       SECTION
    {{^name}}       INVERTED
    {{/name}}       CLOSE
    {{>name}}       PARTIAL
    {{!text}}       COMMENT
    {{=<% %>=}}     DELIMITER
    {{%NAME}}       PRAGMA
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    """Kind of a scanned token."""

    TEXT = "text"
    VARIABLE = "variable"
    UNESCAPED = "unescaped"
    SECTION = "section"
    INVERTED = "inverted"
    CLOSE = "close"
    PARTIAL = "partial"
    COMMENT = "comment"
    DELIMITER = "delimiter"
    PRAGMA = "pragma"

    @property
    def is_interpolation(self) -> bool:
        """Interpolation tags are never standalone."""
        return self in (TokenType.VARIABLE, TokenType.UNESCAPED)


# Sigil character → token type. Bare tags are VARIABLE, '{' is handled by
# the lexer because its closing delimiter differs.
SIGILS: dict[str, TokenType] = {
    "#": TokenType.SECTION,
    "^": TokenType.INVERTED,
    "/": TokenType.CLOSE,
    ">": TokenType.PARTIAL,
    "!": TokenType.COMMENT,
    "&": TokenType.UNESCAPED,
    "=": TokenType.DELIMITER,
    "%": TokenType.PRAGMA,
}


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token.

    Attributes:
        type: Token kind
        value: Trimmed tag content, or literal text for TEXT tokens
        lineno: 1-based line of the token start
        col_offset: 0-based column of the token start
        index: Source offset of the opening delimiter (or text start)
        end: Source offset just past the closing delimiter (or text end)
        otag: Opening delimiter in effect when the token was scanned
        ctag: Closing delimiter in effect when the token was scanned
        indent: Whitespace removed in front of a standalone partial tag
    """

    type: TokenType
    value: str
    lineno: int
    col_offset: int
    index: int
    end: int
    otag: str = "{{"
    ctag: str = "}}"
    indent: str = ""

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.lineno}:{self.col_offset})"
