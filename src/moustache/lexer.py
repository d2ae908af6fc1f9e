"""Moustache lexer — template source to token list.

Single pass over the source driven by a three-state machine:

    ```
    TEXT ──otag──▶ TAG ──ctag──▶ STANDALONE ──▶ TEXT
      │                                          ▲
      └──────────────── end of input ────────────┘
    ```

- **TEXT**: find the next opening delimiter; everything before it is pending
  text.
- **TAG**: read the sigil and content up to the closing delimiter.
- **STANDALONE**: look behind to the start of the line and ahead to its end.
  A non-interpolation tag that is alone on its line (whitespace aside) takes
  the whole line with it, newline included.

Delimiter changes (``{{=<% %>=}}``) are lexical: they switch the delimiters
for the rest of the scan, regardless of section nesting.

Example:
    >>> [t.type.name for t in tokenize("Hi {{#people}}{{name}}{{/people}}")]
    ['TEXT', 'SECTION', 'VARIABLE', 'CLOSE']

"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import replace
from enum import Enum, auto

from moustache._types import SIGILS, Token, TokenType
from moustache.environment.exceptions import ErrorCode, TemplateSyntaxError

DEFAULT_OTAG = "{{"
DEFAULT_CTAG = "}}"

_INLINE_WHITESPACE = " \t"


class LexerState(Enum):
    """States of the tag-scanning machine."""

    TEXT = auto()
    TAG = auto()
    STANDALONE = auto()


class Lexer:
    """Tokenize Moustache template source.

    A Lexer instance is single-use: create one per source string.

    Attributes:
        _source: Template source being scanned
        _name: Template name for error messages
        _otag, _ctag: Delimiters currently in effect
        _pos: Current scan offset
        _text_start: Start offset of pending (not yet emitted) text
        _tag: Tag token waiting for the standalone check
    """

    __slots__ = (
        "_ctag",
        "_handlers",
        "_name",
        "_newlines",
        "_otag",
        "_pos",
        "_source",
        "_tag",
        "_tag_start",
        "_text_start",
        "_tokens",
    )

    def __init__(
        self,
        source: str,
        *,
        name: str | None = None,
        otag: str = DEFAULT_OTAG,
        ctag: str = DEFAULT_CTAG,
    ):
        self._source = source
        self._name = name
        self._otag = otag
        self._ctag = ctag
        self._pos = 0
        self._text_start = 0
        self._tag_start = 0
        self._tag: Token | None = None
        self._tokens: list[Token] = []
        self._newlines = [i for i, ch in enumerate(source) if ch == "\n"]
        self._handlers = {
            LexerState.TEXT: self._scan_text,
            LexerState.TAG: self._scan_tag,
            LexerState.STANDALONE: self._check_standalone,
        }

    def tokenize(self) -> list[Token]:
        """Scan the whole source and return its tokens."""
        state: LexerState | None = LexerState.TEXT
        while state is not None:
            state = self._handlers[state]()
        return self._tokens

    # ─────────────────────────────────────────────────────────────────────────
    # States
    # ─────────────────────────────────────────────────────────────────────────

    def _scan_text(self) -> LexerState | None:
        found = self._source.find(self._otag, self._pos)
        if found == -1:
            self._emit_text(self._text_start, len(self._source))
            return None
        self._tag_start = found
        self._pos = found + len(self._otag)
        return LexerState.TAG

    def _scan_tag(self) -> LexerState:
        source = self._source
        start = self._pos
        sigil = source[start : start + 1]

        if sigil == "{":
            token_type = TokenType.UNESCAPED
            closer = "}" + self._ctag
            start += 1
        elif sigil == "=":
            token_type = TokenType.DELIMITER
            closer = "=" + self._ctag
            start += 1
        elif sigil in SIGILS:
            token_type = SIGILS[sigil]
            closer = self._ctag
            start += 1
        else:
            token_type = TokenType.VARIABLE
            closer = self._ctag

        close_at = source.find(closer, start)
        if close_at == -1:
            raise self._error(
                f"Unclosed tag: expected {closer!r}",
                self._tag_start,
                ErrorCode.UNCLOSED_TAG,
            )

        value = source[start:close_at].strip()
        if not value and token_type not in (TokenType.COMMENT, TokenType.DELIMITER):
            raise self._error("Empty tag", self._tag_start, ErrorCode.EMPTY_TAG)

        lineno, col = self._location(self._tag_start)
        self._tag = Token(
            type=token_type,
            value=value,
            lineno=lineno,
            col_offset=col,
            index=self._tag_start,
            end=close_at + len(closer),
            otag=self._otag,
            ctag=self._ctag,
        )
        self._pos = self._tag.end
        return LexerState.STANDALONE

    def _check_standalone(self) -> LexerState:
        tag = self._tag
        assert tag is not None
        source = self._source
        text_end = tag.index

        if not tag.type.is_interpolation:
            line_start = self._line_start(tag.index)
            leading = source[line_start : tag.index]
            line_end = self._standalone_line_end(tag.end)
            if (
                line_start >= self._text_start
                and line_end is not None
                and not leading.strip(_INLINE_WHITESPACE)
            ):
                text_end = line_start
                self._pos = line_end
                if tag.type is TokenType.PARTIAL:
                    tag = replace(tag, indent=leading)

        self._emit_text(self._text_start, text_end)
        self._tokens.append(tag)
        self._text_start = self._pos
        self._tag = None

        if tag.type is TokenType.DELIMITER:
            self._otag, self._ctag = self._parse_delimiters(tag)
        return LexerState.TEXT

    # ─────────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────────

    def _standalone_line_end(self, pos: int) -> int | None:
        """Offset just past the line ending at/after pos, if only whitespace precedes it."""
        source = self._source
        while pos < len(source) and source[pos] in _INLINE_WHITESPACE:
            pos += 1
        if pos == len(source):
            return pos
        if source.startswith("\r\n", pos):
            return pos + 2
        if source[pos] == "\n":
            return pos + 1
        return None

    def _parse_delimiters(self, tag: Token) -> tuple[str, str]:
        parts = tag.value.split()
        if len(parts) != 2 or any("=" in part for part in parts):
            raise self._error(
                f"Invalid delimiter change {tag.value!r}: expected two delimiters "
                f"like {{{{=<% %>=}}}}",
                tag.index,
                ErrorCode.INVALID_DELIMITERS,
            )
        return parts[0], parts[1]

    def _emit_text(self, start: int, end: int) -> None:
        if start >= end:
            return
        lineno, col = self._location(start)
        self._tokens.append(
            Token(
                type=TokenType.TEXT,
                value=self._source[start:end],
                lineno=lineno,
                col_offset=col,
                index=start,
                end=end,
                otag=self._otag,
                ctag=self._ctag,
            )
        )

    def _line_start(self, offset: int) -> int:
        return self._source.rfind("\n", 0, offset) + 1

    def _location(self, offset: int) -> tuple[int, int]:
        """Return (1-based line, 0-based column) of a source offset."""
        lineno = bisect_left(self._newlines, offset) + 1
        return lineno, offset - self._line_start(offset)

    def _error(self, message: str, offset: int, code: ErrorCode) -> TemplateSyntaxError:
        lineno, col = self._location(offset)
        return TemplateSyntaxError(
            message,
            lineno=lineno,
            name=self._name,
            source=self._source,
            col_offset=col,
            code=code,
        )


def tokenize(
    source: str,
    *,
    name: str | None = None,
    otag: str = DEFAULT_OTAG,
    ctag: str = DEFAULT_CTAG,
) -> list[Token]:
    """Tokenize template source.

    Args:
        source: Template source text
        name: Template name for error messages
        otag: Initial opening delimiter
        ctag: Initial closing delimiter

    Returns:
        Tokens in source order

    Raises:
        TemplateSyntaxError: On an unclosed tag, empty tag or malformed
            delimiter change
    """
    return Lexer(source, name=name, otag=otag, ctag=ctag).tokenize()
