"""Parser core — builds the node tree from lexer tokens.

The parser keeps an explicit stack of open sections. Each open section saves
the child list it belongs to and starts a fresh one; the matching close tag
pops the stack, wraps the collected children in a `Section` node and appends
it to the saved parent list.

Section matching:
    ```
    {{#a}}{{#b}}{{/b}}{{/a}}   ok
    {{#a}}{{/b}}               TemplateSyntaxError (mismatched close)
    {{/a}}                     TemplateSyntaxError (unexpected close)
    {{#a}}                     TemplateSyntaxError (unclosed section)
    ```

"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from moustache._types import Token, TokenType
from moustache.environment.exceptions import ErrorCode, TemplateSyntaxError
from moustache.nodes import (
    Comment,
    Node,
    Partial,
    Pragma,
    Section,
    SetDelimiter,
    Template,
    Text,
    Variable,
)

PRAGMA_FILTERS = "FILTERS"


class Parser:
    """Parse a token list into an immutable `Template` tree.

    Attributes:
        _tokens: Tokens from the lexer
        _name: Template name for error messages
        _source: Template source for error snippets
        _pragmas: Pragmas seen so far
    """

    __slots__ = ("_leaf_dispatch", "_name", "_pragmas", "_source", "_tokens")

    def __init__(
        self,
        tokens: Sequence[Token],
        name: str | None = None,
        source: str | None = None,
    ):
        self._tokens = tokens
        self._name = name
        self._source = source
        self._pragmas: set[str] = set()
        self._leaf_dispatch: dict[TokenType, Callable[[Token], Node]] = {
            TokenType.TEXT: self._parse_text,
            TokenType.VARIABLE: self._parse_variable,
            TokenType.UNESCAPED: self._parse_variable,
            TokenType.PARTIAL: self._parse_partial,
            TokenType.COMMENT: self._parse_comment,
            TokenType.DELIMITER: self._parse_delimiter,
            TokenType.PRAGMA: self._parse_pragma,
        }

    def parse(self) -> Template:
        """Parse all tokens.

        Raises:
            TemplateSyntaxError: On unmatched or mismatched section tags
        """
        body: list[Node] = []
        # (opener, name, filters, FILTERS active at the opener, parent body)
        stack: list[tuple[Token, str, tuple[str, ...], bool, list[Node]]] = []

        for token in self._tokens:
            if token.type in (TokenType.SECTION, TokenType.INVERTED):
                name, filters = self._split_filters(token)
                active = PRAGMA_FILTERS in self._pragmas
                stack.append((token, name, filters, active, body))
                body = []
            elif token.type is TokenType.CLOSE:
                if not stack:
                    raise self._error(
                        f"Unexpected closing tag '{token.value}'",
                        token,
                        ErrorCode.UNEXPECTED_CLOSE,
                    )
                opener, name, filters, active, parent = stack.pop()
                parent.append(self._build_section(opener, name, filters, active, token, body))
                body = parent
            else:
                body.append(self._leaf_dispatch[token.type](token))

        if stack:
            opener = stack[-1][0]
            raise self._error(
                f"Unclosed section '{opener.value}'",
                opener,
                ErrorCode.UNCLOSED_SECTION,
            )

        return Template(
            lineno=1,
            col_offset=0,
            body=tuple(body),
            pragmas=frozenset(self._pragmas),
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Node builders
    # ─────────────────────────────────────────────────────────────────────────

    def _build_section(
        self,
        opener: Token,
        name: str,
        filters: tuple[str, ...],
        filters_active: bool,
        closer: Token,
        body: list[Node],
    ) -> Section:
        close_name, _ = self._split_filters(closer, filters_active)
        if close_name != name:
            raise self._error(
                f"Mismatched closing tag: expected '{{{{/{name}}}}}', got '{{{{/{close_name}}}}}'",
                closer,
                ErrorCode.MISMATCHED_CLOSE,
            )
        return Section(
            lineno=opener.lineno,
            col_offset=opener.col_offset,
            name=name,
            body=tuple(body),
            inverted=opener.type is TokenType.INVERTED,
            filters=filters,
            start=opener.end,
            end=closer.index,
            otag=opener.otag,
            ctag=opener.ctag,
        )

    def _parse_text(self, token: Token) -> Text:
        return Text(lineno=token.lineno, col_offset=token.col_offset, value=token.value)

    def _parse_variable(self, token: Token) -> Variable:
        name, filters = self._split_filters(token)
        return Variable(
            lineno=token.lineno,
            col_offset=token.col_offset,
            name=name,
            escape=token.type is TokenType.VARIABLE,
            filters=filters,
            otag=token.otag,
            ctag=token.ctag,
        )

    def _parse_partial(self, token: Token) -> Partial:
        return Partial(
            lineno=token.lineno,
            col_offset=token.col_offset,
            name=token.value,
            indent=token.indent,
        )

    def _parse_comment(self, token: Token) -> Comment:
        return Comment(lineno=token.lineno, col_offset=token.col_offset, value=token.value)

    def _parse_delimiter(self, token: Token) -> SetDelimiter:
        otag, ctag = token.value.split()
        return SetDelimiter(
            lineno=token.lineno,
            col_offset=token.col_offset,
            otag=otag,
            ctag=ctag,
        )

    def _parse_pragma(self, token: Token) -> Pragma:
        self._pragmas.add(token.value)
        return Pragma(lineno=token.lineno, col_offset=token.col_offset, name=token.value)

    # ─────────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────────

    def _split_filters(
        self, token: Token, active: bool | None = None
    ) -> tuple[str, tuple[str, ...]]:
        """Split ``name | f1 | f2`` once the FILTERS pragma is active.

        ``active`` overrides the current pragma state; a closing tag is split
        the way its opening tag was.
        """
        if active is None:
            active = PRAGMA_FILTERS in self._pragmas
        if not active or "|" not in token.value:
            return token.value, ()
        name, *filters = (part.strip() for part in token.value.split("|"))
        if not name or not all(filters):
            raise self._error(
                f"Empty name or filter in '{token.value}'",
                token,
                ErrorCode.EMPTY_TAG,
            )
        return name, tuple(filters)

    def _error(self, message: str, token: Token, code: ErrorCode) -> TemplateSyntaxError:
        return TemplateSyntaxError(
            message,
            lineno=token.lineno,
            name=self._name,
            source=self._source,
            col_offset=token.col_offset,
            code=code,
        )


def parse(
    tokens: Sequence[Token],
    name: str | None = None,
    source: str | None = None,
) -> Template:
    """Parse tokens into a `Template` tree."""
    return Parser(tokens, name=name, source=source).parse()
