"""HTML escaping for interpolation tags.

Single-pass escaping via ``str.translate()``. Matches the HTML entity set
used for double-quoted attributes and text nodes: ``& < > "``. Apostrophes
are left alone.

When the configured charset cannot represent a character, it is emitted as
a numeric character reference so the output can always be encoded.
"""

from __future__ import annotations

import codecs

_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
    }
)

_UNICODE_CHARSETS = frozenset({"utf-8", "utf-16", "utf-32"})


def normalize_charset(charset: str) -> str:
    """Return the canonical codec name for a charset.

    Raises:
        LookupError: If Python has no codec for the charset
    """
    return codecs.lookup(charset).name


def html_escape(value: str, charset: str = "UTF-8") -> str:
    """Escape text for HTML output.

    Example:
        >>> html_escape('<a href="x">Tom & Jerry</a>')
        '&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&lt;/a&gt;'
        >>> html_escape("café", "ascii")
        'caf&#233;'
    """
    escaped = value.translate(_ESCAPE_TABLE)
    codec = normalize_charset(charset)
    if codec in _UNICODE_CHARSETS or escaped.isascii():
        return escaped
    return escaped.encode(codec, "xmlcharrefreplace").decode(codec)
