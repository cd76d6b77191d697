"""
Catalog codec for PHP-style array literals.

Converts between nested ordered mappings and the bracketed literal format
used both inside translation blocks and for the per-language catalog files:

    <?php

    return [
        'sfc.auth.login.title' => 'Login',
        'nested' => [
            'key' => 'value'
        ]
    ];

Decoding is a small recursive-descent parser over the literal grammar
(quoted key, ``=>``, quoted string or nested literal, comma separated,
trailing comma tolerated). Encoding always regenerates the literal from
scratch, so comments and original formatting do not survive a round-trip.
"""

import logging
from collections.abc import Mapping
from typing import TypeAlias

from ..utils.core.exceptions import ParseError

logger = logging.getLogger(__name__)

CatalogValue: TypeAlias = "str | dict[str, CatalogValue]"
Catalog: TypeAlias = dict[str, CatalogValue]

DEFAULT_INDENT = "    "
DEFAULT_HEADER = "<?php"

_DOUBLE_QUOTE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "$": "$",
    '"': '"',
    "\\": "\\",
}

_CLOSERS = {"[": "]", "(": ")"}


class _LiteralParser:
    """Single-use parser over one source string."""

    def __init__(self, text: str) -> None:
        self.text: str = text
        self.pos: int = 0
        # Dotted paths of keys repeated within one literal; the later value wins
        self.duplicate_keys: list[str] = []

    def parse_document(self) -> Catalog:
        """Parse an optional ``<?php return`` preamble, one literal and an optional ``;``."""
        self._skip_insignificant()
        if self.text.startswith("<?php", self.pos):
            self.pos += len("<?php")
            self._skip_header_statements()
        if self._at_word("return"):
            self.pos += len("return")
            self._skip_insignificant()

        result = self._parse_array()

        self._skip_insignificant()
        if self._peek() == ";":
            self.pos += 1
            self._skip_insignificant()
        if self.text.startswith("?>", self.pos):
            self.pos += 2
            self._skip_insignificant()
        if self.pos != len(self.text):
            raise self._error("Unexpected trailing content after array literal")
        return result

    def _skip_header_statements(self) -> None:
        """Skip statements such as ``declare(strict_types=1);`` up to ``return`` or the literal."""
        while True:
            self._skip_insignificant()
            if self._at_word("return") or self._at_word("array") or self._peek() in ("", "["):
                return
            self._skip_statement()

    def _skip_statement(self) -> None:
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char in ("'", '"'):
                _ = self._parse_string()
            elif char == ";":
                self.pos += 1
                return
            else:
                start = self.pos
                self._skip_insignificant()
                if self.pos == start:
                    self.pos += 1
        raise self._error("Expected ';' to end a header statement")

    def _parse_array(self, path: tuple[str, ...] = ()) -> Catalog:
        if self._at_word("array"):
            self.pos += len("array")
            self._skip_insignificant()

        opener = self._peek()
        if opener not in _CLOSERS:
            raise self._error("Expected '[' to open an array literal")
        closer = _CLOSERS[opener]
        self.pos += 1

        result: Catalog = {}
        while True:
            self._skip_insignificant()
            if self._peek() == closer:
                self.pos += 1
                return result

            key = self._parse_string()
            self._skip_insignificant()
            if not self.text.startswith("=>", self.pos):
                raise self._error(f"Expected '=>' after key '{key}'")
            self.pos += 2
            self._skip_insignificant()

            if key in result:
                self.duplicate_keys.append(".".join((*path, key)))

            if self._peek() in _CLOSERS or self._at_word("array"):
                result[key] = self._parse_array((*path, key))
            else:
                result[key] = self._parse_string()

            self._skip_insignificant()
            match self._peek():
                case ",":
                    self.pos += 1
                case c if c == closer:
                    self.pos += 1
                    return result
                case "":
                    raise self._error(f"Unterminated array literal, expected '{closer}'")
                case _:
                    raise self._error(f"Expected ',' or '{closer}'")

    def _parse_string(self) -> str:
        quote = self._peek()
        if quote not in ("'", '"'):
            raise self._error("Expected a quoted string")
        start = self.pos
        self.pos += 1

        chars: list[str] = []
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char == quote:
                self.pos += 1
                return "".join(chars)
            if char == "\\" and self.pos + 1 < len(self.text):
                nxt = self.text[self.pos + 1]
                if quote == "'":
                    chars.append(nxt if nxt in ("'", "\\") else "\\" + nxt)
                else:
                    chars.append(_DOUBLE_QUOTE_ESCAPES.get(nxt, "\\" + nxt))
                self.pos += 2
                continue
            chars.append(char)
            self.pos += 1

        self.pos = start
        raise self._error("Unterminated string literal")

    def _skip_insignificant(self) -> None:
        """Skip whitespace and ``//``, ``#`` and ``/* */`` comments."""
        text = self.text
        while self.pos < len(text):
            char = text[self.pos]
            if char.isspace():
                self.pos += 1
            elif text.startswith("//", self.pos) or char == "#":
                newline = text.find("\n", self.pos)
                self.pos = len(text) if newline == -1 else newline + 1
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end == -1:
                    raise self._error("Unterminated block comment")
                self.pos = end + 2
            else:
                return

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _at_word(self, word: str) -> bool:
        if not self.text.startswith(word, self.pos):
            return False
        end = self.pos + len(word)
        return end >= len(self.text) or not (
            self.text[end].isalnum() or self.text[end] == "_"
        )

    def _error(self, message: str) -> ParseError:
        line = self.text.count("\n", 0, self.pos) + 1
        column = self.pos - (self.text.rfind("\n", 0, self.pos) + 1) + 1
        return ParseError(
            f"{message} (line {line}, column {column})",
            source=self.text,
            position=self.pos,
        )


def parse(text: str) -> Catalog:
    """
    Parse an array literal or a full catalog file.

    Args:
        text: A bare ``[...]`` literal, optionally preceded by ``<?php``, header
            statements such as ``declare(strict_types=1);`` and ``return``, and
            followed by ``;``

    Returns:
        Nested ordered mapping of the literal's keys and values

    Raises:
        ParseError: If the text is not a well-formed literal
    """
    return _LiteralParser(text).parse_document()


def parse_with_duplicates(text: str) -> tuple[Catalog, list[str]]:
    """
    Like :func:`parse`, also reporting keys repeated within one literal.

    Returns:
        The parsed mapping and the dotted paths of repeated keys, in order

    Raises:
        ParseError: If the text is not a well-formed literal
    """
    parser = _LiteralParser(text)
    result = parser.parse_document()
    return result, parser.duplicate_keys


def decode(text: str) -> Catalog:
    """
    Lenient form of :func:`parse`.

    A malformed literal is logged together with the offending text and
    yields an empty mapping, so callers can treat it as "no translations
    recoverable from this source".
    """
    try:
        return parse(text)
    except ParseError as e:
        logger.error(f"Failed to parse array literal: {e}")
        logger.error(f"Offending text:\n{text}")
        return {}


def quote(value: str) -> str:
    """Render a string as a single-quoted literal."""
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def encode(
    mapping: Mapping[str, object],
    indent_level: int = 1,
    indent: str = DEFAULT_INDENT,
) -> str:
    """
    Render a nested mapping as a bracketed array literal.

    Args:
        mapping: Keys to string values or nested mappings
        indent_level: Indentation depth of the entries of this literal
        indent: One level of indentation

    Returns:
        The literal, one key-value pair per line, without a trailing newline
    """
    if not mapping:
        return "[]"

    pad = indent * indent_level
    entries: list[str] = []
    for key, value in mapping.items():
        if isinstance(value, Mapping):
            rendered = encode(value, indent_level + 1, indent)  # pyright: ignore[reportUnknownArgumentType]
        else:
            rendered = quote(str(value))
        entries.append(f"{pad}{quote(str(key))} => {rendered}")

    return "[\n" + ",\n".join(entries) + "\n" + indent * (indent_level - 1) + "]"


def render_catalog(
    mapping: Mapping[str, object],
    header: str = DEFAULT_HEADER,
    indent: str = DEFAULT_INDENT,
) -> str:
    """Render the complete text of a catalog file."""
    return f"{header}\n\nreturn {encode(mapping, 1, indent)};\n"
