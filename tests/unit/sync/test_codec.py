"""Tests for the array literal codec."""

import logging

import pytest

from transsfc.sync import codec
from transsfc.utils.core.exceptions import ParseError


class TestParse:
    """Test cases for parsing array literals."""

    def test_parse_flat_literal(self) -> None:
        """Test parsing a flat literal with single-quoted strings."""
        result = codec.parse("['title' => 'Login', 'submit' => 'Sign in']")

        assert result == {"title": "Login", "submit": "Sign in"}

    def test_parse_preserves_document_order(self) -> None:
        """Test that keys keep their order of appearance."""
        result = codec.parse("['b' => '2', 'a' => '1', 'c' => '3']")

        assert list(result) == ["b", "a", "c"]

    def test_parse_nested_literal(self) -> None:
        """Test parsing nested literals."""
        text = """[
            'form' => [
                'email' => 'Email address',
                'errors' => ['required' => 'Required'],
            ],
        ]"""

        result = codec.parse(text)

        assert result == {
            "form": {
                "email": "Email address",
                "errors": {"required": "Required"},
            }
        }

    def test_parse_trailing_comma_and_empty(self) -> None:
        """Test that trailing commas and empty literals are accepted."""
        assert codec.parse("['a' => 'x',]") == {"a": "x"}
        assert codec.parse("[]") == {}
        assert codec.parse("[ ]") == {}

    def test_parse_array_function_syntax(self) -> None:
        """Test the long array(...) form."""
        result = codec.parse("array('a' => 'x', 'b' => array('c' => 'y'))")

        assert result == {"a": "x", "b": {"c": "y"}}

    def test_parse_double_quoted_strings(self) -> None:
        """Test double-quoted strings and their escapes."""
        result = codec.parse('["greeting" => "Hello\\n\\"World\\"", "price" => "\\$5"]')

        assert result == {"greeting": 'Hello\n"World"', "price": "$5"}

    def test_parse_single_quote_escapes(self) -> None:
        """Test that single-quoted strings only unescape quote and backslash."""
        result = codec.parse(r"['a' => 'It\'s', 'b' => 'C:\\dir', 'c' => 'line\n']")

        assert result == {"a": "It's", "b": "C:\\dir", "c": "line\\n"}

    def test_parse_comments(self) -> None:
        """Test that line and block comments are skipped."""
        text = """[
            // the page title
            'title' => 'Login', # hash comment
            /* multi
               line */
            'submit' => 'Go',
        ]"""

        assert codec.parse(text) == {"title": "Login", "submit": "Go"}

    def test_parse_full_catalog_file(self) -> None:
        """Test parsing a catalog file with header, return and semicolon."""
        text = "<?php\n\nreturn [\n    'sfc.home.title' => 'Home'\n];\n"

        assert codec.parse(text) == {"sfc.home.title": "Home"}

    def test_parse_statements_before_return(self) -> None:
        """Test that header statements between <?php and return are skipped."""
        text = (
            "<?php declare(strict_types=1);\n"
            "namespace App\\Lang; // generated\n"
            "use Foo\\Bar; # alias\n"
            "$note = 'a; b';\n\n"
            "return [\n    'sfc.home.title' => 'Home'\n];\n"
        )

        assert codec.parse(text) == {"sfc.home.title": "Home"}

    def test_parse_unterminated_header_statement(self) -> None:
        """Test that a header statement without a semicolon is reported."""
        with pytest.raises(ParseError, match="to end a header statement"):
            _ = codec.parse("<?php declare(strict_types=1)")

    def test_parse_with_duplicates(self) -> None:
        """Test that keys repeated within one literal are reported as dotted paths."""
        result, repeated = codec.parse_with_duplicates(
            "['t' => 'A', 'form' => ['e' => '1', 'e' => '2'], 't' => 'B']"
        )

        assert result == {"t": "B", "form": {"e": "2"}}
        assert repeated == ["form.e", "t"]

    def test_parse_whitespace_between_tokens(self) -> None:
        """Test that arbitrary whitespace is tolerated."""
        result = codec.parse("[\n\t'a'\n  =>\n 'x'  ,\n]")

        assert result == {"a": "x"}

    @pytest.mark.parametrize(
        ("text", "message"),
        [
            ("['a' => 'x'", "Unterminated array literal"),
            ("['a' 'x']", "Expected '=>'"),
            ("[a => 'x']", "Expected a quoted string"),
            ("['a' => 'x]", "Unterminated string literal"),
            ("'a' => 'x'", "to open an array literal"),
            ("['a' => 'x'] extra", "Unexpected trailing content"),
            ("['a' => 'x' 'b' => 'y']", "Expected ',' or ']'"),
            ("['a' => 'x', /* open", "Unterminated block comment"),
        ],
    )
    def test_parse_malformed(self, text: str, message: str) -> None:
        """Test that malformed literals raise ParseError with a useful message."""
        with pytest.raises(ParseError, match=message) as exc_info:
            _ = codec.parse(text)

        assert exc_info.value.source == text
        assert "line 1" in str(exc_info.value)

    def test_parse_error_reports_line(self) -> None:
        """Test that the error location points at the offending line."""
        with pytest.raises(ParseError, match=r"line 3"):
            _ = codec.parse("[\n    'a' => 'x',\n    'b' => ,\n]")


class TestDecode:
    """Test cases for lenient decoding."""

    def test_decode_valid(self) -> None:
        """Test that decode returns the parsed mapping."""
        assert codec.decode("['a' => 'x']") == {"a": "x"}

    def test_decode_malformed_returns_empty(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that decode logs and returns an empty mapping on malformed input."""
        with caplog.at_level(logging.ERROR):
            result = codec.decode("['a' => ")

        assert result == {}
        assert "Failed to parse array literal" in caplog.text
        assert "['a' => " in caplog.text


class TestEncode:
    """Test cases for encoding mappings."""

    def test_encode_empty(self) -> None:
        """Test that an empty mapping encodes as []."""
        assert codec.encode({}) == "[]"

    def test_encode_flat(self) -> None:
        """Test the exact layout of a flat literal."""
        result = codec.encode({"sfc.a": "A", "sfc.b": "B"})

        assert result == "[\n    'sfc.a' => 'A',\n    'sfc.b' => 'B'\n]"

    def test_encode_nested(self) -> None:
        """Test indentation of nested literals."""
        result = codec.encode({"outer": {"inner": "v"}})

        assert result == "[\n    'outer' => [\n        'inner' => 'v'\n    ]\n]"

    def test_encode_escapes_quotes_and_backslashes(self) -> None:
        """Test that quotes and backslashes are escaped."""
        result = codec.encode({"k": "It's C:\\dir"})

        assert "'It\\'s C:\\\\dir'" in result
        assert codec.parse(result) == {"k": "It's C:\\dir"}

    def test_encode_custom_indent(self) -> None:
        """Test a custom indentation unit."""
        assert codec.encode({"a": "x"}, indent="  ") == "[\n  'a' => 'x'\n]"

    def test_nested_mapping_survives_parsing(self) -> None:
        """Test that an encoded nested mapping parses back to itself."""
        mapping = {"a": "x", "b": {"c": "y", "d": {"e": "z"}}, "f": ""}

        assert codec.parse(codec.encode(mapping)) == mapping

    def test_encode_preserves_newlines_and_unicode(self) -> None:
        """Test that values with newlines and non-ASCII text survive parsing."""
        mapping = {"sfc.welcome": "Grüß dich\nzweite Zeile", "sfc.jp": "ようこそ"}

        assert codec.parse(codec.encode(mapping)) == mapping


class TestRenderCatalog:
    """Test cases for rendering catalog files."""

    def test_render_catalog_layout(self) -> None:
        """Test the complete catalog file layout."""
        result = codec.render_catalog({"sfc.home.title": "Home"})

        assert result == "<?php\n\nreturn [\n    'sfc.home.title' => 'Home'\n];\n"

    def test_render_empty_catalog(self) -> None:
        """Test rendering an empty catalog."""
        assert codec.render_catalog({}) == "<?php\n\nreturn [];\n"

    def test_render_catalog_custom_header(self) -> None:
        """Test a custom header line."""
        result = codec.render_catalog({}, header="<?php declare(strict_types=1);")

        assert result.startswith("<?php declare(strict_types=1);\n\nreturn")

    def test_custom_header_catalog_parses_back(self) -> None:
        """Test that a catalog rendered under a declare header parses back."""
        mapping = {"sfc.home.title": "Home"}

        text = codec.render_catalog(mapping, header="<?php declare(strict_types=1);")

        assert codec.parse(text) == mapping
