"""Tests for the shell-word tokenizer."""

import pytest

from curl_errors import TrailingEscape, UnterminatedQuote
from curl_tokenizer import Token, scan, tokenize


class TestQuoting:
    def test_single_and_double_quotes(self):
        assert tokenize("curl 'a b' \"c d\"") == ["curl", "a b", "c d"]

    def test_escaped_quote_inside_double_quotes(self):
        tokens = tokenize('curl -H "X-Test: a\\"b"')
        assert tokens == ["curl", "-H", 'X-Test: a"b']

    def test_adjacent_regions_form_one_token(self):
        assert tokenize("'it'\"'\"'s'") == ["it's"]
        assert tokenize("it\"'\"s") == ["it's"]
        assert tokenize("--data-raw '{\"a\":\"it'\\''s\"}'") == ["--data-raw", '{"a":"it\'s"}']

    def test_quote_characters_of_other_kind_are_literal(self):
        assert tokenize("\"it's\"") == ["it's"]
        assert tokenize("'say \"hi\"'") == ['say "hi"']

    def test_no_escapes_inside_single_quotes(self):
        assert tokenize("curl 'a\\b'") == ["curl", "a\\b"]

    def test_double_quotes_keep_backslash_before_ordinary_chars(self):
        assert tokenize('"a\\nb"') == ["a\\nb"]
        assert tokenize('"\\$HOME \\`x\\` \\\\"') == ["$HOME `x` \\"]

    def test_empty_quotes_give_empty_token(self):
        assert tokenize("curl -d '' x") == ["curl", "-d", "", "x"]
        assert tokenize('curl ""') == ["curl", ""]


class TestWhitespaceAndEscapes:
    def test_whitespace_collapses(self):
        assert tokenize("  curl    -X\t\tPOST\n") == ["curl", "-X", "POST"]

    def test_blank_input(self):
        assert tokenize("") == []
        assert tokenize(" \t\n ") == []

    def test_escaped_space_outside_quotes(self):
        assert tokenize("curl a\\ b") == ["curl", "a b"]
        assert tokenize("\\'x") == ["'x"]

    def test_line_continuation(self):
        text = "curl -X POST \\\n  https://example.com"
        assert tokenize(text) == ["curl", "-X", "POST", "https://example.com"]

    def test_line_continuation_crlf(self):
        text = "curl -X POST \\\r\n  https://example.com"
        assert tokenize(text) == ["curl", "-X", "POST", "https://example.com"]

    def test_continuation_inside_double_quotes_is_removed(self):
        assert tokenize('"ab\\\ncd"') == ["abcd"]


class TestScan:
    def test_quoted_flag_and_positions(self):
        tokens = scan("curl '-X' -X")
        assert tokens == [
            Token("curl", False, 0),
            Token("-X", True, 5),
            Token("-X", False, 10),
        ]

    def test_partially_quoted_token_is_quoted(self):
        (token,) = scan("a'b'")
        assert token.value == "ab"
        assert token.quoted is True


class TestErrors:
    def test_unterminated_single_quote(self):
        with pytest.raises(UnterminatedQuote) as exc:
            tokenize("curl 'abc")
        assert exc.value.position == 5
        assert exc.value.code == "unterminated_quote"

    def test_unterminated_double_quote(self):
        with pytest.raises(UnterminatedQuote):
            tokenize('curl -H "Accept: x')

    def test_trailing_escape(self):
        with pytest.raises(TrailingEscape) as exc:
            tokenize("curl abc\\")
        assert exc.value.position == 8

    def test_trailing_escape_inside_double_quotes(self):
        with pytest.raises(TrailingEscape):
            tokenize('curl "abc\\')

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            tokenize("'")
