"""Tests for the Conseq line lexer."""

import pytest

from conseq.parsing import ConseqLexer


@pytest.fixture
def lexer():
    lexer = ConseqLexer()
    lexer.build()
    return lexer


class TestConseqLexer:
    """Tests for line classification."""

    def test_entries(self, lexer):
        """Test that key/value lines become ENTRY tokens."""
        tokens = lexer.tokenize("a = 1\nb = 2")
        assert [t.type for t in tokens] == ["ENTRY", "ENTRY"]
        assert [t.value for t in tokens] == ["a = 1", "b = 2"]

    def test_lines_are_trimmed(self, lexer):
        tokens = lexer.tokenize("   a = 1,   \n\tb:2")
        assert [t.value for t in tokens] == ["a = 1,", "b:2"]

    def test_comment(self, lexer):
        """Test that comment text loses its marker and padding."""
        tokens = lexer.tokenize("# Connection settings\n  #indented")
        assert [t.type for t in tokens] == ["COMMENT", "COMMENT"]
        assert [t.value for t in tokens] == ["Connection settings", "indented"]

    def test_header(self, lexer):
        tokens = lexer.tokenize("[ Server ]\nhost = x")
        assert [t.type for t in tokens] == ["HEADER", "ENTRY"]
        assert tokens[0].value == "Server"

    def test_unclosed_bracket_is_entry(self, lexer):
        tokens = lexer.tokenize("[Server")
        assert tokens[0].type == "ENTRY"

    def test_single_newline_emits_nothing(self, lexer):
        tokens = lexer.tokenize("a = 1\n")
        assert [t.type for t in tokens] == ["ENTRY"]

    def test_blank_lines_collapse(self, lexer):
        """Test that a run of blank lines becomes one BLANK token."""
        tokens = lexer.tokenize("a = 1\n\n  \n\t\nb = 2")
        assert [t.type for t in tokens] == ["ENTRY", "BLANK", "ENTRY"]

    def test_whitespace_only_line_is_dropped(self, lexer):
        tokens = lexer.tokenize("   ")
        assert tokens == []

    def test_line_numbers(self, lexer):
        tokens = lexer.tokenize("a = 1\n\n\nb = 2\nc = 3")
        entries = [t for t in tokens if t.type == "ENTRY"]
        assert [t.lineno for t in entries] == [1, 4, 5]

    def test_tokenize_is_repeatable(self, lexer):
        first = lexer.tokenize("a = 1\nb = 2")
        second = lexer.tokenize("x = 1")
        assert len(first) == 2
        assert [t.value for t in second] == ["x = 1"]
        assert second[0].lineno == 1

    def test_carriage_returns_trimmed(self, lexer):
        tokens = lexer.tokenize("a = 1\r\n\r\nb = 2\r\n")
        assert [t.type for t in tokens] == ["ENTRY", "BLANK", "ENTRY"]
        assert tokens[0].value == "a = 1"
