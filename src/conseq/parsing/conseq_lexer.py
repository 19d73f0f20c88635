"""Lexer for Conseq documents.

The lexer is line oriented. Every non-empty line becomes one token, typed by
its first character after trimming; runs of blank lines become a single
BLANK token, which separates the records of a root sequence.
"""

import ply.lex as lex


class ConseqLexer:
    """Lexer for tokenizing Conseq text into classified lines."""

    tokens = [
        "BLANK",
        "COMMENT",
        "HEADER",
        "ENTRY",
    ]

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore

    # Rules are tried in definition order: BLANK must come before NEWLINE.

    def t_BLANK(self, t: lex.LexToken) -> lex.LexToken:
        r"\n([ \t\r\f\v]*\n)+"
        t.lexer.lineno += t.value.count("\n")
        t.value = ""
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n"
        t.lexer.lineno += 1
        # A single newline only ends the current line

    def t_LINE(self, t: lex.LexToken) -> lex.LexToken | None:
        r"[^\n]+"
        text = t.value.strip()
        if not text:
            return None
        if text.startswith("#"):
            t.type = "COMMENT"
            text = text[1:].strip()
        elif text.startswith("[") and text.endswith("]"):
            t.type = "HEADER"
            text = text[1:-1].strip()
        else:
            t.type = "ENTRY"
        t.value = text
        return t

    def t_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"Illegal character '{t.value[0]}' at line {t.lineno}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens.

        Each call works on its own clone of the built lexer, so one
        ConseqLexer can serve several threads.
        """
        lexer = self.lexer.clone()
        lexer.lineno = 1
        lexer.input(data)
        tokens = []
        while True:
            tok = lexer.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
