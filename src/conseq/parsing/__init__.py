"""Lexing of Conseq documents."""

from conseq.parsing.conseq_lexer import ConseqLexer

__all__ = [
    "ConseqLexer",
]
