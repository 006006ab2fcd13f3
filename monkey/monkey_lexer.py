"""
Turns Monkey source text into a lazy stream of tokens.
"""

import string
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, List, Optional


class TokenType(Enum):
    ILLEGAL = auto()
    EOF = auto()

    # Identifiers and literals
    IDENT = auto()
    INT = auto()
    STRING = auto()

    # Operators
    ASSIGN = auto()
    PLUS = auto()
    MINUS = auto()
    BANG = auto()
    ASTERISK = auto()
    SLASH = auto()
    LT = auto()
    GT = auto()
    EQ = auto()
    NOT_EQ = auto()

    # Delimiters
    COMMA = auto()
    SEMICOLON = auto()
    COLON = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    LBRACKET = auto()
    RBRACKET = auto()

    # Keywords
    FUNCTION = auto()
    LET = auto()
    TRUE = auto()
    FALSE = auto()
    IF = auto()
    ELSE = auto()
    RETURN = auto()


KEYWORDS = {
    "fn": TokenType.FUNCTION,
    "let": TokenType.LET,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "return": TokenType.RETURN,
}

SINGLE_CHAR_TOKENS = {
    "=": TokenType.ASSIGN,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "!": TokenType.BANG,
    "*": TokenType.ASTERISK,
    "/": TokenType.SLASH,
    "<": TokenType.LT,
    ">": TokenType.GT,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    ":": TokenType.COLON,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
}

# Two-character operators, keyed by their first character.
DOUBLE_CHAR_TOKENS = {
    "=": ("==", TokenType.EQ),
    "!": ("!=", TokenType.NOT_EQ),
}

IDENT_CHARS = set(string.ascii_letters + "_")
DIGITS = set(string.digits)


def lookup_ident(ident: str) -> TokenType:
    return KEYWORDS.get(ident, TokenType.IDENT)


@dataclass(frozen=True)
class Token:
    """A single lexical unit. `line` and `col` are 1-based."""
    type: TokenType
    literal: str
    line: int = 1
    col: int = 1

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.literal!r}, {self.line}:{self.col})"


class Lexer:
    """Scans source text on demand.

    Iterating a Lexer always starts from the beginning of the source and
    yields tokens up to and including a single EOF token. `next_token()`
    gives the pull-style access the parser uses; once the input is exhausted
    it keeps returning EOF.
    """

    def __init__(self, source: str):
        self.source = source
        self._stream: Optional[Iterator[Token]] = None
        self._eof: Optional[Token] = None

    def __iter__(self) -> Iterator[Token]:
        return self._scan()

    def next_token(self) -> Token:
        if self._eof is not None:
            return self._eof
        if self._stream is None:
            self._stream = self._scan()
        tok = next(self._stream)
        if tok.type is TokenType.EOF:
            self._eof = tok
        return tok

    def _scan(self) -> Iterator[Token]:
        src = self.source
        n = len(src)
        pos = 0
        line = 1
        line_start = 0

        while True:
            # Skip whitespace, tracking line starts for column numbers
            while pos < n and src[pos].isspace():
                if src[pos] == "\n":
                    line += 1
                    line_start = pos + 1
                pos += 1

            col = pos - line_start + 1
            if pos >= n:
                yield Token(TokenType.EOF, "", line, col)
                return

            ch = src[pos]

            if ch in DOUBLE_CHAR_TOKENS and src.startswith(DOUBLE_CHAR_TOKENS[ch][0], pos):
                text, tok_type = DOUBLE_CHAR_TOKENS[ch]
                yield Token(tok_type, text, line, col)
                pos += len(text)
                continue

            if ch in SINGLE_CHAR_TOKENS:
                yield Token(SINGLE_CHAR_TOKENS[ch], ch, line, col)
                pos += 1
                continue

            if ch in IDENT_CHARS:
                start = pos
                while pos < n and src[pos] in IDENT_CHARS:
                    pos += 1
                ident = src[start:pos]
                yield Token(lookup_ident(ident), ident, line, col)
                continue

            if ch in DIGITS:
                start = pos
                while pos < n and src[pos] in DIGITS:
                    pos += 1
                yield Token(TokenType.INT, src[start:pos], line, col)
                continue

            if ch == '"':
                end = src.find('"', pos + 1)
                if end == -1:
                    # Unterminated: hand the remainder to the parser as illegal
                    yield Token(TokenType.ILLEGAL, src[pos:], line, col)
                    pos = n
                    continue
                text = src[pos + 1:end]
                yield Token(TokenType.STRING, text, line, col)
                # Strings may span lines
                newlines = text.count("\n")
                if newlines:
                    line += newlines
                    line_start = pos + 1 + text.rfind("\n") + 1
                pos = end + 1
                continue

            yield Token(TokenType.ILLEGAL, ch, line, col)
            pos += 1


def tokenize(source: str) -> List[Token]:
    """Returns every token of `source`, ending with EOF."""
    return list(Lexer(source))
