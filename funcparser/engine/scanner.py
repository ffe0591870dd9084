import re

from enum import Enum
from typing import Iterator, NamedTuple, Optional

from ..logger import LOGGER


class TokenKind(Enum):
    END = "end of input"
    WHITESPACE = "whitespace"
    LPAREN = "'('"
    RPAREN = "')'"
    COMMA = "','"
    PLUS = "'+'"
    MINUS = "'-'"
    STAR = "'*'"
    SLASH = "'/'"
    CARET = "'^'"
    INTEGER = "integer"
    FLOAT = "floating-point number"
    IDENT = "identifier"
    ERROR = "error"

    def __str__(self):
        return self.value


class Token(NamedTuple):
    kind: TokenKind
    text: str = ""


class Scanner:
    """
    On-demand tokenizer: every call to next_token() scans exactly one token
    starting at the current position.
    """

    WHITE_RE = re.compile(r"[ \t\n]+")
    IDENT_RE = re.compile(r"[A-Za-z][A-Za-z0-9_]*")
    NUMBER_RE = re.compile(
        r"(?:[0-9]+(?P<frac>\.[0-9]*)?|(?P<lead>\.[0-9]+))"
        r"(?P<exp>[eE][+-]?(?P<digits>[0-9]*))?"
    )

    SINGLE_CHARS = {
        "(": TokenKind.LPAREN,
        ")": TokenKind.RPAREN,
        ",": TokenKind.COMMA,
        "+": TokenKind.PLUS,
        "-": TokenKind.MINUS,
        "*": TokenKind.STAR,
        "/": TokenKind.SLASH,
        "^": TokenKind.CARET,
    }

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.error: Optional[str] = None

    def reset(self):
        self.pos = 0
        self.error = None

    def peek_char(self) -> str:
        if self.pos < len(self.source):
            return self.source[self.pos]
        return ""

    def next_token(self) -> Token:
        c = self.peek_char()
        if not c:
            return Token(TokenKind.END)

        m = self.WHITE_RE.match(self.source, self.pos)
        if m:
            self.pos = m.end()
            return Token(TokenKind.WHITESPACE, m.group())

        if c in self.SINGLE_CHARS:
            self.pos += 1
            return Token(self.SINGLE_CHARS[c], c)

        m = self.IDENT_RE.match(self.source, self.pos)
        if m:
            self.pos = m.end()
            return Token(TokenKind.IDENT, m.group())

        if c in "0123456789.":
            return self._scan_number()

        return self._fail(f"unexpected char '{c}'", c)

    def _scan_number(self) -> Token:
        m = self.NUMBER_RE.match(self.source, self.pos)
        if m is None:
            # '.' with no digit on either side
            return self._fail("malformed decimal literal", ".")

        text = m.group()
        self.pos = m.end()
        if m.group("exp") is not None and not m.group("digits"):
            self.pos -= len(text)
            return self._fail(f"malformed exponent in '{text}'", text)

        if m.group("frac") is None and m.group("lead") is None and m.group("exp") is None:
            return Token(TokenKind.INTEGER, text)
        return Token(TokenKind.FLOAT, text)

    def _fail(self, msg: str, text: str) -> Token:
        self.pos += len(text)
        self.error = f"{msg} at position {self.pos - len(text)}"
        LOGGER.debug(f"scanner: {self.error}")
        return Token(TokenKind.ERROR, text)

    def tokens(self) -> Iterator[Token]:
        """Yield the remaining non-whitespace tokens, ending with END or ERROR."""
        while True:
            tok = self.next_token()
            if tok.kind is TokenKind.WHITESPACE:
                continue
            yield tok
            if tok.kind in (TokenKind.END, TokenKind.ERROR):
                return
