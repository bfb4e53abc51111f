"""
Source scanner for quark programs.

Turns raw program text into the flat token list the parser consumes.
Keywords, identifiers and integer literals are recognised by character
class; everything else is single-character punctuation. ``//`` line
comments and ``/* */`` block comments are dropped.
"""
import logging
import string
from typing import List, Optional

from .tokens import TokenType, Token, SourceLocation, KEYWORDS
from ..utils.errors import LexerError

logger = logging.getLogger(__name__)

PUNCTUATION = {
    '(': TokenType.OPEN_PAREN,
    ')': TokenType.CLOSE_PAREN,
    ';': TokenType.SEMI,
    '=': TokenType.EQUALS,
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '*': TokenType.STAR,
    '/': TokenType.FSLASH,
    '%': TokenType.PERCENT,
    '{': TokenType.OPEN_CURLY,
    '}': TokenType.CLOSE_CURLY,
}


class QuarkLexer:
    def __init__(self, source: str, filename: str = "<stdin>"):
        self.source = source
        self.filename = filename
        self.i = 0
        self.line = 1
        self.column = 1

    def _peek(self, offset: int = 0) -> Optional[str]:
        if self.i + offset >= len(self.source):
            return None
        return self.source[self.i + offset]

    def _next(self) -> str:
        c = self.source[self.i]
        self.i += 1
        if c == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return c

    def _location(self) -> SourceLocation:
        return SourceLocation(self.line, self.column, self.filename)

    def _skip_line_comment(self):
        while self._peek() is not None and self._peek() != '\n':
            self._next()

    def _skip_block_comment(self):
        start = self._location()
        self._next()
        self._next()
        while self._peek() is not None:
            if self._peek() == '*' and self._peek(1) == '/':
                self._next()
                self._next()
                return
            self._next()
        raise LexerError("Unterminated block comment", start)

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        while self._peek() is not None:
            c = self._peek()
            if c == '/' and self._peek(1) == '/':
                self._skip_line_comment()
                continue
            if c == '/' and self._peek(1) == '*':
                self._skip_block_comment()
                continue
            if c.isspace():
                self._next()
                continue

            loc = self._location()
            if c.isalpha() or c == '_':
                buf = self._next()
                while self._peek() is not None and (self._peek().isalnum() or self._peek() == '_'):
                    buf += self._next()
                if buf in KEYWORDS:
                    tokens.append(Token(KEYWORDS[buf], location=loc))
                else:
                    tokens.append(Token(TokenType.IDENT, buf, loc))
                continue
            if c in string.digits:
                buf = self._next()
                while self._peek() is not None and self._peek() in string.digits:
                    buf += self._next()
                tokens.append(Token(TokenType.INT_LIT, buf, loc))
                continue
            if c in PUNCTUATION:
                self._next()
                tokens.append(Token(PUNCTUATION[c], location=loc))
                continue
            raise LexerError(f"Unrecognized character '{c}'", loc)

        logger.debug("%s: %d tokens", self.filename, len(tokens))
        return tokens


def tokenize(source: str, filename: str = "<stdin>") -> List[Token]:
    return QuarkLexer(source, filename).tokenize()
