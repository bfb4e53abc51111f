from enum import Enum
from dataclasses import dataclass
from typing import Optional


class TokenType(Enum):
    # Keywords
    EXIT = "exit"
    LET = "let"
    IF = "if"

    # Values
    INT_LIT = "int_lit"
    IDENT = "ident"

    # Punctuation
    SEMI = ";"
    OPEN_PAREN = "("
    CLOSE_PAREN = ")"
    OPEN_CURLY = "{"
    CLOSE_CURLY = "}"
    EQUALS = "="

    # Arithmetic operators
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    FSLASH = "/"
    PERCENT = "%"


KEYWORDS = {
    'exit': TokenType.EXIT,
    'let': TokenType.LET,
    'if': TokenType.IF,
}

# tokens carrying a text payload
VALUE_TOKENS = (TokenType.INT_LIT, TokenType.IDENT)


@dataclass(frozen=True)
class SourceLocation:
    line: int
    column: int
    file: str = "<stdin>"

    def __str__(self):
        return f"{self.file}:{self.line}:{self.column}"


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: Optional[str] = None
    location: Optional[SourceLocation] = None

    def __str__(self):
        if self.type in VALUE_TOKENS:
            return f"{self.type.name}('{self.value}')"
        return f"'{self.type.value}'"


def binary_precedence(token_type: TokenType) -> Optional[int]:
    """Binding strength of a binary operator token, None for anything else."""
    if token_type in (TokenType.PLUS, TokenType.MINUS):
        return 0
    if token_type in (TokenType.STAR, TokenType.FSLASH, TokenType.PERCENT):
        return 1
    return None
