"""Shared helpers: error types, terminal output and build tooling"""
from .errors import (
    QuarkError, LexerError, ParseError, SemanticError, ArenaError, NestingError, ConfigError, BuildError,
)

__all__ = [
    'QuarkError', 'LexerError', 'ParseError', 'SemanticError', 'ArenaError', 'NestingError',
    'ConfigError', 'BuildError',
]
