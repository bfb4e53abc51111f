#!/usr/bin/env python3
from typing import List, Optional


class QuarkError(Exception):
    """Base class for quark compiler errors"""

    kind = "error"

    def __init__(self, message: str, location: Optional[object] = None, notes: Optional[List[str]] = None):
        self.message = message
        self.location = location
        self.notes = list(notes or [])
        super().__init__(self._format_error())

    def _format_error(self) -> str:
        """Format error message with location"""
        if self.location is not None:
            return f"{self.location}: {self.message}"
        return self.message


class LexerError(QuarkError):
    """Unrecognized character in the source text"""
    kind = "lexical"


class ParseError(QuarkError):
    """Unexpected or missing token at a grammar position"""
    kind = "syntax"


class SemanticError(QuarkError):
    """Identifier used before declaration, or declared twice"""
    kind = "semantic"


class ArenaError(QuarkError):
    """Arena capacity exceeded or arena used after release"""
    kind = "resource"


class NestingError(QuarkError):
    """Program nested deeper than the compiler can recurse"""
    kind = "resource"


class ConfigError(QuarkError):
    """Invalid configuration value"""
    kind = "config"


class BuildError(QuarkError):
    """External assembler or linker failure"""
    kind = "build"

    def __init__(self, message: str, stderr: str = "", tool: Optional[str] = None):
        self.stderr = stderr
        self.tool = tool
        super().__init__(message)
