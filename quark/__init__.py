"""quark: a minimal ahead-of-time compiler emitting x86-64 NASM"""
from .core import (
    CompilerConfig, QuarkCompiler, compile_string, compile_file,
    tokenize, parse_program, generate, Arena,
)
from .utils.errors import (
    QuarkError, LexerError, ParseError, SemanticError, ArenaError, NestingError, ConfigError, BuildError,
)

__version__ = "0.3.0"
