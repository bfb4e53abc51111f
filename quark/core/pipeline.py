import logging
import os
from pathlib import Path
from typing import Optional

from .arena import Arena, DEFAULT_CAPACITY
from .codegen import AssemblyCodeGenerator
from .diagnostics import DiagnosticEngine
from .lexer import QuarkLexer
from .parser import QuarkParser
from ..utils.build import AssemblyValidator
from ..utils.errors import QuarkError, NestingError, ConfigError

logger = logging.getLogger(__name__)

_TRUTHY = ('1', 'true', 'yes', 'on')


class CompilerConfig:
    def __init__(self):
        self.verbose = False
        self.arena_capacity = DEFAULT_CAPACITY
        self.allow_shadowing = False
        self.validate_output = True
        self.output_path = "out.asm"
        self.nasm = "nasm"
        self.ld = "ld"

    @classmethod
    def from_env(cls) -> 'CompilerConfig':
        config = cls()
        size = os.environ.get('QUARK_ARENA_SIZE')
        if size:
            try:
                config.arena_capacity = int(size)
            except ValueError:
                raise ConfigError(f"QUARK_ARENA_SIZE must be an integer number of bytes, got '{size}'") from None
            if config.arena_capacity <= 0:
                raise ConfigError(f"QUARK_ARENA_SIZE must be positive, got {config.arena_capacity}")
        shadow = os.environ.get('QUARK_ALLOW_SHADOWING')
        if shadow is not None:
            config.allow_shadowing = shadow.strip().lower() in _TRUTHY
        return config


class QuarkCompiler:
    def __init__(self, config: Optional[CompilerConfig] = None):
        self.config = config or CompilerConfig()
        self.diagnostics = DiagnosticEngine()

    def compile_source(self, source: str, filename: str = "<stdin>") -> str:
        """Run lexer, parser and generator; any QuarkError propagates to the caller."""
        tokens = QuarkLexer(source, filename).tokenize()
        logger.debug("lexed %d tokens from %s", len(tokens), filename)
        if self.config.verbose:
            self.diagnostics.info(f"Lexed {len(tokens)} tokens")

        with Arena(self.config.arena_capacity) as arena:
            try:
                program = QuarkParser(tokens, arena).parse_program()
                logger.debug("arena holds %d nodes, %d/%d bytes", len(arena), arena.used, arena.capacity)
                if self.config.verbose:
                    self.diagnostics.info(
                        f"Parsed {len(program.stmts)} statements into {len(arena)} nodes ({arena.used} bytes)")
                assembly = AssemblyCodeGenerator(program, self.config.allow_shadowing).generate()
            except RecursionError:
                raise NestingError("Program is nested too deeply to compile") from None

        if self.config.validate_output:
            _, issues = AssemblyValidator.validate_syntax(assembly)
            for issue in issues:
                self.diagnostics.warning(issue)
                logger.warning("generated assembly: %s", issue)
        return assembly

    def compile(self, source: str, filename: str = "<stdin>") -> Optional[str]:
        """Compile, reporting the first error as a diagnostic. Returns None on failure."""
        self.diagnostics.clear()
        try:
            assembly = self.compile_source(source, filename)
        except QuarkError as e:
            logger.debug("compilation of %s failed: %s", filename, e)
            self.diagnostics.from_exception(e)
            self.diagnostics.print_all()
            return None
        if self.diagnostics.diagnostics:
            self.diagnostics.print_all()
        return assembly


def create_default_compiler() -> QuarkCompiler:
    return QuarkCompiler(CompilerConfig.from_env())


def compile_string(source: str, allow_shadowing: bool = False) -> Optional[str]:
    config = CompilerConfig.from_env()
    config.allow_shadowing = allow_shadowing
    return QuarkCompiler(config).compile(source, '<string>')


def compile_file(filepath: str, config: Optional[CompilerConfig] = None) -> Optional[str]:
    path = Path(filepath)
    compiler = QuarkCompiler(config or CompilerConfig.from_env())
    try:
        source = path.read_text(encoding='utf-8')
    except OSError as e:
        compiler.diagnostics.error(f"Unable to open file {path}: {e.strerror}")
        compiler.diagnostics.print_all()
        return None
    return compiler.compile(source, str(path))
