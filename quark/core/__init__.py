"""Core package re-exports for the quark compiler stages"""
from .tokens import TokenType, Token, SourceLocation, binary_precedence
from .lexer import QuarkLexer, tokenize
from .arena import Arena
from .ast import *
from .visitor import ASTVisitor
from .parser import QuarkParser, parse_program
from .codegen import AssemblyCodeGenerator, GenerationContext, Binding, generate
from .diagnostics import DiagnosticLevel, Diagnostic, DiagnosticEngine
from .pipeline import CompilerConfig, QuarkCompiler, create_default_compiler, compile_string, compile_file

__all__ = [
    'TokenType', 'Token', 'SourceLocation', 'binary_precedence',
    'QuarkLexer', 'tokenize',
    'Arena',
    'ASTVisitor',
    'QuarkParser', 'parse_program',
    'AssemblyCodeGenerator', 'GenerationContext', 'Binding', 'generate',
    'DiagnosticLevel', 'Diagnostic', 'DiagnosticEngine',
    'CompilerConfig', 'QuarkCompiler', 'create_default_compiler', 'compile_string', 'compile_file',
]
