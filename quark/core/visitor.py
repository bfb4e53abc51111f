from abc import ABC, abstractmethod
from .ast import (
    Program, Scope, IntLitTerm, IdentTerm, ParenTerm, TermExpr, BinExpr,
    ExitStmt, LetStmt, ScopeStmt, IfStmt,
)


class ASTVisitor(ABC):
    """One abstract hook per node kind; a visitor missing any of them cannot be instantiated."""

    @abstractmethod
    def visit_program(self, node: Program): pass

    @abstractmethod
    def visit_scope(self, node: Scope): pass

    @abstractmethod
    def visit_int_lit(self, node: IntLitTerm): pass

    @abstractmethod
    def visit_ident(self, node: IdentTerm): pass

    @abstractmethod
    def visit_paren(self, node: ParenTerm): pass

    @abstractmethod
    def visit_term_expr(self, node: TermExpr): pass

    @abstractmethod
    def visit_bin_expr(self, node: BinExpr): pass

    @abstractmethod
    def visit_exit(self, node: ExitStmt): pass

    @abstractmethod
    def visit_let(self, node: LetStmt): pass

    @abstractmethod
    def visit_scope_stmt(self, node: ScopeStmt): pass

    @abstractmethod
    def visit_if(self, node: IfStmt): pass
