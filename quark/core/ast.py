from enum import Enum
from dataclasses import dataclass
from typing import Tuple, TYPE_CHECKING

from .tokens import Token, TokenType

if TYPE_CHECKING:
    from .arena import Arena

# Arena handles: indices into the matching arena store
TermRef = int
ExprRef = int
StmtRef = int
ScopeRef = int


class BinOpKind(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"

    @classmethod
    def from_token(cls, token_type: TokenType) -> 'BinOpKind':
        return _TOKEN_TO_OP[token_type]


_TOKEN_TO_OP = {
    TokenType.PLUS: BinOpKind.ADD,
    TokenType.MINUS: BinOpKind.SUB,
    TokenType.STAR: BinOpKind.MUL,
    TokenType.FSLASH: BinOpKind.DIV,
    TokenType.PERCENT: BinOpKind.MOD,
}


class Term:
    STORE = 'terms'


class Expr:
    STORE = 'exprs'


class Stmt:
    STORE = 'stmts'


# ---- terms ----

@dataclass(frozen=True)
class IntLitTerm(Term):
    token: Token

    def accept(self, visitor):
        return visitor.visit_int_lit(self)


@dataclass(frozen=True)
class IdentTerm(Term):
    token: Token

    def accept(self, visitor):
        return visitor.visit_ident(self)


@dataclass(frozen=True)
class ParenTerm(Term):
    expr: ExprRef

    def accept(self, visitor):
        return visitor.visit_paren(self)


# ---- expressions ----

@dataclass(frozen=True)
class TermExpr(Expr):
    term: TermRef

    def accept(self, visitor):
        return visitor.visit_term_expr(self)


@dataclass(frozen=True)
class BinExpr(Expr):
    op: BinOpKind
    lhs: ExprRef
    rhs: ExprRef

    def accept(self, visitor):
        return visitor.visit_bin_expr(self)


# ---- statements ----

@dataclass(frozen=True)
class Scope:
    STORE = 'scopes'

    stmts: Tuple[StmtRef, ...] = ()

    def accept(self, visitor):
        return visitor.visit_scope(self)


@dataclass(frozen=True)
class ExitStmt(Stmt):
    expr: ExprRef

    def accept(self, visitor):
        return visitor.visit_exit(self)


@dataclass(frozen=True)
class LetStmt(Stmt):
    ident: Token
    expr: ExprRef

    def accept(self, visitor):
        return visitor.visit_let(self)


@dataclass(frozen=True)
class ScopeStmt(Stmt):
    scope: ScopeRef

    def accept(self, visitor):
        return visitor.visit_scope_stmt(self)


@dataclass(frozen=True)
class IfStmt(Stmt):
    cond: ExprRef
    scope: ScopeRef

    def accept(self, visitor):
        return visitor.visit_if(self)


@dataclass(frozen=True)
class Program:
    """Root of the tree. Lives outside the arena but is only valid while it is."""
    arena: 'Arena'
    stmts: Tuple[StmtRef, ...] = ()

    def accept(self, visitor):
        return visitor.visit_program(self)
