"""
Recursive descent parser for quark.

Statements are picked by their leading token; binary expressions use
precedence climbing over the table in ``tokens.binary_precedence``.
Every node is allocated from the arena handed to the parser, and the
resulting Program is only valid for as long as that arena is alive.
"""
import logging
from typing import List, Optional

from .arena import Arena
from .ast import (
    Program, Scope, IntLitTerm, IdentTerm, ParenTerm, TermExpr, BinExpr, BinOpKind,
    ExitStmt, LetStmt, ScopeStmt, IfStmt, TermRef, ExprRef, StmtRef, ScopeRef,
)
from .tokens import Token, TokenType, binary_precedence
from ..utils.errors import ParseError

logger = logging.getLogger(__name__)


class QuarkParser:
    def __init__(self, tokens: List[Token], arena: Arena):
        self.tokens = tokens
        self.arena = arena
        self.i = 0

    def _peek(self, offset: int = 0) -> Optional[Token]:
        if self.i + offset >= len(self.tokens):
            return None
        return self.tokens[self.i + offset]

    def _peek_is(self, typ: TokenType, offset: int = 0) -> bool:
        t = self._peek(offset)
        return t is not None and t.type == typ

    def _next(self) -> Token:
        t = self.tokens[self.i]
        self.i += 1
        return t

    def _accept(self, typ: TokenType) -> Optional[Token]:
        if self._peek_is(typ):
            return self._next()
        return None

    def _error(self, message: str) -> ParseError:
        t = self._peek()
        if t is not None:
            return ParseError(f"{message}, got {t}", t.location)
        last = self.tokens[-1].location if self.tokens else None
        return ParseError(f"{message}, got end of input", last)

    def _expect(self, typ: TokenType, message: str) -> Token:
        t = self._accept(typ)
        if t is None:
            raise self._error(message)
        return t

    # ---- expressions ----

    def parse_term(self) -> Optional[TermRef]:
        if t := self._accept(TokenType.INT_LIT):
            return self.arena.alloc(IntLitTerm(t))
        if t := self._accept(TokenType.IDENT):
            return self.arena.alloc(IdentTerm(t))
        if self._accept(TokenType.OPEN_PAREN):
            inner = self.parse_expr()
            if inner is None:
                raise self._error("Invalid expression")
            self._expect(TokenType.CLOSE_PAREN, "Expected ')'")
            return self.arena.alloc(ParenTerm(inner))
        return None

    def parse_expr(self, min_prec: int = 0) -> Optional[ExprRef]:
        term = self.parse_term()
        if term is None:
            return None
        lhs = self.arena.alloc(TermExpr(term))

        while True:
            t = self._peek()
            if t is None:
                break
            prec = binary_precedence(t.type)
            if prec is None or prec < min_prec:
                break
            op = BinOpKind.from_token(self._next().type)
            rhs = self.parse_expr(prec + 1)
            if rhs is None:
                raise self._error("Unable to parse expression")
            lhs = self.arena.alloc(BinExpr(op, lhs, rhs))
        return lhs

    # ---- statements ----

    def parse_scope(self) -> Optional[ScopeRef]:
        if not self._accept(TokenType.OPEN_CURLY):
            return None
        stmts: List[StmtRef] = []
        while (stmt := self.parse_statement()) is not None:
            stmts.append(stmt)
        self._expect(TokenType.CLOSE_CURLY, "Expected '}'")
        return self.arena.alloc(Scope(tuple(stmts)))

    def parse_statement(self) -> Optional[StmtRef]:
        if self._peek_is(TokenType.EXIT) and self._peek_is(TokenType.OPEN_PAREN, 1):
            self._next()
            self._next()
            expr = self.parse_expr()
            if expr is None:
                raise self._error("Invalid expression")
            self._expect(TokenType.CLOSE_PAREN, "Expected ')'")
            self._expect(TokenType.SEMI, "Expected ';'")
            return self.arena.alloc(ExitStmt(expr))

        if self._accept(TokenType.LET):
            ident = self._expect(TokenType.IDENT, "Expected identifier")
            self._expect(TokenType.EQUALS, "Expected '='")
            expr = self.parse_expr()
            if expr is None:
                raise self._error("Invalid expression")
            self._expect(TokenType.SEMI, "Expected ';'")
            return self.arena.alloc(LetStmt(ident, expr))

        if self._peek_is(TokenType.OPEN_CURLY):
            scope = self.parse_scope()
            return self.arena.alloc(ScopeStmt(scope))

        if self._accept(TokenType.IF):
            self._expect(TokenType.OPEN_PAREN, "Expected '('")
            cond = self.parse_expr()
            if cond is None:
                raise self._error("Invalid expression")
            self._expect(TokenType.CLOSE_PAREN, "Expected ')'")
            scope = self.parse_scope()
            if scope is None:
                raise self._error("Invalid scope")
            return self.arena.alloc(IfStmt(cond, scope))

        return None

    def parse_program(self) -> Program:
        stmts: List[StmtRef] = []
        while self._peek() is not None:
            stmt = self.parse_statement()
            if stmt is None:
                raise self._error("Invalid statement")
            stmts.append(stmt)
        logger.debug("parsed %d statements into %d nodes (%d bytes)",
                     len(stmts), len(self.arena), self.arena.used)
        return Program(arena=self.arena, stmts=tuple(stmts))


def parse_program(tokens: List[Token], arena: Optional[Arena] = None) -> Program:
    """Parse a whole token list. A fresh default-sized arena is created when none is given."""
    if arena is None:
        arena = Arena()
    return QuarkParser(tokens, arena).parse_program()
