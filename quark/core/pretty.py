#!/usr/bin/env python3
from typing import List

from rich.table import Table
from rich.tree import Tree

from .ast import (
    Program, ParenTerm, BinExpr, ExitStmt, LetStmt, ScopeStmt, IfStmt,
    ExprRef, StmtRef, ScopeRef,
)
from .tokens import Token


def format_tokens(tokens: List[Token]) -> Table:
    """Token listing as a rich table (used by --dump-tokens)"""
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Type")
    table.add_column("Value")
    table.add_column("Location")
    for i, tok in enumerate(tokens):
        table.add_row(
            str(i),
            tok.type.name,
            tok.value if tok.value is not None else "",
            str(tok.location) if tok.location else "",
        )
    return table


def render_expr(program: Program, ref: ExprRef) -> str:
    """Fully parenthesized source form of an expression, e.g. (1 + (2 * 3))"""
    arena = program.arena
    work = [arena.expr(ref)]
    out: List[str] = []
    while work:
        item = work.pop()
        if isinstance(item, tuple):
            rhs = out.pop()
            lhs = out.pop()
            out.append(f"({lhs} {item[1].value} {rhs})")
        elif isinstance(item, BinExpr):
            work.append(('op', item.op))
            work.append(arena.expr(item.rhs))
            work.append(arena.expr(item.lhs))
        else:
            term = arena.term(item.term)
            if isinstance(term, ParenTerm):
                work.append(arena.expr(term.expr))
            else:
                out.append(term.token.value)
    return out[0]


def _add_scope(program: Program, parent: Tree, ref: ScopeRef):
    for stmt in program.arena.scope(ref).stmts:
        _add_stmt(program, parent, stmt)


def _add_stmt(program: Program, parent: Tree, ref: StmtRef):
    node = program.arena.stmt(ref)
    if isinstance(node, ExitStmt):
        parent.add(f"[bold]exit[/bold] {render_expr(program, node.expr)}")
    elif isinstance(node, LetStmt):
        parent.add(f"[bold]let[/bold] {node.ident.value} = {render_expr(program, node.expr)}")
    elif isinstance(node, ScopeStmt):
        _add_scope(program, parent.add("[bold]scope[/bold]"), node.scope)
    elif isinstance(node, IfStmt):
        branch = parent.add(f"[bold]if[/bold] {render_expr(program, node.cond)}")
        _add_scope(program, branch, node.scope)
    else:
        raise TypeError(f"unknown statement node {type(node).__name__}")


def format_ast(program: Program) -> Tree:
    """Statement tree of a program as a rich Tree (used by --dump-ast)"""
    root = Tree("[bold]program[/bold]")
    for stmt in program.stmts:
        _add_stmt(program, root, stmt)
    return root
