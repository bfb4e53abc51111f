import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .ast import (
    Program, Scope, IntLitTerm, IdentTerm, ParenTerm, TermExpr, BinExpr, BinOpKind,
    ExitStmt, LetStmt, ScopeStmt, IfStmt, ExprRef, StmtRef,
)
from .tokens import SourceLocation
from .visitor import ASTVisitor
from ..utils.errors import SemanticError

logger = logging.getLogger(__name__)

WORD_SIZE = 8
SYS_EXIT = 60
ENTRY_LABEL = '_start'


@dataclass
class Binding:
    name: str
    stack_slot: int
    location: Optional[SourceLocation] = None


@dataclass
class GenerationContext:
    """Mutable state of one generation pass: the logical stack, live bindings and labels."""
    stack_size: int = 0
    bindings: List[Binding] = field(default_factory=list)
    scope_markers: List[int] = field(default_factory=list)
    label_counter: int = 0
    lines: List[str] = field(default_factory=list)

    def emit(self, instruction: str):
        self.lines.append(f'    {instruction}')

    def emit_label(self, label: str):
        self.lines.append(f'{label}:')

    def push(self, operand: str):
        self.emit(f'push {operand}')
        self.stack_size += 1

    def pop(self, register: str):
        self.emit(f'pop {register}')
        self.stack_size -= 1

    def new_label(self) -> str:
        label = f'label{self.label_counter}'
        self.label_counter += 1
        return label

    def lookup(self, name: str) -> Optional[Binding]:
        # most recent declaration wins
        for binding in reversed(self.bindings):
            if binding.name == name:
                return binding
        return None

    def lookup_in_current_scope(self, name: str) -> Optional[Binding]:
        start = self.scope_markers[-1] if self.scope_markers else 0
        for binding in reversed(self.bindings[start:]):
            if binding.name == name:
                return binding
        return None

    def begin_scope(self):
        self.scope_markers.append(len(self.bindings))

    def end_scope(self) -> int:
        """Drop the bindings declared since the matching begin_scope and discard their slots."""
        marker = self.scope_markers.pop()
        count = len(self.bindings) - marker
        if count > 0:
            self.emit(f'add rsp, {count * WORD_SIZE}')
        self.stack_size -= count
        del self.bindings[marker:]
        return count


class AssemblyCodeGenerator(ASTVisitor):
    """Lowers a Program into NASM x86-64 text for a stack machine ending in the exit syscall."""

    def __init__(self, program: Program, allow_shadowing: bool = False):
        self.program = program
        self.arena = program.arena
        self.allow_shadowing = allow_shadowing
        self.ctx = GenerationContext()

    # ---- entry points ----

    def generate(self) -> str:
        self.ctx = GenerationContext()
        self.program.accept(self)
        logger.debug("emitted %d lines, %d labels", len(self.ctx.lines), self.ctx.label_counter)
        return '\n'.join(self.ctx.lines) + '\n'

    def generate_expr(self, ref: ExprRef):
        self.arena.expr(ref).accept(self)

    def generate_stmt(self, ref: StmtRef):
        self.arena.stmt(ref).accept(self)

    # ---- program ----

    def visit_program(self, node: Program):
        self.ctx.lines.append(f'global {ENTRY_LABEL}')
        self.ctx.emit_label(ENTRY_LABEL)
        for stmt in node.stmts:
            self.generate_stmt(stmt)
        # fall-through exit with status 0
        self.ctx.emit(f'mov rax, {SYS_EXIT}')
        self.ctx.emit('mov rdi, 0')
        self.ctx.emit('syscall')

    # ---- terms ----

    def visit_int_lit(self, node: IntLitTerm):
        self.ctx.emit(f'mov rax, {node.token.value}')
        self.ctx.push('rax')

    def visit_ident(self, node: IdentTerm):
        name = node.token.value
        binding = self.ctx.lookup(name)
        if binding is None:
            raise SemanticError(f"Undeclared identifier: {name}", node.token.location)
        offset = (self.ctx.stack_size - binding.stack_slot - 1) * WORD_SIZE
        self.ctx.push(f'QWORD [rsp + {offset}]')

    def visit_paren(self, node: ParenTerm):
        self._lower(self.arena.expr(node.expr))

    # ---- expressions ----

    def visit_term_expr(self, node: TermExpr):
        self._lower(node)

    def visit_bin_expr(self, node: BinExpr):
        self._lower(node)

    def _lower(self, root):
        """Postorder lowering over an explicit work stack, so deep trees don't exhaust the call stack."""
        work = [root]
        while work:
            item = work.pop()
            if isinstance(item, tuple):
                # operands already pushed: lhs on top, rhs below it
                self._emit_binop(item[1])
            elif isinstance(item, BinExpr):
                # rhs is lowered first, then lhs, then the operator
                work.append(('op', item.op))
                work.append(self.arena.expr(item.lhs))
                work.append(self.arena.expr(item.rhs))
            elif isinstance(item, TermExpr):
                term = self.arena.term(item.term)
                if isinstance(term, ParenTerm):
                    work.append(self.arena.expr(term.expr))
                else:
                    term.accept(self)
            else:
                raise TypeError(f"unknown expression node {type(item).__name__}")

    def _emit_binop(self, op: BinOpKind):
        self.ctx.pop('rax')
        self.ctx.pop('rbx')
        if op == BinOpKind.ADD:
            self.ctx.emit('add rax, rbx')
            self.ctx.push('rax')
        elif op == BinOpKind.SUB:
            self.ctx.emit('sub rax, rbx')
            self.ctx.push('rax')
        elif op == BinOpKind.MUL:
            self.ctx.emit('imul rax, rbx')
            self.ctx.push('rax')
        elif op == BinOpKind.DIV:
            self.ctx.emit('cqo')
            self.ctx.emit('idiv rbx')
            self.ctx.push('rax')
        elif op == BinOpKind.MOD:
            self.ctx.emit('cqo')
            self.ctx.emit('idiv rbx')
            self.ctx.push('rdx')
        else:
            raise TypeError(f"unhandled operator {op}")

    # ---- statements ----

    def visit_exit(self, node: ExitStmt):
        self.generate_expr(node.expr)
        self.ctx.emit(f'mov rax, {SYS_EXIT}')
        self.ctx.pop('rdi')
        self.ctx.emit('syscall')

    def visit_let(self, node: LetStmt):
        name = node.ident.value
        if self.allow_shadowing:
            previous = self.ctx.lookup_in_current_scope(name)
        else:
            previous = self.ctx.lookup(name)
        if previous is not None:
            notes = []
            if previous.location is not None:
                notes.append(f"'{name}' was first declared at {previous.location}")
            raise SemanticError(f"Identifier already used: {name}", node.ident.location, notes=notes)
        slot = self.ctx.stack_size
        self.generate_expr(node.expr)
        self.ctx.bindings.append(Binding(name, slot, node.ident.location))

    def visit_scope(self, node: Scope):
        self.ctx.begin_scope()
        for stmt in node.stmts:
            self.generate_stmt(stmt)
        self.ctx.end_scope()

    def visit_scope_stmt(self, node: ScopeStmt):
        self.arena.scope(node.scope).accept(self)

    def visit_if(self, node: IfStmt):
        self.generate_expr(node.cond)
        self.ctx.pop('rax')
        label = self.ctx.new_label()
        self.ctx.emit('test rax, rax')
        self.ctx.emit(f'jz {label}')
        self.arena.scope(node.scope).accept(self)
        self.ctx.emit_label(label)


def generate(program: Program, allow_shadowing: bool = False) -> str:
    return AssemblyCodeGenerator(program, allow_shadowing).generate()
