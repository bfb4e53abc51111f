import re

import pytest

from quark.core.arena import Arena
from quark.core.codegen import generate
from quark.core.lexer import tokenize
from quark.core.parser import parse_program

_MEM = re.compile(r'QWORD \[rsp \+ (\d+)\]')


class StackMachine:
    """Executes the instruction subset the generator emits and returns the exit status."""

    def __init__(self, text: str, max_steps: int = 100000):
        self.lines = [l for l in text.split('\n') if l.strip()]
        self.labels = {l.strip()[:-1]: i for i, l in enumerate(self.lines) if l.strip().endswith(':')}
        self.regs = {'rax': 0, 'rbx': 0, 'rdi': 0, 'rdx': 0}
        self.stack = []
        self.zero_flag = False
        self.max_steps = max_steps

    def _value(self, operand: str) -> int:
        m = _MEM.fullmatch(operand)
        if m:
            offset = int(m.group(1))
            assert offset % 8 == 0
            return self.stack[-1 - offset // 8]
        if operand in self.regs:
            return self.regs[operand]
        return int(operand)

    def run(self) -> int:
        pc = self.lines.index('_start:') + 1
        steps = 0
        while pc < len(self.lines):
            steps += 1
            assert steps < self.max_steps, "program did not terminate"
            line = self.lines[pc].strip()
            pc += 1
            if line.endswith(':') or line.startswith('global'):
                continue
            op, _, rest = line.partition(' ')
            args = [a.strip() for a in rest.split(',')] if rest else []
            if op == 'mov':
                self.regs[args[0]] = self._value(args[1])
            elif op == 'push':
                self.stack.append(self._value(rest))
            elif op == 'pop':
                self.regs[args[0]] = self.stack.pop()
            elif op == 'add' and args[0] == 'rsp':
                count = int(args[1]) // 8
                del self.stack[len(self.stack) - count:]
            elif op == 'add':
                self.regs[args[0]] += self._value(args[1])
            elif op == 'sub':
                self.regs[args[0]] -= self._value(args[1])
            elif op == 'imul':
                self.regs[args[0]] *= self._value(args[1])
            elif op == 'cqo':
                self.regs['rdx'] = -1 if self.regs['rax'] < 0 else 0
            elif op == 'idiv':
                a, b = self.regs['rax'], self._value(args[0])
                q = abs(a) // abs(b)
                if (a < 0) != (b < 0):
                    q = -q
                self.regs['rax'], self.regs['rdx'] = q, a - q * b
            elif op == 'test':
                self.zero_flag = (self._value(args[0]) & self._value(args[1])) == 0
            elif op == 'jz':
                if self.zero_flag:
                    pc = self.labels[args[0]]
            elif op == 'syscall':
                assert self.regs['rax'] == 60
                return self.regs['rdi']
            else:
                raise AssertionError(f"unknown instruction: {line}")
        raise AssertionError("fell off the end of the program")


def run_asm(text: str) -> int:
    return StackMachine(text).run()


def compile_text(source: str, allow_shadowing: bool = False) -> str:
    with Arena() as arena:
        program = parse_program(tokenize(source), arena)
        return generate(program, allow_shadowing)


@pytest.fixture
def compile_src():
    return compile_text


@pytest.fixture
def run_src():
    def _run(source: str, allow_shadowing: bool = False) -> int:
        return run_asm(compile_text(source, allow_shadowing))
    return _run
