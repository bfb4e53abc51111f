import pytest

from quark.core.arena import Arena
from quark.core.codegen import AssemblyCodeGenerator, GenerationContext, Binding
from quark.core.lexer import tokenize
from quark.core.parser import parse_program
from quark.core.visitor import ASTVisitor
from quark.utils.build import AssemblyValidator
from quark.utils.errors import SemanticError


def body(asm):
    """Instruction lines between the entry label and the default exit trailer."""
    lines = asm.rstrip('\n').split('\n')
    start = lines.index('_start:') + 1
    return [l.strip() for l in lines[start:-3]]


def test_program_frame(compile_src):
    asm = compile_src("")
    assert asm == (
        "global _start\n"
        "_start:\n"
        "    mov rax, 60\n"
        "    mov rdi, 0\n"
        "    syscall\n"
    )


def test_exit_literal(compile_src):
    assert body(compile_src("exit(42);")) == [
        "mov rax, 42",
        "push rax",
        "mov rax, 60",
        "pop rdi",
        "syscall",
    ]


def test_binary_op_evaluates_rhs_first(compile_src):
    assert body(compile_src("exit(5 - 2);"))[:8] == [
        "mov rax, 2",
        "push rax",
        "mov rax, 5",
        "push rax",
        "pop rax",
        "pop rbx",
        "sub rax, rbx",
        "push rax",
    ]


def test_modulus_pushes_remainder(compile_src):
    lines = body(compile_src("exit(7 % 3);"))
    assert lines[4:9] == ["pop rax", "pop rbx", "cqo", "idiv rbx", "push rdx"]


def test_identifier_offset_from_stack_top(compile_src):
    lines = body(compile_src("let x = 1; let y = 2; exit(x);"))
    assert "push QWORD [rsp + 8]" in lines


@pytest.mark.parametrize("source, expected", [
    ("exit(1+2*3);", 7),
    ("exit((1+2)*3);", 9),
    ("exit(8-3-2);", 3),
    ("exit(20/5);", 4),
    ("exit(100/10/5);", 2),
    ("exit(17%5);", 2),
    ("exit(2*3+4*5-6/2);", 23),
    ("let a = 10; let b = 3; exit(a-b);", 7),
    ("let a = 10; let b = 3; exit(a/b);", 3),
    ("let a = 10; let b = 3; exit(a%b);", 1),
    ("let a = 2; let b = a * 5; exit(b - a);", 8),
    ("exit(0-7/2);", -3),
    ("exit((0-7)%2);", -1),
])
def test_evaluation(run_src, source, expected):
    assert run_src(source) == expected


def test_fall_through_exits_zero(run_src):
    assert run_src("let x = 5;") == 0


def test_scope_unwinds_its_bindings(compile_src, run_src):
    src = "let x = 1; { let y = 2; exit(x+y); }"
    lines = body(compile_src(src))
    assert lines.count("add rsp, 8") == 1
    assert run_src(src) == 3


def test_outer_binding_addressable_after_scope(run_src):
    src = "let x = 4; { let y = 2; let z = 3; } let w = 10; exit(x + w);"
    assert run_src(src) == 14


def test_empty_scope_emits_no_adjustment(compile_src):
    assert not any(l.startswith("add rsp") for l in body(compile_src("{ } { exit(1); }")))


def test_nested_scopes(compile_src, run_src):
    src = "let a = 1; { let b = 2; { let c = 3; let d = 4; } let e = 5; exit(a + b + e); }"
    lines = body(compile_src(src))
    assert "add rsp, 16" in lines
    assert "add rsp, 24" in lines
    assert run_src(src) == 8


def test_sibling_scopes_may_reuse_names(run_src):
    assert run_src("{ let t = 1; } { let t = 2; exit(t); }") == 2


def test_if_skips_body_when_zero(compile_src, run_src):
    src = "if (0) { exit(1); } exit(2);"
    lines = body(compile_src(src))
    assert "test rax, rax" in lines
    assert "jz label0" in lines
    assert lines.index("jz label0") < lines.index("label0:")
    assert run_src(src) == 2


def test_if_runs_body_when_nonzero(run_src):
    assert run_src("let x = 3; if (x - 1) { exit(x * 2); } exit(0);") == 6


def test_labels_are_numbered_in_order(compile_src):
    asm = compile_src("if (1) { } if (1) { if (0) { } }")
    assert "label0:" in asm and "label1:" in asm and "label2:" in asm
    assert asm.index("jz label1") < asm.index("jz label2")


def test_if_body_bindings_are_unwound(run_src):
    src = "let x = 1; if (x) { let y = 5; let z = 6; } exit(x);"
    assert run_src(src) == 1


def test_undeclared_identifier(compile_src):
    with pytest.raises(SemanticError, match="Undeclared identifier: x"):
        compile_src("exit(x);")


def test_redeclaration_rejected(compile_src):
    with pytest.raises(SemanticError, match="Identifier already used: x"):
        compile_src("let x = 1; let x = 2;")


def test_redeclaration_of_outer_name_in_block_rejected_by_default(compile_src):
    with pytest.raises(SemanticError):
        compile_src("let x = 1; { let x = 2; }")


def test_shadowing_when_allowed(run_src, compile_src):
    src = "let x = 1; { let x = 20; exit(x + 1); }"
    assert run_src(src, allow_shadowing=True) == 21
    assert run_src("let x = 1; { let x = 20; } exit(x);", allow_shadowing=True) == 1
    with pytest.raises(SemanticError):
        compile_src("{ let x = 1; let x = 2; }", allow_shadowing=True)


def test_initializer_cannot_read_its_own_name(compile_src):
    with pytest.raises(SemanticError, match="Undeclared identifier: x"):
        compile_src("let x = x + 1;")


def test_shadowed_initializer_reads_outer_binding(run_src):
    assert run_src("let x = 4; { let x = x * 10; exit(x); }", allow_shadowing=True) == 40


def test_output_passes_validation(compile_src):
    asm = compile_src("let x = 1; { let y = 2; if (y) { exit(x); } } exit(9);")
    ok, issues = AssemblyValidator.validate_syntax(asm)
    assert ok, issues
    assert asm.count("_start:") == 1


def test_generate_is_repeatable():
    arena = Arena()
    program = parse_program(tokenize("let x = 1; if (x) { exit(2); }"), arena)
    gen = AssemblyCodeGenerator(program)
    assert gen.generate() == gen.generate()


def test_stack_size_balances_after_generation():
    program = parse_program(tokenize("let a = 1; { let b = 2; exit(a * b + 3); } let c = 4;"), Arena())
    gen = AssemblyCodeGenerator(program)
    gen.generate()
    assert gen.ctx.stack_size == 2
    assert [b.name for b in gen.ctx.bindings] == ["a", "c"]
    assert gen.ctx.scope_markers == []


def test_context_scope_bookkeeping():
    ctx = GenerationContext()
    ctx.push("rax")
    ctx.bindings.append(Binding("a", 0))
    ctx.begin_scope()
    ctx.push("rax")
    ctx.bindings.append(Binding("b", 1))
    ctx.push("rax")
    ctx.bindings.append(Binding("c", 2))
    assert ctx.lookup("b").stack_slot == 1
    assert ctx.end_scope() == 2
    assert ctx.stack_size == 1
    assert ctx.lookup("b") is None
    assert ctx.lines[-1] == "    add rsp, 16"


def test_context_lookup_prefers_latest():
    ctx = GenerationContext()
    ctx.bindings.extend([Binding("x", 0), Binding("x", 3)])
    assert ctx.lookup("x").stack_slot == 3


def test_visitor_must_handle_every_node_kind():
    class Partial(ASTVisitor):
        def visit_program(self, node):
            pass

    with pytest.raises(TypeError):
        Partial()


def test_redeclaration_points_at_first_declaration(compile_src):
    with pytest.raises(SemanticError) as info:
        compile_src("let x = 1;\nlet x = 2;")
    assert str(info.value.location) == "<stdin>:2:5"
    assert info.value.notes == ["'x' was first declared at <stdin>:1:5"]


def test_long_expression_chain(run_src):
    terms = ["1"] * 2000
    assert run_src("exit(" + "+".join(terms) + ");") == 2000
    assert run_src("exit(4000" + "-1" * 1999 + ");") == 2001
    assert run_src("let x = 3; exit(" + "+".join(["x * 2"] * 1500) + ");") == 9000


def test_nested_parentheses(run_src):
    depth = 100
    assert run_src("exit(" + "(" * depth + "6 * 7" + ")" * depth + ");") == 42
    assert run_src("exit(" + "(1 + " * depth + "0" + ")" * depth + ");") == depth
