#!/usr/bin/env python3
import argparse
import logging
import sys
from pathlib import Path

from quark import __version__
from quark.core.arena import Arena
from quark.core.lexer import QuarkLexer
from quark.core.parser import QuarkParser
from quark.core.pipeline import CompilerConfig, QuarkCompiler
from quark.core.pretty import format_tokens, format_ast
from quark.utils.build import BuildTools, build_executable
from quark.utils.errors import BuildError, ConfigError
from quark.utils.term import print_error, print_panel, print_stage, print_success

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_COMPILE = 2
EXIT_BUILD = 3


def _dump(source: str, filename: str, config: CompilerConfig, tokens: bool, tree: bool):
    toks = QuarkLexer(source, filename).tokenize()
    if tokens:
        print_panel(format_tokens(toks), title="tokens")
    if tree:
        with Arena(config.arena_capacity) as arena:
            program = QuarkParser(toks, arena).parse_program()
            print_panel(format_ast(program), title="ast")


def main(argv=None):
    parser = argparse.ArgumentParser(prog='quarkc', description='Compile quark (.qrk) programs to x86-64 Linux executables')
    parser.add_argument('input', help='Input source file (.qrk)')
    parser.add_argument('-o', '--output', help='Assembly output path (default: out.asm); object and executable names derive from it')
    parser.add_argument('--type', choices=['asm', 'obj', 'exe'], default='exe', help='What to produce from the input')
    parser.add_argument('--dump-tokens', action='store_true', help='Print the token stream')
    parser.add_argument('--dump-ast', action='store_true', help='Print the parsed statement tree')
    parser.add_argument('--allow-shadowing', action='store_true', help='Only reject redeclarations within the same block')
    parser.add_argument('--arena-size', type=int, help='AST arena capacity in bytes')
    parser.add_argument('--nasm', help='Assembler executable')
    parser.add_argument('--ld', help='Linker executable')
    parser.add_argument('-v', '--verbose', action='store_true')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    try:
        config = CompilerConfig.from_env()
    except ConfigError as e:
        print_error(e.message)
        return EXIT_USAGE
    config.verbose = args.verbose
    if args.allow_shadowing:
        config.allow_shadowing = True
    if args.arena_size is not None:
        if args.arena_size <= 0:
            print_error("--arena-size must be positive")
            return EXIT_USAGE
        config.arena_capacity = args.arena_size
    if args.output:
        config.output_path = args.output
    if args.nasm:
        config.nasm = args.nasm
    if args.ld:
        config.ld = args.ld

    input_path = Path(args.input)
    try:
        source = input_path.read_text(encoding='utf-8')
    except OSError as e:
        print_error(f"Unable to open file {input_path}: {e.strerror}")
        return EXIT_USAGE

    total = 1 if args.type == 'asm' else 2
    if args.verbose:
        print_stage(1, total, f"Compiling {input_path}")

    compiler = QuarkCompiler(config)
    asm = compiler.compile(source, str(input_path))
    if asm is None:
        return EXIT_COMPILE

    if args.dump_tokens or args.dump_ast:
        _dump(source, str(input_path), config, args.dump_tokens, args.dump_ast)

    out_path = Path(config.output_path)
    if args.type == 'asm':
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(asm, encoding='utf-8')
        print_success(f"Assembly written to: {out_path}")
        return EXIT_OK

    if args.verbose:
        print_stage(2, total, "Assembling and linking")
    missing = not BuildTools.check_nasm(config.nasm) or (args.type == 'exe' and not BuildTools.check_ld(config.ld))
    if missing:
        BuildTools.print_install_instructions(config.nasm, config.ld)
        return EXIT_BUILD
    try:
        artifact = build_executable(asm, out_path, config.nasm, config.ld, link_output=(args.type == 'exe'))
    except BuildError as e:
        print_error(str(e))
        if e.stderr:
            print_error(e.stderr.strip())
        return EXIT_BUILD

    print_success(f"Built: {artifact}")
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
