#!/usr/bin/env python3
"""
Glue around the external toolchain: NASM assembles the generated text
into an ELF64 object and ld links it into a static executable.
"""
import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Tuple, Union

from .errors import BuildError
from .term import print_error, print_info

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class BuildTools:
    """Build tool detection"""

    @staticmethod
    def check_nasm(nasm: str = 'nasm') -> bool:
        """Check if NASM is available"""
        return shutil.which(nasm) is not None

    @staticmethod
    def check_ld(ld: str = 'ld') -> bool:
        """Check if the GNU linker is available"""
        return shutil.which(ld) is not None

    @staticmethod
    def get_missing_tools(nasm: str = 'nasm', ld: str = 'ld') -> List[str]:
        """Get list of missing build tools"""
        missing = []
        if not BuildTools.check_nasm(nasm):
            missing.append(nasm)
        if not BuildTools.check_ld(ld):
            missing.append(ld)
        return missing

    @staticmethod
    def print_install_instructions(nasm: str = 'nasm', ld: str = 'ld'):
        """Print installation instructions for missing tools"""
        missing = BuildTools.get_missing_tools(nasm, ld)
        if not missing:
            print_info("All build tools are available")
            return

        print_error(f"Missing build tools: {', '.join(missing)}")
        if nasm in missing:
            print_info("NASM: 'sudo apt install nasm' (Debian/Ubuntu) or 'brew install nasm' (macOS)")
        if ld in missing:
            print_info("ld: 'sudo apt install binutils' (Debian/Ubuntu)")


def _run(cmd: List[str], tool: str):
    logger.debug("running %s", ' '.join(cmd))
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise BuildError(f"{tool} not found", tool=tool) from e
    if proc.returncode != 0:
        raise BuildError(f"{tool} failed with exit code {proc.returncode}", stderr=proc.stderr, tool=tool)


def assemble(asm_path: PathLike, obj_path: PathLike, nasm: str = 'nasm'):
    _run([nasm, '-f', 'elf64', str(asm_path), '-o', str(obj_path)], 'nasm')


def link(obj_path: PathLike, exe_path: PathLike, ld: str = 'ld'):
    _run([ld, '-o', str(exe_path), str(obj_path)], 'ld')


def build_executable(asm_text: str, out_path: PathLike, nasm: str = 'nasm', ld: str = 'ld',
                     link_output: bool = True) -> Path:
    """Write the assembly, assemble it and (optionally) link. Returns the last artifact produced.

    The assembly always lands next to the output with a ``.asm`` suffix, so
    ``-o prog``, ``-o prog.o`` and ``-o prog.asm`` all keep ``prog.asm`` around
    and never hand nasm an input that was just deleted or overwritten.
    """
    out_path = Path(out_path)
    asm_path = out_path.with_suffix('.asm')
    asm_path.parent.mkdir(parents=True, exist_ok=True)
    asm_path.write_text(asm_text, encoding='utf-8')

    obj_path = asm_path.with_suffix('.o')
    if obj_path.exists():
        obj_path.unlink()
    assemble(asm_path, obj_path, nasm)
    if not link_output:
        return obj_path

    exe_path = asm_path.with_suffix('')
    if exe_path.exists():
        exe_path.unlink()
    link(obj_path, exe_path, ld)
    return exe_path


class AssemblyValidator:
    """Validate generated assembly text"""

    EXIT_SEQUENCE = ('mov rax, 60', 'syscall')

    @staticmethod
    def validate_syntax(assembly_code: str) -> Tuple[bool, List[str]]:
        lines = assembly_code.rstrip('\n').split('\n')
        issues = []

        entry_labels = 0
        has_global = False
        for i, line in enumerate(lines, 1):
            stripped = line.strip()
            if not stripped:
                continue
            if stripped == 'global _start':
                has_global = True
                continue
            if stripped.endswith(':'):
                if line.startswith(' '):
                    issues.append(f"Line {i}: Label should not be indented: {stripped}")
                if stripped == '_start:':
                    entry_labels += 1
                continue
            if not line.startswith('    ') or line.startswith('     '):
                issues.append(f"Line {i}: Instruction should be indented by four spaces: {stripped}")

        if not has_global:
            issues.append("Missing 'global _start' directive")
        if entry_labels != 1:
            issues.append(f"Expected exactly one _start label, found {entry_labels}")

        tail = [l.strip() for l in lines if l.strip()][-3:]
        if len(tail) < 3 or tail[0] != AssemblyValidator.EXIT_SEQUENCE[0] or tail[2] != AssemblyValidator.EXIT_SEQUENCE[1]:
            issues.append("Program does not end with the exit syscall sequence")

        return len(issues) == 0, issues
