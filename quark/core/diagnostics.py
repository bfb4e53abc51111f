from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional

from ..utils.errors import QuarkError
from ..utils.term import print_error, print_warning, print_info


class DiagnosticLevel(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class Diagnostic:
    level: DiagnosticLevel
    message: str
    location: Optional[object] = None
    notes: List[str] = field(default_factory=list)

    def format(self) -> str:
        result = f"{self.level.value}: {self.message}"
        if self.location:
            result = f"{self.location}: {result}"
        for note in self.notes:
            result += f"\n  note: {note}"
        return result


class DiagnosticEngine:
    def __init__(self):
        self.diagnostics: List[Diagnostic] = []
        self.error_count = 0
        self.warning_count = 0

    def report(self, diag: Diagnostic):
        self.diagnostics.append(diag)
        if diag.level == DiagnosticLevel.ERROR:
            self.error_count += 1
        elif diag.level == DiagnosticLevel.WARNING:
            self.warning_count += 1

    def error(self, message: str, location: Optional[object] = None, **kwargs):
        self.report(Diagnostic(DiagnosticLevel.ERROR, message, location, **kwargs))

    def warning(self, message: str, location: Optional[object] = None, **kwargs):
        self.report(Diagnostic(DiagnosticLevel.WARNING, message, location, **kwargs))

    def info(self, message: str, location: Optional[object] = None, **kwargs):
        self.report(Diagnostic(DiagnosticLevel.INFO, message, location, **kwargs))

    def from_exception(self, exc: QuarkError):
        self.error(f"{exc.kind} error: {exc.message}", exc.location, notes=exc.notes)

    def has_errors(self) -> bool:
        return self.error_count > 0

    def clear(self):
        self.diagnostics.clear()
        self.error_count = 0
        self.warning_count = 0

    def print_all(self):
        for diag in self.diagnostics:
            if diag.level == DiagnosticLevel.ERROR:
                print_error(diag.format())
            elif diag.level == DiagnosticLevel.WARNING:
                print_warning(diag.format())
            else:
                print_info(diag.format())
