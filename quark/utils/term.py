from rich.console import Console
from rich.panel import Panel
from rich.markup import escape
import os

console = Console()
err_console = Console(stderr=True)


def _is_minimal() -> bool:
    # QUARK_MINIMAL_UI=1 drops markup and keeps single-line output
    env = os.environ.get('QUARK_MINIMAL_UI')
    if env is None:
        return False
    return env.strip().lower() in ('1', 'true', 'yes', 'on')


def print_stage(step: int, total: int, message: str):
    """Print a staged progress-like line (e.g. [1/3] Parsing...)"""
    if _is_minimal():
        console.print(f"[{step}/{total}] {message}", markup=False)
    else:
        console.print(f"[cyan]●[/cyan] [bold]{step}/{total}[/bold] {escape(message)}")


def print_info(message: str):
    if _is_minimal():
        return
    console.print(f"[yellow]Info:[/yellow] {escape(message)}")


def print_error(message: str):
    if _is_minimal():
        err_console.print(f"[ERROR] {message}", markup=False)
        return
    err_console.print(f"[red]Error:[/red] {escape(message)}")


def print_warning(message: str):
    if _is_minimal():
        err_console.print(f"[WARN] {message}", markup=False)
        return
    err_console.print(f"[#9b59b6]Warning:[/#9b59b6] {escape(message)}")


def print_success(message: str):
    if _is_minimal():
        console.print(f"[OK] {message}", markup=False)
        return
    console.print(f"[green]Success:[/green] {escape(message)}")


def print_panel(renderable, title: str):
    """Show a rich renderable (token table, AST tree) inside a titled panel"""
    if _is_minimal():
        console.print(renderable)
        return
    console.print(Panel(renderable, title=title, expand=False))
