"""Rich console utilities for pylock-inspect.

Reports and notices go to stdout; errors go to stderr. All output is
printed with soft wrapping so long package URLs stay on one line and the
line-oriented report remains greppable.
"""

from typing import Iterable

from rich.console import Console
from rich.text import Text
from rich.theme import Theme

custom_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "heading": "bold blue",
    }
)

# Shared console instances
console = Console(theme=custom_theme)
error_console = Console(theme=custom_theme, stderr=True)


def print_report(lines: Iterable[str]) -> None:
    """
    Print report lines verbatim.

    Section headings (``=== ... ===``) are styled; everything else is
    printed without markup or highlighting.
    """
    for line in lines:
        style = "heading" if line.startswith("===") else None
        console.print(Text(line, style=style or ""), soft_wrap=True, highlight=False)


def print_notice(message: str) -> None:
    console.print(Text(message, style="success"), soft_wrap=True, highlight=False)


def print_error(message: str) -> None:
    error_console.print(Text.assemble(("Error: ", "error"), message), soft_wrap=True, highlight=False)

