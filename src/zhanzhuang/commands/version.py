"""Command 'version'."""

from zhanzhuang import __version__
from zhanzhuang.utils.ui.console import get_console

console = get_console(highlight=False)


def version() -> None:
    """Show version information"""
    console.print(__version__)
