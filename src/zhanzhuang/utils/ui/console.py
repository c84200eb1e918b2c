"""Rich consoles shared by the commands.

Regular output goes to stdout. Error messages go to stderr, so
``zhanzhuang stats -o json`` stays parseable even when something fails.
"""

from functools import lru_cache

from rich.console import Console


@lru_cache(maxsize=2)
def get_console(highlight: bool = True) -> Console:
    """Stdout console; ``highlight=False`` for plain values such as the version."""
    return Console(highlight=highlight)


@lru_cache(maxsize=1)
def get_error_console() -> Console:
    """Stderr console for error lines."""
    return Console(stderr=True, highlight=False)


def print_error(message: str) -> None:
    get_error_console().print(f"[red]Error:[/red] {message}")
