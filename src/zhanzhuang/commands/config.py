"""Configuration commands."""

import typer

from zhanzhuang.exceptions import ConfigError
from zhanzhuang.models.config_models import MAX_MINUTES, MIN_MINUTES
from zhanzhuang.services.config_service import get_config_service
from zhanzhuang.utils.exit_codes import ERROR_CONFIG, ERROR_INVALID_ARGS
from zhanzhuang.utils.logger import log_file_path
from zhanzhuang.utils.typer_helpers import SuggestingGroup
from zhanzhuang.utils.ui.console import get_console, print_error

app = typer.Typer(cls=SuggestingGroup, help="Configuration management")
console = get_console()


def _service():
    try:
        return get_config_service()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(ERROR_CONFIG) from e


@app.command("show")
def show_config() -> None:
    """Show the current configuration (API key masked)."""
    svc = _service()
    data = svc.config.model_dump()
    key = svc.get_api_key()
    data["gemini"]["api_key"] = f"{key[:4]}…" if key else None
    console.print(f"[dim]Config: {svc.config_path}[/dim]")
    console.print(f"[dim]Log:    {log_file_path()}[/dim]")
    console.print_json(data=data)


@app.command("set-duration")
def set_duration(
    minutes: int = typer.Argument(..., help=f"Default session length ({MIN_MINUTES}-{MAX_MINUTES})"),
) -> None:
    """Set the default session length in minutes."""
    if not MIN_MINUTES <= minutes <= MAX_MINUTES:
        console.print(
            f"[red]Minutes must be between {MIN_MINUTES} and {MAX_MINUTES}[/red]"
        )
        raise typer.Exit(ERROR_INVALID_ARGS)
    stored = _service().set_default_minutes(minutes)
    console.print(f"[green]Default session length set to {stored} minutes[/green]")


@app.command("audio")
def set_audio(
    state: str = typer.Argument(..., help="on or off"),
) -> None:
    """Turn the sound flag on or off."""
    state = state.strip().lower()
    if state not in ("on", "off"):
        console.print("[red]State must be 'on' or 'off'[/red]")
        raise typer.Exit(ERROR_INVALID_ARGS)
    _service().set_audio_enabled(state == "on")
    console.print(f"[green]Sound {state}[/green]")


@app.command("set-key")
def set_key(
    api_key: str = typer.Argument(..., help="Gemini API key ('' to remove)"),
) -> None:
    """Store the Gemini API key in the config file."""
    svc = _service()
    svc.set_api_key(api_key)
    if svc.config.gemini.api_key:
        console.print("[green]API key saved[/green]")
    else:
        console.print("[yellow]API key removed; static texts will be used[/yellow]")
