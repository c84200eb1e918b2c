"""Main entry point for the zhanzhuang command line."""

import typer

from zhanzhuang.commands import config, history, session, stats, version, wisdom
from zhanzhuang.exceptions import ConfigError
from zhanzhuang.utils.exit_codes import ERROR_CONFIG, get_exit_code_name
from zhanzhuang.utils.logger import get_logger
from zhanzhuang.utils.typer_helpers import SuggestingGroup
from zhanzhuang.utils.ui.console import print_error

app = typer.Typer(
    name="zhanzhuang",
    cls=SuggestingGroup,
    help="Standing-meditation (Zhan Zhuang) timer with practice streaks",
    no_args_is_help=True,
)

app.add_typer(config.app, name="config", help="Configuration management")

app.command("start")(session.start)
app.command("history")(history.history)
app.command("stats")(stats.stats)
app.command("wisdom")(wisdom.wisdom)
app.command("version")(version.version)


@app.callback()
def main_callback() -> None:
    """Initialise logging before any command runs."""
    get_logger()


def main() -> None:
    try:
        app()
    except ConfigError as e:
        get_logger("cli").error("%s: %s", get_exit_code_name(ERROR_CONFIG), e)
        print_error(str(e))
        raise SystemExit(ERROR_CONFIG) from e


if __name__ == "__main__":
    main()
