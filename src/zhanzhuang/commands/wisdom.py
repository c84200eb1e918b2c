"""Command 'wisdom': print a quote and posture tip."""

import asyncio

from rich.panel import Panel

from zhanzhuang.services.app_context import build_app_context
from zhanzhuang.ui.display import quote_panel
from zhanzhuang.utils.logger import get_logger
from zhanzhuang.utils.ui.console import get_console

console = get_console()
logger = get_logger("cli")


def wisdom() -> None:
    """Fetch a Zhan Zhuang quote (static text when offline)."""
    ctx = build_app_context()

    async def _fetch():
        async with ctx.wisdom:
            return await ctx.wisdom.fetch_ambient_wisdom()

    result = asyncio.run(_fetch())
    if result.error:
        logger.warning("Ambient quote fell back to static text: %s", result.error)

    console.print(quote_panel(result.value))
    console.print(Panel(result.value.advice, title="要领", border_style="dim"))
    if result.is_fallback:
        console.print("[dim]Offline text (no API key or the request failed)[/dim]")
