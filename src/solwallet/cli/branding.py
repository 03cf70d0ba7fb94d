"""SolWallet CLI styling: theme, banner and message panels."""

from __future__ import annotations

import os
import time
from collections.abc import Iterable

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

SOLWALLET_THEME = Theme(
    {
        "solwallet.banner.primary": "bold #9945FF",
        "solwallet.banner.secondary": "bold #14F195",
        "solwallet.prompt": "bold #A855F7",

        "solwallet.system.border": "#38BDF8",
        "solwallet.system.text": "#E6FFFA",
        "solwallet.system.header": "bold #38BDF8",

        "solwallet.success.border": "#14F195",
        "solwallet.success.text": "#E6FFFA",
        "solwallet.success.header": "bold #14F195",

        "solwallet.warning.border": "#FBBF24",
        "solwallet.warning.text": "#FEF3C7",
        "solwallet.warning.header": "bold #FBBF24",

        "solwallet.error.border": "#FB7185",
        "solwallet.error.text": "#FEE2E2",
        "solwallet.error.header": "bold #FB7185",

        "solwallet.text.secondary": "#94A3B8",
        "solwallet.text.dim": "dim #64748B",

        "solwallet.log.info": "#38BDF8",
        "solwallet.log.warn": "#FBBF24",
        "solwallet.log.error": "#FB7185",
    }
)

BANNER_LINES: tuple[str, ...] = (
    "",
    "[#9945FF] ___  ___  _ __      __  _   _    _    ___ _____ ",
    "[#6E8CFF]/ __|/ _ \\| |\\ \\    / /_/_\\ | |  | |  | __|_   _|",
    "[#3CDCE1]\\__ \\ (_) | |_\\ \\/\\/ / / _ \\| |__| |__| _|  | |  ",
    "[#14F195]|___/\\___/|____\\_/\\_/ /_/ \\_\\____|____|___| |_|  ",
    "",
)

_PANEL_STYLES: dict[str, tuple[str, str]] = {
    "system": ("🔔 SolWallet", "system"),
    "success": ("✓ Done", "success"),
    "warning": ("⚠️ Warning", "warning"),
    "error": ("✗ Error", "error"),
}


def themed_console(**kwargs: object) -> Console:
    """Return a Console configured with the SolWallet theme."""
    return Console(theme=SOLWALLET_THEME, **kwargs)


def banner_lines() -> Iterable[Text]:
    for line in BANNER_LINES:
        yield Text.from_markup(line)


def render_banner(console: Console, *, animate: bool = True) -> None:
    """Render the SolWallet banner with optional animation."""
    if os.environ.get("SOLWALLET_DISABLE_BANNER"):
        animate = False

    delay = 0.05 if animate and console.is_terminal else 0.0
    for line in banner_lines():
        console.print(line, overflow="ignore", crop=False)
        if delay:
            time.sleep(delay)
    console.print()


def create_message_panel(role: str, message: str, *, title: str | None = None) -> Panel:
    """Wrap a command response in a panel styled for its role.

    Unknown roles fall back to the neutral system style.
    """
    default_title, style = _PANEL_STYLES.get(role, _PANEL_STYLES["system"])
    return Panel(
        Text(message, style=f"solwallet.{style}.text"),
        title=f"[solwallet.{style}.header]{title or default_title}[/]",
        title_align="left",
        border_style=f"solwallet.{style}.border",
        box=box.ROUNDED,
        padding=(1, 2),
        expand=False,
    )


__all__ = [
    "BANNER_LINES",
    "SOLWALLET_THEME",
    "banner_lines",
    "create_message_panel",
    "render_banner",
    "themed_console",
]
