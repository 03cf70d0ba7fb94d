from __future__ import annotations

from io import StringIO

import pytest
from rich.console import Console

from solwallet.cli.branding import BANNER_LINES, SOLWALLET_THEME, create_message_panel, render_banner


def test_render_banner_respects_disable(monkeypatch: pytest.MonkeyPatch) -> None:
    stream = StringIO()
    console = Console(file=stream, force_terminal=True, color_system=None)
    monkeypatch.setenv("SOLWALLET_DISABLE_BANNER", "1")
    render_banner(console, animate=True)
    output = stream.getvalue()
    assert len(output.splitlines()) >= len(BANNER_LINES)


def test_message_panel_falls_back_to_system_style() -> None:
    stream = StringIO()
    console = Console(file=stream, force_terminal=True, color_system=None, theme=SOLWALLET_THEME, width=80)

    console.print(create_message_panel("mystery", "hello there"))
    console.print(create_message_panel("error", "boom", title="Failure"))

    output = stream.getvalue()
    assert "hello there" in output
    assert "Failure" in output
