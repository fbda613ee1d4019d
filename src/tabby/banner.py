"""Startup banner printed to stderr before a build or serve.

Shows the version, the mode, the resolved source (and output) directory
and, in ``run`` mode, the URL to open.  Colour follows ``NO_COLOR`` and
``TERM=dumb`` and is only used when stderr is a terminal.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from tabby._types import TabbyMode
    from tabby.config import TabbyConfig

_ANSI = {
    "bold": "1",
    "dim": "2",
    "green": "32",
    "yellow": "33",
    "cyan": "36",
    "orange": "38;5;214",
}

_MODE_COLOURS = {"build": "yellow", "run": "green"}

_RULE_WIDTH = 43


def _colour_enabled(stream: TextIO) -> bool:
    if os.environ.get("NO_COLOR") or os.environ.get("TERM") == "dumb":
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def _display_host(host: str) -> str:
    """Wildcard binds are reachable on localhost."""
    return "localhost" if host in ("", "0.0.0.0") else host


def print_banner(config: TabbyConfig, mode: TabbyMode) -> None:
    """Print the tabby startup banner to stderr.

    Args:
        config: Resolved TabbyConfig.
        mode: ``"build"`` or ``"run"``.

    """
    from tabby import __version__

    stream = sys.stderr
    colour = _colour_enabled(stream)

    def paint(text: str, *styles: str) -> str:
        if not colour or not styles:
            return text
        codes = ";".join(_ANSI[s] for s in styles)
        return f"\033[{codes}m{text}\033[0m"

    badge = paint(f"[{mode}]", _MODE_COLOURS.get(mode, "dim"))
    lines = [
        "",
        f"  {paint('tabby', 'orange', 'bold')} {paint(f'v{__version__}', 'dim')}  {badge}",
        "  " + paint("─" * _RULE_WIDTH, "dim"),
        f"  {paint('├─', 'dim')} source: {paint(str(config.source_path), 'dim')}",
    ]

    if mode == "build":
        lines.append(f"  {paint('└─', 'dim')} output: {paint(str(config.destination_path), 'dim')}")
    else:
        url = f"http://{_display_host(config.host)}:{config.port}"
        lines += [
            f"  {paint('└─', 'dim')} {paint('live', 'green')} reload on {paint('/__ws', 'dim')}",
            "",
            "  " + paint(url, "bold", "cyan"),
            "",
            "  " + paint("Watching for changes...", "dim"),
        ]

    if config.debug:
        lines.append(f"  {paint('!', 'yellow')} debug logging enabled")

    lines.append("")
    print("\n".join(lines), file=stream)
