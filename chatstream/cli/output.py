"""Output formatting utilities for the CLI."""

from __future__ import annotations

import json
from typing import AsyncIterator

from rich.console import Console
from rich.panel import Panel
from rich.markup import escape
from rich.syntax import Syntax

from chatstream.errors import ChatStreamError


class OutputFormatter:
    """Rich-based output formatting for the chatstream CLI."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    async def stream_text(self, fragments: AsyncIterator[str]) -> str:
        """Print fragments as they arrive; return the full text."""
        parts: list[str] = []
        async for fragment in fragments:
            parts.append(fragment)
            self.console.print(fragment, end="", markup=False, highlight=False)
        self.console.print()
        return "".join(parts)

    def format_config(self, config: dict) -> None:
        config_str = json.dumps(config, indent=2, default=str)
        self.console.print(Syntax(config_str, "json", theme="monokai"))

    def format_error(self, error: ChatStreamError) -> None:
        lines = [f"[bold]{type(error).__name__}[/bold]", "", escape(error.message)]
        if error.cause is not None and error.cause is not error:
            lines += ["", f"[dim]Cause:[/dim] {escape(repr(error.cause))}"]
        self.console.print(Panel("\n".join(lines), title="Request failed", border_style="red"))
