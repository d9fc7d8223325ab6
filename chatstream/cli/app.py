"""
Command-line interface for chatstream.

Usage:
    chatstream ask TEXT [--system S] [--tools-file F] [--context-file F]
    chatstream config show|validate
    chatstream version
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape

from chatstream import __version__
from chatstream.config import load_config
from chatstream.errors import ChatStreamError

app = typer.Typer(name="chatstream", help="Streaming chat completions")
config_app = typer.Typer(help="Configuration management")

app.add_typer(config_app, name="config")

console = Console()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _get_config_path(explicit: Path | None = None) -> Path | None:
    """Find config file in standard locations."""
    if explicit is not None:
        return explicit
    candidates = [
        Path.cwd() / "chatstream.yaml",
        Path.cwd() / "chatstream.yml",
        Path.home() / ".config" / "chatstream" / "config.yaml",
    ]
    for p in candidates:
        if p.is_file():
            return p
    return None


def _read_json(path: Path | None) -> Any:
    if path is None:
        return None
    return json.loads(path.read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command()
def ask(
    text: str = typer.Argument(..., help="User message"),
    system: Optional[str] = typer.Option(None, "--system", "-s", help="System prompt"),
    tools_file: Optional[Path] = typer.Option(None, help="JSON list of tool declarations"),
    context_file: Optional[Path] = typer.Option(None, help="JSON object of pre-fetched tool results"),
    model: Optional[str] = typer.Option(None, help="Override the configured model"),
    config: Optional[Path] = typer.Option(None, "--config", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Send one message and stream the answer."""
    from chatstream.cli.output import OutputFormatter
    from chatstream.orchestrator.core import ChatStreamService
    from chatstream.types import SendMessageParams, ToolDeclaration

    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    formatter = OutputFormatter(console)
    try:
        cfg = load_config(_get_config_path(config), cli_overrides={"model": model})
        service = ChatStreamService(cfg)
        raw_tools = _read_json(tools_file)
        if raw_tools is not None and not isinstance(raw_tools, list):
            raise ValueError(f"{tools_file} must hold a JSON list of tool declarations")
        context_data = _read_json(context_file)
        if context_data is not None and not isinstance(context_data, dict):
            raise ValueError(f"{context_file} must hold a JSON object keyed by tool name")
        params = SendMessageParams(
            user_id="cli",
            text=text,
            system_prompt=system,
            tools=[ToolDeclaration.from_dict(t) for t in raw_tools] if raw_tools is not None else None,
            context_data=context_data,
        )
        asyncio.run(formatter.stream_text(service.stream_message(params)))
    except ChatStreamError as e:
        formatter.format_error(e)
        raise typer.Exit(1)
    except (OSError, ValueError, KeyError, TypeError) as e:
        console.print(f"[red]Invalid input:[/red] {escape(str(e))}")
        raise typer.Exit(2)


@config_app.command("show")
def config_show(
    config: Optional[Path] = typer.Option(None, "--config", help="Config file path"),
):
    """Show effective config (API key redacted)."""
    from chatstream.cli.output import OutputFormatter

    cfg = load_config(_get_config_path(config))
    formatter = OutputFormatter(console)
    formatter.format_config(cfg.to_dict())


@config_app.command("validate")
def config_validate(
    config: Optional[Path] = typer.Option(None, "--config", help="Config file path"),
):
    """Validate config and report missing required values."""
    config_path = _get_config_path(config)
    try:
        cfg = load_config(config_path)
        cfg.validate()
    except (ChatStreamError, ValueError, TypeError) as e:
        console.print(f"[red]Config validation failed:[/red] {e}")
        raise typer.Exit(1)

    console.print("[green]Config is valid.[/green]")
    if config_path:
        console.print(f"  Loaded from: {config_path}")
    else:
        console.print("  [dim]No config file found, using defaults and environment.[/dim]")
    console.print(f"  Endpoint: {cfg.base_url}")
    console.print(f"  Model: {cfg.model}")


@app.command()
def version():
    """Show version."""
    console.print(f"chatstream v{__version__}")


def main():
    app()


if __name__ == "__main__":
    main()
