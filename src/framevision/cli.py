"""Frame Vision CLI."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from framevision import __version__
from framevision.app import APP_ID, FrameVisionApp
from framevision.common.logging import setup_logging
from framevision.config import Config, SettingsStore, load_config
from framevision.core import ConfigurationError, ResponseSession
from framevision.sdk.camera import create_camera
from framevision.sdk.display import ConsoleFrameDisplay, PhoneScreen
from framevision.sdk.llm import create_generation_client

app = typer.Typer(
    name="framevision",
    help="Frame Vision - ask a multimodal model about what the wearable sees",
    no_args_is_help=True,
)
console = Console()


def get_config(config_path: Optional[Path] = None, settings_path: Optional[Path] = None) -> Config:
    """Load configuration with stored settings applied."""
    config = load_config(config_path)
    return SettingsStore(settings_path).apply(config)


@app.command()
def run(
    mock: bool = typer.Option(False, "--mock", help="Use the mock camera and model"),
    page_size: Optional[int] = typer.Option(None, "--page-size", help="Lines per wearable page"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Config file"),
):
    """Run an interactive session, entering tap counts on stdin."""
    config = get_config(config_path)
    if mock:
        config.mock_mode = True
    if page_size is not None:
        config.display.page_size = page_size

    setup_logging(
        level=config.device.log_level,
        json_output=config.device.mode == "production",
        app_name=APP_ID,
    )

    try:
        vision_app = FrameVisionApp(
            config,
            camera=create_camera(config),
            generator=create_generation_client(config),
            display=ConsoleFrameDisplay(console, width=config.display.width),
        )
    except ConfigurationError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    PhoneScreen(console).attach(vision_app.bus)
    asyncio.run(vision_app.run_interactive())


@app.command()
def paginate(
    file: Optional[Path] = typer.Argument(None, help="Text file (stdin if omitted)"),
    page_size: int = typer.Option(5, "--page-size", help="Lines per page"),
    page: Optional[int] = typer.Option(None, "--page", min=1, help="Page number to show (1-based)"),
    chunk_size: int = typer.Option(16, "--chunk-size", help="Characters per streamed fragment"),
):
    """Stream a text through the pager and show one page."""
    text = file.read_text() if file else sys.stdin.read()

    try:
        session = ResponseSession(page_size)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)

    step = max(1, chunk_size)
    for i in range(0, len(text), step):
        session.append_fragment(text[i : i + step])

    if page is not None:
        for _ in range(session.page_count):
            session.previous_page()
        for _ in range(page - 1):
            session.next_page()

    view = session.snapshot()
    console.print(
        Panel(
            Text(view.text),
            title=f"Page {view.cursor + 1}/{view.page_count}",
            subtitle=f"{view.line_count} lines",
        )
    )


settings_cmd = typer.Typer(help="Manage stored API key and prompt")
app.add_typer(settings_cmd, name="settings")


@settings_cmd.command("show")
def settings_show(
    settings_path: Optional[Path] = typer.Option(None, "--file", help="Settings file"),
    json_output: bool = typer.Option(False, "--json", help="Print JSON"),
):
    """Show stored settings."""
    stored = SettingsStore(settings_path).load()
    masked = "*" * min(len(stored["api_key"]), 8) if stored["api_key"] else ""

    if json_output:
        print(json.dumps({"api_key": masked, "prompt": stored["prompt"]}, indent=2))
        return

    table = Table(title="Settings")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_row("api_key", masked or "[dim]unset[/]")
    table.add_row("prompt", stored["prompt"] or "[dim]unset[/]")
    console.print(table)


@settings_cmd.command("set-key")
def settings_set_key(
    api_key: str,
    settings_path: Optional[Path] = typer.Option(None, "--file", help="Settings file"),
):
    """Store the Gemini API key."""
    SettingsStore(settings_path).save_api_key(api_key)
    console.print("[green]API key saved[/]")


@settings_cmd.command("set-prompt")
def settings_set_prompt(
    prompt: str,
    settings_path: Optional[Path] = typer.Option(None, "--file", help="Settings file"),
):
    """Store the prompt sent with each photo."""
    SettingsStore(settings_path).save_prompt(prompt)
    console.print("[green]Prompt saved[/]")


@app.command()
def version():
    """Show version information."""
    console.print(f"[bold]Frame Vision[/] v{__version__}")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
