"""
Main CLI application entry point.

This module contains the Typer application and command handlers for
DeepSeek Chat.
"""

from typing import Optional
import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from deepseek_chat import VERSION
from deepseek_chat.config.env_loader import API_KEY_VAR, EnvFileLoader
from deepseek_chat.config.settings import DeepSeekSettings, get_settings
from deepseek_chat.core.client import CompletionClient, Outcome, get_message
from deepseek_chat.cli.session import ChatSession

# Create the main Typer application
app = typer.Typer(
    name="deepseek-chat",
    help="DeepSeek Chat - chat with DeepSeek from the terminal",
    add_completion=False,
    rich_markup_mode="rich",
)

# Rich console for output
console = Console()
err_console = Console(stderr=True)

EXIT_WORDS = {"exit", "quit", "/exit", "/quit"}


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"[bold blue]DeepSeek Chat[/bold blue] version [green]{VERSION}[/green]")
        raise typer.Exit()


@app.callback()
def cli_callback(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """
    DeepSeek Chat - chat with DeepSeek from the terminal.
    """
    pass


def _load_settings() -> DeepSeekSettings:
    EnvFileLoader().load_env_file()
    settings = get_settings()
    level = "DEBUG" if settings.debug else settings.log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )
    return settings


def _render(outcome: Outcome) -> None:
    if outcome.ok:
        console.print(Panel(Text(outcome.text), title="DeepSeek", border_style="green"))
    else:
        console.print(Text(outcome.text, style="red"))


def _ask(session: ChatSession, message: str) -> Outcome:
    """Send one message, cancelling it on Ctrl+C."""
    session.submit(message)
    try:
        with console.status("[dim]Waiting for DeepSeek... (Ctrl+C to cancel)[/dim]"):
            outcome = session.wait()
    except KeyboardInterrupt:
        session.cancel()
        outcome = session.wait()
    _render(outcome)
    return outcome


@app.command("chat")
def chat_command(
    message: Optional[str] = typer.Argument(None, help="Message to send to DeepSeek"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model to use"),
) -> None:
    """Send a single message, or start an interactive chat without one."""
    settings = _load_settings()

    if not settings.is_configured:
        console.print(f"[red]Error:[/red] {get_message('missing_api_key', settings.locale)}")
        console.print(f"[dim]Set {API_KEY_VAR} or run 'deepseek-chat config --set-key'[/dim]")
        raise typer.Exit(1)

    if model:
        settings = settings.model_copy(update={"model": model})

    session = ChatSession(CompletionClient.from_settings(settings))

    if message:
        outcome = _ask(session, message.strip())
        if not outcome.ok:
            raise typer.Exit(1)
        return

    console.print(f"[bold blue]DeepSeek Chat[/bold blue] [dim]({settings.model}) - type 'exit' to quit[/dim]")
    while True:
        try:
            text = console.input("[bold]You:[/bold] ")
        except (EOFError, KeyboardInterrupt):
            console.print()
            break

        if text.strip().lower() in EXIT_WORDS:
            break
        if not text.strip():
            continue

        _ask(session, text.strip())


@app.command("config")
def config_command(
    set_key: bool = typer.Option(False, "--set-key", help="Prompt for and save the API key"),
) -> None:
    """Show the effective configuration, or save the API key with --set-key."""
    loader = EnvFileLoader()

    if set_key:
        api_key = typer.prompt("DeepSeek API key", hide_input=True)
        if not api_key.strip():
            console.print("[red]Error:[/red] The API key cannot be empty.")
            raise typer.Exit(1)
        path = loader.save_api_key(api_key)
        console.print(f"[green]✓[/green] API key saved to {path}")
        return

    loader.load_env_file()
    settings = get_settings()

    table = Table(title="DeepSeek Chat Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for key, value in settings.to_dict().items():
        table.add_row(key, str(value))
    console.print(table)

    if not settings.is_configured:
        console.print("[yellow]No API key configured.[/yellow] Run 'deepseek-chat config --set-key'.")


def main() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    main()
