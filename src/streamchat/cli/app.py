"""Main CLI application using Typer."""
import asyncio
import contextlib
import json
import signal
from pathlib import Path

import httpx
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..client import ChatOrchestrator, SendStatus
from ..llm.models import Role
from ..models import clamp_temperature, normalize_max_tokens, now_ms
from .providers import configure_logging, get_server_url, get_store, get_timeout, get_upstream

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="streamchat",
    help="Streaming chat proxy for hosted language models, with a terminal client",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", envvar="STREAMCHAT_HOST", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", envvar="STREAMCHAT_PORT", help="Bind port"),
    log_level: str | None = typer.Option(
        None, "--log-level", "-l", help="Log level (debug, info, warning, error)"
    ),
):
    """Run the streaming chat proxy (POST /api/chat)."""
    import uvicorn

    from ..server import create_app

    configure_logging(log_level)
    provider = get_upstream(console)
    console.print(f"[dim]Serving streamchat on http://{host}:{port}/api/chat[/dim]")
    uvicorn.run(create_app(provider), host=host, port=port, log_config=None)


@app.command()
def chat(
    server_url: str | None = typer.Option(None, "--server-url", "-s", help="Proxy base URL"),
    export_dir: Path | None = typer.Option(
        None, "--export-dir", file_okay=False, help="Directory for exported chats"
    ),
):
    """Start the interactive chat UI."""
    from ..ui import run_textual_tui

    configure_logging()
    asyncio.run(run_textual_tui(
        store=get_store(),
        server_url=get_server_url(server_url),
        timeout=get_timeout(),
        export_dir=export_dir,
    ))


@app.command()
def ask(
    text: str = typer.Argument(..., help="Message to send"),
    model: str | None = typer.Option(None, "--model", "-m", help="Model for this message"),
    temperature: float | None = typer.Option(None, "--temperature", "-t", help="Sampling temperature (0-1)"),
    max_tokens: int | None = typer.Option(None, "--max-tokens", help="Maximum tokens to generate"),
    system: str | None = typer.Option(None, "--system", help="System prompt for this message"),
    server_url: str | None = typer.Option(None, "--server-url", "-s", help="Proxy base URL"),
):
    """Send one message and stream the reply. Ctrl+C stops streaming."""
    configure_logging()
    updates = {}
    if model is not None:
        updates["model"] = model
    if temperature is not None:
        updates["temperature"] = clamp_temperature(temperature)
    if max_tokens is not None:
        updates["max_tokens"] = normalize_max_tokens(max_tokens)
    if system is not None:
        updates["system_prompt"] = system

    async def _ask():
        async with get_store() as store, httpx.AsyncClient(
            base_url=get_server_url(server_url), timeout=get_timeout()
        ) as client:
            preferences = (await store.load_preferences()).model_copy(update=updates)
            orchestrator = ChatOrchestrator(client, store, conversation=await store.load_history())
            printed = 0

            def _print_delta(snapshot: str) -> None:
                nonlocal printed
                console.print(snapshot[printed:], end="", markup=False, highlight=False)
                printed = len(snapshot)

            loop = asyncio.get_running_loop()
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(signal.SIGINT, orchestrator.cancel)
            try:
                return await orchestrator.send(text, preferences, on_partial=_print_delta)
            finally:
                with contextlib.suppress(NotImplementedError):
                    loop.remove_signal_handler(signal.SIGINT)

    outcome = asyncio.run(_ask())
    console.print()

    if outcome.status is SendStatus.REJECTED:
        console.print("[yellow]Nothing to send.[/yellow]")
        raise typer.Exit(code=1)
    if outcome.status is SendStatus.STOPPED:
        console.print("[yellow]Streaming stopped.[/yellow]")
        raise typer.Exit(code=130)
    if outcome.status is SendStatus.FAILED:
        console.print(f"[red]Error: {outcome.error.message}[/red]")
        raise typer.Exit(code=1)


@app.command()
def history():
    """Show the stored conversation."""
    async def _load():
        async with get_store() as store:
            return await store.load_history()

    conversation = asyncio.run(_load())
    messages = conversation.display_messages()
    if not messages:
        console.print("[dim]No messages yet.[/dim]")
        return

    for message in messages:
        title = "You" if message.role == Role.USER else "Assistant"
        style = "green" if message.role == Role.USER else "magenta"
        console.print(Panel(Text(message.content), title=title, title_align="left", border_style=style))


@app.command()
def clear():
    """Clear the stored conversation."""
    async def _clear():
        async with get_store() as store:
            await store.clear_history()

    asyncio.run(_clear())
    console.print("[green]Chat history cleared.[/green]")


@app.command()
def export(
    path: Path | None = typer.Argument(None, dir_okay=False, help="Output file (default: chat-<ms>.json)"),
):
    """Export preferences and messages as JSON."""
    from ..client import build_export

    async def _load():
        async with get_store() as store:
            return build_export(await store.load_history(), await store.load_preferences())

    payload = asyncio.run(_load())
    target = path or Path(f"chat-{now_ms()}.json")
    try:
        target.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Exported {len(payload['messages'])} messages to {target}[/green]")


@app.command()
def prefs(
    model: str | None = typer.Option(None, "--model", "-m", help="Model identifier"),
    temperature: float | None = typer.Option(None, "--temperature", "-t", help="Sampling temperature (0-1)"),
    max_tokens: str | None = typer.Option(
        None, "--max-tokens", help="Maximum tokens; empty string unsets it"
    ),
    system: str | None = typer.Option(None, "--system", help="System prompt; empty string removes it"),
):
    """Show or update stored preferences."""
    updates = {}
    if model is not None:
        updates["model"] = model
    if temperature is not None:
        updates["temperature"] = clamp_temperature(temperature)
    if max_tokens is not None:
        updates["max_tokens"] = normalize_max_tokens(max_tokens)
    if system is not None:
        updates["system_prompt"] = system

    async def _update():
        async with get_store() as store:
            stored = await store.load_preferences()
            if updates:
                stored = stored.model_copy(update=updates)
                await store.save_preferences(stored)
            return stored

    preferences = asyncio.run(_update())
    if updates:
        console.print("[green]Preferences saved.[/green]")

    table = Table(title="Preferences")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Model", preferences.model)
    table.add_row("Temperature", f"{preferences.temperature:.2f}")
    table.add_row("Max tokens", "unset" if preferences.max_tokens is None else str(preferences.max_tokens))
    table.add_row("System prompt", Text(preferences.system_prompt) if preferences.system_prompt else "[dim]none[/dim]")
    console.print(table)


if __name__ == "__main__":
    app()
