"""CLI for oneshot-agent - talk to the 1Shot agent and run its actions from the terminal."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from oneshot_agent.config import AppConfig, is_unresolved, resolve_config
from oneshot_agent.exceptions import OneShotAgentError

app = typer.Typer(
    name="oneshot-agent",
    help="A conversational agent that executes smart-contract methods through 1Shot API.",
    no_args_is_help=True,
)
console = Console()

_config_path: Optional[Path] = None


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        console.print(f"oneshot-agent {version('oneshot-agent')}")
        raise typer.Exit()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # Our own loggers stay at INFO so action calls are visible without --verbose.
    logging.getLogger("oneshot_agent").setLevel(logging.DEBUG if verbose else logging.INFO)


@app.callback()
def main(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to oneshot-agent.yaml",
        envvar="ONESHOT_AGENT_CONFIG",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """A conversational agent that executes smart-contract methods through 1Shot API."""
    global _config_path
    _config_path = config
    _setup_logging(verbose)


def _run(coro):
    """Run an async function synchronously."""
    return asyncio.run(coro)


def _load_config() -> AppConfig:
    try:
        return resolve_config(_config_path)
    except OneShotAgentError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)


def _fail(exc: Exception) -> None:
    console.print(f"[red]{exc}[/red]")
    raise typer.Exit(1)


# ------------------------------------------------------------------
# chat / ask
# ------------------------------------------------------------------


@app.command()
def chat(
    thread: str = typer.Option("default", "--thread", "-t", help="Conversation thread id"),
):
    """Start an interactive chat with the agent."""
    from oneshot_agent.agent.session import get_agent, reset_agent

    config = _load_config()

    async def _chat():
        try:
            agent = await get_agent(config)
        except OneShotAgentError as exc:
            _fail(exc)

        console.print("[bold]Chatting with the 1Shot agent[/bold]")
        console.print("[dim]Type 'exit' to end the conversation.[/dim]\n")
        try:
            while True:
                try:
                    user_input = console.input("[bold blue]You>[/bold blue] ")
                except (EOFError, KeyboardInterrupt):
                    break
                if user_input.strip().lower() in ("exit", "quit", "bye"):
                    break
                if not user_input.strip():
                    continue

                with console.status("Thinking..."):
                    try:
                        reply = await agent.chat(user_input, thread_id=thread)
                    except Exception as exc:
                        logging.getLogger("oneshot_agent.cli").exception("Chat turn failed")
                        reply = f"[red]Error: {exc}[/red]"
                console.print(f"[bold green]Agent>[/bold green] {reply}\n")
        finally:
            await reset_agent()
        console.print("[dim]Chat ended.[/dim]")

    _run(_chat())


@app.command()
def ask(
    message: str = typer.Argument(help="What you want the agent to do"),
):
    """Send a single message to the agent and print the reply."""
    from oneshot_agent.agent.session import get_agent, reset_agent

    config = _load_config()

    async def _ask():
        try:
            agent = await get_agent(config)
            with console.status("Thinking..."):
                return await agent.chat(message)
        finally:
            await reset_agent()

    try:
        reply = _run(_ask())
    except OneShotAgentError as exc:
        _fail(exc)
    console.print(Panel(reply, title="Agent"))


# ------------------------------------------------------------------
# actions / invoke
# ------------------------------------------------------------------


@app.command()
def actions():
    """List the actions the agent can call."""
    from oneshot_agent.agent.session import build_runtime

    config = _load_config()
    try:
        runtime = build_runtime(config, require_credentials=False)
    except OneShotAgentError as exc:
        _fail(exc)

    table = Table(title="Agent Actions")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Inputs")
    table.add_column("Description", style="dim")
    for action in runtime.registry.list():
        props = action.parameters.get("properties", {})
        required = set(action.parameters.get("required", []))
        inputs = ", ".join(f"{p}*" if p in required else p for p in props)
        table.add_row(action.name, inputs, action.description[:120])
    console.print(table)
    console.print("[dim]* required[/dim]")
    _run(runtime.client.aclose())


@app.command()
def invoke(
    name: str = typer.Argument(help="Action name, e.g. list-chains"),
    args: str = typer.Option("{}", "--args", "-a", help="Action input as a JSON object"),
):
    """Run one action directly, without the LLM, and print its result envelope."""
    from oneshot_agent.agent.session import build_runtime

    try:
        arguments = json.loads(args)
    except json.JSONDecodeError as exc:
        _fail(Exception(f"--args is not valid JSON: {exc}"))
    if not isinstance(arguments, dict):
        _fail(Exception("--args must be a JSON object"))

    config = _load_config()
    try:
        runtime = build_runtime(config)
    except OneShotAgentError as exc:
        _fail(exc)
    if name not in runtime.registry:
        _run(runtime.client.aclose())
        _fail(Exception(f"Unknown action '{name}'. Run 'oneshot-agent actions' to list them."))

    async def _invoke():
        try:
            return await runtime.registry.invoke(name, arguments)
        finally:
            await runtime.client.aclose()

    with console.status(f"Running {name}..."):
        result = _run(_invoke())
    console.print_json(result.to_json())
    if not result.success:
        raise typer.Exit(1)


# ------------------------------------------------------------------
# serve
# ------------------------------------------------------------------


@app.command()
def serve(
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to serve on"),
    host: Optional[str] = typer.Option(None, "--host", help="Host to bind to"),
):
    """Serve the agent over HTTP (POST /api/agent)."""
    from oneshot_agent.api.server import run_server

    config = _load_config()
    bind_host = host or config.server.host
    bind_port = port or config.server.port
    console.print(f"[bold green]Serving agent at http://{bind_host}:{bind_port}/api/agent[/bold green]")
    run_server(config, host=bind_host, port=bind_port)


# ------------------------------------------------------------------
# wallet
# ------------------------------------------------------------------

wallet_app = typer.Typer(
    name="wallet",
    help="Manage the local signing wallet.",
    no_args_is_help=True,
)
app.add_typer(wallet_app, name="wallet")

DEFAULT_KEYSTORE_DIR = Path.home() / ".oneshot-agent"


def _keystore_dir(config: AppConfig) -> Path:
    if config.wallet.keystore_dir:
        return Path(config.wallet.keystore_dir).expanduser()
    return DEFAULT_KEYSTORE_DIR


@wallet_app.command("create")
def wallet_create():
    """Generate a new local key in an encrypted keystore."""
    from oneshot_agent.wallet.keystore import create_keystore

    config = _load_config()
    keystore_dir = _keystore_dir(config)

    password = console.input("[bold]Set wallet password: [/bold]", password=True)
    confirm = console.input("[bold]Confirm password: [/bold]", password=True)
    if password != confirm:
        console.print("[red]Passwords do not match.[/red]")
        raise typer.Exit(1)

    try:
        addr = create_keystore(keystore_dir, password)
    except FileExistsError as exc:
        console.print(f"[yellow]{exc}[/yellow]")
        raise typer.Exit(1)

    console.print(Panel(
        f"[bold green]Wallet created![/bold green]\n\n"
        f"Address: [cyan]{addr}[/cyan]\n\n"
        f"[dim]Keystore: {keystore_dir}\n"
        f"Set wallet.keystore_dir and wallet.keystore_password in your config to use it.[/dim]",
        title="Local Wallet",
    ))


@wallet_app.command("address")
def wallet_address():
    """Show the local wallet address."""
    from eth_account import Account

    from oneshot_agent.wallet.keystore import keystore_address

    config = _load_config()
    addr = None
    if not is_unresolved(config.wallet.private_key):
        try:
            addr = Account.from_key(config.wallet.private_key).address
        except ValueError as exc:
            _fail(exc)
    else:
        addr = keystore_address(_keystore_dir(config))

    if addr is None:
        console.print("[yellow]No wallet found.[/yellow] Run 'oneshot-agent wallet create' first.")
        raise typer.Exit(1)

    console.print(Panel(
        f"[cyan]{addr}[/cyan]\n\n[dim]Network: {config.wallet.chain}[/dim]",
        title="Wallet Address",
    ))
