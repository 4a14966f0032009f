"""CLI commands for foxgate."""

import json
import sys
import threading
from pathlib import Path

import typer
from rich.console import Console

from foxgate import __logo__, __version__

app = typer.Typer(
    name="foxgate",
    help=f"{__logo__} foxgate - FoxControl task queueing HTTP gateway server",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} foxgate v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True,
        help="Show version information",
    ),
):
    """foxgate - FoxControl task queueing HTTP gateway server."""
    pass


def main() -> None:
    """Console script entry point; malformed arguments exit with status 1."""
    try:
        app()
    except SystemExit as exc:
        # Usage errors exit with 2.
        if exc.code == 2:
            sys.exit(1)
        raise


# ============================================================================
# Config Commands
# ============================================================================


config_app = typer.Typer(help="Manage foxgate config")
app.add_typer(config_app, name="config")


@config_app.command("check")
def config_check(
    config: Path | None = typer.Option(None, "--config", help="Config path to validate"),
):
    """Validate config JSON structure and schema."""
    from foxgate.config.loader import convert_keys, get_config_path
    from foxgate.config.schema import Config

    config_path = (config or get_config_path()).expanduser()
    if not config_path.exists():
        console.print(f"[red]Config file not found:[/red] {config_path}")
        raise typer.Exit(2)

    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid JSON:[/red] {exc}")
        raise typer.Exit(2) from exc

    try:
        cfg = Config.model_validate(convert_keys(raw))
    except Exception as exc:
        console.print(f"[red]Schema validation failed:[/red] {exc}")
        raise typer.Exit(1) from exc

    problems = cfg.validation_errors()
    if problems:
        for item in problems:
            console.print(f"[red]Invalid setting:[/red] {item}")
        raise typer.Exit(1)

    console.print("[green]✓[/green] Config validation passed")
    console.print(f"path={config_path}")
    console.print(
        f"listen={cfg.server.host}:{cfg.server.port} "
        f"backlog={cfg.server.backlog} endpoint=/{cfg.server.endpoint.strip('/')}"
    )


# ============================================================================
# Gateway Server
# ============================================================================


def _configure_logging(verbose: bool, quiet: bool) -> None:
    from loguru import logger

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")
    if quiet:
        logger.disable("foxgate")
    else:
        logger.enable("foxgate")


@app.command()
def serve(
    address: str | None = typer.Option(
        None, "--address", "-a", help="Address on which to listen for HTTP requests"
    ),
    port: int | None = typer.Option(
        None, "--port", "-p", help="Port on which to listen for HTTP requests"
    ),
    backlog: int | None = typer.Option(
        None, "--backlog", "-b", help="Maximum number of queued tasks"
    ),
    password: str | None = typer.Option(
        None, "--password", envvar="FOXGATE_PASSWORD", help="Static password the device authenticates with"
    ),
    endpoint: str | None = typer.Option(
        None, "--endpoint", "-e", help="Path of the client enqueue endpoint"
    ),
    config: Path | None = typer.Option(None, "--config", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", help="Disable runtime logs"),
    interactive: bool | None = typer.Option(
        None, "--console/--no-console", help="Run the interactive operator console"
    ),
):
    """Start the gateway HTTP server and operator console."""
    from loguru import logger
    from pydantic import ValidationError

    from foxgate.api.server import GatewayHTTPServer
    from foxgate.cli.console import OperatorConsole, build_line_reader
    from foxgate.config.loader import load_config
    from foxgate.gateway import ControlChannel, Gateway, run_control_loop
    from foxgate.utils.helpers import get_data_path

    try:
        cfg = load_config(config.expanduser() if config else None)
    except ValidationError as exc:
        console.print(f"[red]Schema validation failed:[/red] {exc}")
        raise typer.Exit(1) from exc
    if address:
        cfg.server.host = address
    if port is not None:
        cfg.server.port = port
    if backlog is not None:
        cfg.server.backlog = backlog
    if password is not None:
        cfg.server.password = password
    if endpoint is not None:
        cfg.server.endpoint = endpoint
    if interactive is not None:
        cfg.console.enabled = interactive

    problems = cfg.validation_errors()
    if problems:
        for item in problems:
            console.print(f"[red]Invalid setting:[/red] {item}")
        raise typer.Exit(1)

    _configure_logging(verbose, quiet)
    gateway = Gateway.from_config(cfg)
    server = GatewayHTTPServer(
        host=cfg.server.host,
        port=cfg.server.port,
        gateway=gateway,
        endpoint=cfg.server.endpoint,
        max_request_body_bytes=cfg.server.max_request_body_bytes,
    )
    try:
        server.start()
    except OSError as exc:
        console.print(f"[red]Failed to listen on {cfg.server.host}:{cfg.server.port}:[/red] {exc}")
        raise typer.Exit(1) from exc

    console.print(
        f"{__logo__} foxgate listening on http://{cfg.server.host}:{server.bound_port} "
        f"(backlog={cfg.server.backlog}, endpoint={server.endpoint})"
    )

    running = threading.Event()
    running.set()
    channel = ControlChannel()
    if cfg.console.enabled:
        history_path = get_data_path() / "console_history" if cfg.console.history else None
        OperatorConsole(channel, running, read_line=build_line_reader(history_path)).start()
        console.print("Type [bold]help[/bold] for operator commands")

    try:
        run_control_loop(channel, gateway, running)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        running.clear()
        server.stop()
    console.print("Gateway stopped")


if __name__ == "__main__":
    main()
