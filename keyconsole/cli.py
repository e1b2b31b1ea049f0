from __future__ import annotations

import json
from pathlib import Path

import typer
from rich import print

from . import __version__
from .commands.common import configure_logging, load_config_or_exit
from .commands.status_cmds import status_cmd, watch_cmd
from .config import get_config_path

app = typer.Typer(help="keyconsole: sync status and view state for the key management console")
config_app = typer.Typer(help="Inspect configuration")
app.add_typer(config_app, name="config")


@app.callback()
def main(
    ctx: typer.Context,
    log_level: str = typer.Option(None, "--log-level", help="Logging level (default from config)"),
) -> None:
    if ctx.invoked_subcommand == "version":
        return
    if log_level is None:
        log_level = load_config_or_exit().log_level
    configure_logging(log_level)


@app.command("version")
def version() -> None:
    """Print the keyconsole version."""

    print(__version__)


@app.command("watch")
def watch(
    url: str = typer.Argument(..., help="Server page URL or path"),
    html: Path = typer.Option(None, "--html", help="Read the page from a file instead"),
    output: Path = typer.Option(None, "--output", help="Write the updated page here"),
    timeout: float = typer.Option(None, "--timeout", help="Give up after this many seconds"),
) -> None:
    """Poll a server page's sync status until it settles."""

    watch_cmd(
        config=load_config_or_exit(),
        url=url,
        html_path=html,
        output_path=output,
        timeout_s=timeout,
    )


@app.command("status")
def status(
    url: str = typer.Argument(..., help="Server page URL or path"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw envelope"),
) -> None:
    """Fetch a server page's sync status once."""

    status_cmd(config=load_config_or_exit(), url=url, as_json=as_json)


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration."""

    config = load_config_or_exit()
    print(f"- Config: {get_config_path()}")
    typer.echo(json.dumps(config.as_dict(), indent=2))
