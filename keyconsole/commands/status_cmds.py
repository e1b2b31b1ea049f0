from __future__ import annotations

import json
from pathlib import Path

import typer
from rich import print
from rich.markup import escape

from keyconsole.backoff import BackoffPolicy
from keyconsole.config import ConsoleConfig
from keyconsole.http_client import SyncStatusClient, SyncStatusFetchError, fetch_page
from keyconsole.navigation import NavigationHooks
from keyconsole.page import parse_html
from keyconsole.poller import PageWatcher
from keyconsole.render import RenderState
from keyconsole.sync_status import account_display, overall_display
from keyconsole.viewstate import DurableStore, SessionStore, ViewStateSynchronizer
from keyconsole.widgets import endpoint_path_for

from .common import split_page_url, styled


def _print_render_state(state: RenderState) -> None:
    if state.overall is None:
        print("- Server: (no status element)")
    else:
        print(f"- Server: {styled(state.overall.css_class, state.overall.message)}")
    for name in sorted(state.accounts):
        display = state.accounts[name]
        print(f"  - {escape(name)}: {styled(display.css_class, display.message)}")


def watch_cmd(
    *,
    config: ConsoleConfig,
    url: str,
    html_path: Path | None,
    output_path: Path | None,
    timeout_s: float | None,
    hooks: NavigationHooks | None = None,
) -> None:
    """Poll every status widget on a page until the server reports a final state."""

    base_url, location = split_page_url(url, config.base_url)
    client = SyncStatusClient(base_url, timeout_s=config.request_timeout_s)
    if html_path is not None:
        try:
            markup = html_path.read_text()
        except OSError as exc:
            print(f"[red]Failed to read page: {exc}[/red]")
            raise typer.Exit(code=1) from exc
    else:
        page_url = client.base_url + location.split("#", 1)[0]
        try:
            markup = fetch_page(page_url, timeout_s=config.request_timeout_s)
        except SyncStatusFetchError as exc:
            print(f"[red]Failed to load page: {escape(str(exc))}[/red]")
            raise typer.Exit(code=1) from exc

    document = parse_html(markup)
    view_state = ViewStateSynchronizer(
        document,
        session=SessionStore(),
        durable=DurableStore(Path(config.state_path)),
    )
    view_state.load(location)

    hooks = hooks or NavigationHooks()
    watcher = PageWatcher(
        document,
        location,
        client,
        policy=BackoffPolicy.from_config(config),
        hooks=hooks,
    )
    if not watcher.controllers:
        print("[yellow]No sync status widget found on page[/yellow]")
        raise typer.Exit(code=1)

    watcher.start()
    try:
        finished = watcher.wait(timeout_s)
    except KeyboardInterrupt:
        hooks.navigate_away()
        finished = False
    if not finished:
        watcher.close()
        print("[yellow]Stopped before the server finished syncing[/yellow]")

    for state in watcher.snapshot():
        _print_render_state(state)

    if output_path is not None:
        output_path.write_text(str(document))
        print(f"- Page: {output_path}")
    if not finished:
        raise typer.Exit(code=2)


def status_cmd(*, config: ConsoleConfig, url: str, as_json: bool) -> None:
    """Fetch the sync status of a server page once."""

    base_url, location = split_page_url(url, config.base_url)
    client = SyncStatusClient(base_url, timeout_s=config.request_timeout_s)
    try:
        envelope = client.fetch(endpoint_path_for(location))
    except SyncStatusFetchError as exc:
        print(f"[red]Failed to fetch sync status: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc

    if as_json:
        payload = {
            "pending": envelope.pending,
            "sync_status": envelope.raw_status,
            "last_sync": {"details": envelope.last_sync_details},
            "accounts": [
                {"name": a.name, "pending": a.pending, "sync_status": a.raw_status}
                for a in envelope.accounts
            ],
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    if envelope.pending:
        print("- Server: Pending")
    else:
        display = overall_display(envelope)
        print(f"- Server: {styled(display.css_class, display.message)}")
    for account in envelope.accounts:
        if account.pending:
            print(f"  - {escape(account.name)}: Pending")
            continue
        display = account_display(account)
        print(f"  - {escape(account.name)}: {styled(display.css_class, display.message)}")
