from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlparse

import typer
from rich import print
from rich.markup import escape

from keyconsole.config import ConsoleConfig, load_config, read_config_file


def read_config_or_exit() -> dict[str, Any]:
    try:
        return read_config_file()
    except ValueError as exc:
        print(f"[red]Invalid config file: {exc}[/red]")
        raise typer.Exit(code=1) from exc


def load_config_or_exit() -> ConsoleConfig:
    read_config_or_exit()
    return load_config()


def configure_logging(level: str | None) -> None:
    name = (level or "WARNING").strip().upper()
    numeric = getattr(logging, name, None)
    if not isinstance(numeric, int):
        print(f"[yellow]Unknown log level {level!r}, using WARNING[/yellow]")
        numeric = logging.WARNING
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def split_page_url(url: str, default_base: str) -> tuple[str, str]:
    """Split a page URL into (base url, location path). Relative paths use default_base."""

    parsed = urlparse(url)
    if parsed.scheme and parsed.netloc:
        location = parsed.path or "/"
        if parsed.fragment:
            location = f"{location}#{parsed.fragment}"
        return f"{parsed.scheme}://{parsed.netloc}", location
    return default_base, url if url.startswith("/") else f"/{url}"


STYLE_FOR_CLASS = {
    "success": "green",
    "warning": "yellow",
    "danger": "red",
    "info": "cyan",
}


def styled(css_class: str | None, message: str | None) -> str:
    text = escape(message or "")
    style = STYLE_FOR_CLASS.get(css_class or "")
    if not style:
        return text
    return f"[{style}]{text}[/{style}]"
