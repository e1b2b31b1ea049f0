"""Console page parsing and the few class/data helpers BeautifulSoup lacks."""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

# html.parser keeps fragments as-is instead of wrapping them in <html><body>.
PARSER = "html.parser"


def parse_html(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, PARSER)


def classes(tag: Tag) -> list[str]:
    value = tag.get("class")
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    return list(value)


def has_class(tag: Tag, name: str) -> bool:
    return name in classes(tag)


def add_class(tag: Tag, *names: str) -> None:
    current = classes(tag)
    for name in names:
        if name and name not in current:
            current.append(name)
    _set_classes(tag, current)


def remove_class(tag: Tag, *names: str) -> None:
    _set_classes(tag, [c for c in classes(tag) if c not in names])


def _set_classes(tag: Tag, names: list[str]) -> None:
    if names:
        tag["class"] = names
    elif "class" in tag.attrs:
        del tag["class"]


def data(tag: Tag, key: str) -> str | None:
    """Read a data-* attribute. An empty value counts as missing."""

    value = tag.get(f"data-{key}")
    if not value:
        return None
    return value


def set_text(tag: Tag, value: str) -> None:
    tag.clear()
    if value:
        tag.append(value)
