from __future__ import annotations

from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag

from .page import add_class, has_class, remove_class, set_text
from .sync_status import PENDING_DISPLAY, STATUS_CLASSES, StatusDisplay

STATUS_WIDGET_ID = "server_sync_status"
ACCOUNT_ROW_CLASS = "server_account_sync_status"
ACCOUNT_ID_PREFIX = "server_account_sync_status_"
WARNING_FRAGMENT = "#sync_warning"
ERROR_FRAGMENT = "#sync_error"

_TEXT_CLASSES = tuple(f"text-{name}" for name in STATUS_CLASSES)


def account_element_id(name: str) -> str:
    return f"{ACCOUNT_ID_PREFIX}{name}"


def strip_fragment(href: str) -> str:
    return href.split("#", 1)[0]


def _apply_display(target: Tag, css_class: str | None, message: str | None) -> None:
    remove_class(target, *_TEXT_CLASSES)
    if css_class in STATUS_CLASSES:
        add_class(target, f"text-{css_class}")
    if message is not None:
        set_text(target, message)


def _display_of(target: Tag) -> StatusDisplay:
    css_class = None
    for name in STATUS_CLASSES:
        if has_class(target, f"text-{name}"):
            css_class = name
            break
    return StatusDisplay(css_class, target.get_text())


@dataclass(frozen=True)
class RenderState:
    overall: StatusDisplay | None
    accounts: dict[str, StatusDisplay] = field(default_factory=dict)


class StatusRenderer:
    """Applies status displays to one widget subtree and its account rows.

    Every operation is idempotent and silently skips missing elements.
    """

    def __init__(self, document: BeautifulSoup, widget: Tag | None) -> None:
        self.document = document
        self.widget = widget

    def _status_span(self) -> Tag | None:
        if self.widget is None:
            return None
        return self.widget.find("span")

    def _link(self) -> Tag | None:
        if self.widget is None:
            return None
        return self.widget.find("a")

    def render_overall(self, css_class: str | None, message: str | None) -> None:
        if self.widget is None:
            return
        span = self._status_span()
        if span is not None:
            _apply_display(span, css_class, message)
        link = self._link()
        if link is not None:
            if css_class == "success":
                add_class(link, "hidden")
            else:
                remove_class(link, "hidden")
                href = link.get("href")
                if href is not None:
                    if css_class == "warning":
                        link["href"] = strip_fragment(href) + WARNING_FRAGMENT
                    elif css_class == "danger":
                        link["href"] = strip_fragment(href) + ERROR_FRAGMENT
        for spinner in self.widget.find_all("div", class_="spinner"):
            spinner.decompose()
        button = self.widget.find("button", attrs={"name": "sync"})
        if button is not None:
            remove_class(button, "invisible")

    def render_account(self, element_id: str, css_class: str | None, message: str | None) -> None:
        target = self.document.find(id=element_id)
        if target is None:
            return
        _apply_display(target, css_class, message)

    def mark_pending(self) -> None:
        span = self._status_span()
        if span is not None:
            _apply_display(span, PENDING_DISPLAY.css_class, PENDING_DISPLAY.message)
        for row in self.account_rows():
            _apply_display(row, PENDING_DISPLAY.css_class, PENDING_DISPLAY.message)

    def account_rows(self) -> list[Tag]:
        return self.document.find_all("span", class_=ACCOUNT_ROW_CLASS)

    def snapshot(self) -> RenderState:
        span = self._status_span()
        overall = _display_of(span) if span is not None else None
        accounts: dict[str, StatusDisplay] = {}
        for row in self.account_rows():
            row_id = row.get("id")
            if not row_id:
                continue
            accounts[row_id.removeprefix(ACCOUNT_ID_PREFIX)] = _display_of(row)
        return RenderState(overall=overall, accounts=accounts)
