from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from .page import data
from .render import ACCOUNT_ROW_CLASS, STATUS_WIDGET_ID


@dataclass(frozen=True)
class AccountRow:
    element_id: str
    initial_class: str | None = None
    initial_message: str | None = None


@dataclass
class StatusWidget:
    endpoint_path: str
    element: Tag = field(repr=False)
    initial_class: str | None = None
    initial_message: str | None = None
    accounts: list[AccountRow] = field(default_factory=list)

    @property
    def account_ids(self) -> set[str]:
        return {row.element_id for row in self.accounts}

    @property
    def resolved(self) -> bool:
        return self.initial_class is not None


def endpoint_path_for(location: str) -> str:
    parsed = urlparse(location)
    path = parsed.path if (parsed.scheme or parsed.netloc) else location.split("#", 1)[0]
    path = path.split("?", 1)[0]
    return path.rstrip("/") or "/"


def discover_widgets(document: BeautifulSoup, location: str) -> list[StatusWidget]:
    endpoint_path = endpoint_path_for(location)
    rows = [
        AccountRow(
            element_id=row["id"],
            initial_class=data(row, "class"),
            initial_message=data(row, "message"),
        )
        for row in document.find_all("span", class_=ACCOUNT_ROW_CLASS)
        if row.get("id")
    ]
    return [
        StatusWidget(
            endpoint_path=endpoint_path,
            element=element,
            initial_class=data(element, "class"),
            initial_message=data(element, "message"),
            accounts=list(rows),
        )
        for element in document.find_all(id=STATUS_WIDGET_ID)
    ]
