from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Protocol
from urllib.parse import urlparse, urlunparse

from bs4 import BeautifulSoup, Tag

from .page import add_class, remove_class

logger = logging.getLogger(__name__)

LAST_TAB_KEY_PREFIX = "lastTab"
FINGERPRINT_HASH_KEY = "preferred_fingerprint_hash"
FINGERPRINT_HASHES = ("MD5", "SHA256")


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class SessionStore:
    """Session-scoped store: lives as long as the process."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class DurableStore:
    """JSON file backed store for preferences that outlive a session."""

    def __init__(self, path: Path) -> None:
        self.path = path.expanduser()
        self._lock = threading.Lock()

    def _read(self) -> dict[str, str]:
        try:
            raw = self.path.read_text()
        except FileNotFoundError:
            return {}
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("ignoring unreadable state file %s", self.path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n")


def url_fragment(location: str) -> str:
    if "#" not in location:
        return ""
    return location.split("#", 1)[1]


def with_fragment(location: str, fragment: str) -> str:
    parsed = urlparse(location)
    return urlunparse(parsed._replace(fragment=fragment.lstrip("#")))


class ViewStateSynchronizer:
    """Mirrors tab and section selection between the page, the URL and the stores."""

    def __init__(
        self, document: BeautifulSoup, *, session: KeyValueStore, durable: KeyValueStore
    ):
        self.document = document
        self.session = session
        self.durable = durable

    # tabs

    def tab_links(self) -> list[Tag]:
        return self.document.find_all("a", attrs={"data-toggle": "tab"})

    def show_tab(self, href: str) -> bool:
        links = self.tab_links()
        target = next((link for link in links if link.get("href") == href), None)
        if target is None:
            return False
        for link in links:
            active = link is target
            holder = link.parent if link.parent is not None and link.parent.name == "li" else link
            if active:
                add_class(holder, "active")
            else:
                remove_class(holder, "active")
            pane_id = (link.get("href") or "").lstrip("#")
            pane = self.document.find(id=pane_id) if pane_id else None
            if pane is None:
                continue
            if active:
                add_class(pane, "active", "in")
            else:
                remove_class(pane, "active", "in")
        return True

    def restore_tab(self, location: str) -> str | None:
        path = urlparse(location).path
        last_tab = self.session.get(LAST_TAB_KEY_PREFIX + path)
        shown: str | None = None
        if last_tab and self.show_tab(last_tab):
            shown = last_tab
        else:
            links = self.tab_links()
            if links and self.show_tab(links[0].get("href") or ""):
                shown = links[0].get("href")
        fragment_tab = self.tab_from_location(location)
        return fragment_tab or shown

    def tab_from_location(self, location: str) -> str | None:
        fragment = url_fragment(location)
        if not fragment:
            return None
        href = f"#{fragment}"
        if any(link.get("href") == href for link in self.tab_links()):
            self.show_tab(href)
            return href
        return None

    def on_tab_shown(self, location: str, href: str) -> str:
        """Record the shown tab. Returns the URL to replace the current one with."""

        path = urlparse(location).path
        self.session.set(LAST_TAB_KEY_PREFIX + path, href)
        return with_fragment(location, href)

    # collapsible sections

    def sections(self) -> list[Tag]:
        return self.document.find_all(class_="collapse")

    def section_from_location(self, location: str) -> str | None:
        fragment = url_fragment(location)
        expanded: str | None = None
        for section in self.sections():
            if fragment and section.get("id") == fragment:
                add_class(section, "in")
                expanded = fragment
            else:
                remove_class(section, "in")
        return expanded

    def on_section_shown(self, location: str, section_id: str) -> str:
        return with_fragment(location, section_id)

    # fingerprint hash preference

    def preferred_fingerprint_hash(self) -> str:
        value = self.durable.get(FINGERPRINT_HASH_KEY)
        if value in FINGERPRINT_HASHES:
            return value
        return FINGERPRINT_HASHES[0]

    def apply_fingerprint_hash(self, value: str | None = None) -> str:
        chosen = value or self.preferred_fingerprint_hash()
        if chosen not in FINGERPRINT_HASHES:
            raise ValueError(f"unsupported fingerprint hash: {chosen}")
        if value is not None:
            self.durable.set(FINGERPRINT_HASH_KEY, chosen)
        show, hide = (
            ("fingerprint_sha256", "fingerprint_md5")
            if chosen == "SHA256"
            else ("fingerprint_md5", "fingerprint_sha256")
        )
        for span in self.document.find_all("span", class_=show):
            remove_class(span, "hidden")
        for span in self.document.find_all("span", class_=hide):
            add_class(span, "hidden")
        return chosen

    # page lifecycle

    def load(self, location: str) -> None:
        self.restore_tab(location)
        self.section_from_location(location)
        if self.document.find("th", class_="fingerprint") is not None:
            self.apply_fingerprint_hash()

    def on_popstate(self, location: str) -> None:
        self.tab_from_location(location)
        self.section_from_location(location)
