from __future__ import annotations

from pathlib import Path

import pytest

SERVER_PAGE = """<!DOCTYPE html>
<html><body>
<div id="server_sync_status"{attrs}>
  <span>Loading</span>
  <a href="/servers/7/activity#top" class="btn">Details</a>
  <div class="spinner"></div>
  <button name="sync" class="btn invisible">Sync now</button>
</div>
<table>
  <tr><td>alice</td><td><span class="server_account_sync_status" id="server_account_sync_status_alice"{alice}></span></td></tr>
  <tr><td>bob</td><td><span class="server_account_sync_status" id="server_account_sync_status_bob"{bob}></span></td></tr>
</table>
</body></html>
"""


def _render_server_page(attrs: str = "", alice: str = "", bob: str = "") -> str:
    return SERVER_PAGE.format(attrs=attrs, alice=alice, bob=bob)


@pytest.fixture
def server_page():
    return _render_server_page


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("KEYCONSOLE_CONFIG", str(tmp_path / "config.json"))
    monkeypatch.setenv("KEYCONSOLE_STATE_PATH", str(tmp_path / "state.json"))
    for name in (
        "KEYCONSOLE_BASE_URL",
        "KEYCONSOLE_POLL_FLOOR_MS",
        "KEYCONSOLE_POLL_CEILING_MS",
        "KEYCONSOLE_POLL_GROWTH",
        "KEYCONSOLE_REQUEST_TIMEOUT_S",
        "KEYCONSOLE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
