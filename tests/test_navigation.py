import threading

from keyconsole.navigation import NavigationHooks


def test_navigate_away_fires_each_subscription_once() -> None:
    hooks = NavigationHooks()
    calls: list[str] = []
    hooks.subscribe(lambda: calls.append("poller"))
    hooks.subscribe(lambda: calls.append("tabs"))

    assert hooks.navigate_away() == 2
    assert hooks.navigate_away() == 0
    assert calls == ["poller", "tabs"]


def test_cancelled_subscription_is_not_called() -> None:
    hooks = NavigationHooks()
    calls: list[str] = []
    sub = hooks.subscribe(lambda: calls.append("x"))
    sub.cancel()
    sub.cancel()

    assert len(hooks) == 0
    assert hooks.navigate_away() == 0
    assert calls == []


def test_subscribe_stop_sets_event() -> None:
    hooks = NavigationHooks()
    stop = threading.Event()
    hooks.subscribe_stop(stop)
    hooks.navigate_away()
    assert stop.is_set()


def test_failing_callback_does_not_block_others(caplog) -> None:
    hooks = NavigationHooks()
    calls: list[str] = []

    def _boom() -> None:
        raise RuntimeError("nope")

    hooks.subscribe(_boom)
    hooks.subscribe(lambda: calls.append("ok"))

    assert hooks.navigate_away() == 1
    assert calls == ["ok"]
    assert "navigate-away callback failed" in caplog.text
