from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class Subscription:
    def __init__(self, hooks: NavigationHooks, callback: Callable[[], None]) -> None:
        self._hooks = hooks
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        self._hooks._discard(self)


class NavigationHooks:
    """Owned "navigate away" subscriptions.

    Each subsystem subscribes its own callback instead of replacing a shared
    page-wide handler.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscriptions: list[Subscription] = []

    def subscribe(self, callback: Callable[[], None]) -> Subscription:
        subscription = Subscription(self, callback)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def subscribe_stop(self, stop: threading.Event) -> Subscription:
        return self.subscribe(stop.set)

    def _discard(self, subscription: Subscription) -> None:
        with self._lock:
            self._subscriptions = [s for s in self._subscriptions if s is not subscription]

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def navigate_away(self) -> int:
        with self._lock:
            subscriptions = list(self._subscriptions)
            self._subscriptions = []
        fired = 0
        for subscription in subscriptions:
            if subscription.cancelled:
                continue
            subscription.cancelled = True
            try:
                subscription.callback()
            except Exception as exc:
                logger.exception("navigate-away callback failed", exc_info=exc)
                continue
            fired += 1
        return fired
