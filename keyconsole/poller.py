from __future__ import annotations

import logging
import threading
import time
from enum import Enum

from bs4 import BeautifulSoup

from .backoff import BackoffPolicy
from .http_client import SyncStatusClient, SyncStatusFetchError
from .navigation import NavigationHooks, Subscription
from .render import StatusRenderer, account_element_id
from .sync_status import StatusEnvelope, account_display, overall_display
from .widgets import StatusWidget, discover_widgets

logger = logging.getLogger(__name__)


class PollOutcome(Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


class PollController:
    """Polls /sync_status for one widget until the server reports a final state.

    The next request is only scheduled after the previous one finished, so a
    widget never has more than one request in flight. A failed request is
    retried at the current delay without growing it.
    """

    def __init__(
        self,
        widget: StatusWidget,
        renderer: StatusRenderer,
        client: SyncStatusClient,
        *,
        policy: BackoffPolicy | None = None,
        stop: threading.Event | None = None,
        lock: threading.Lock | None = None,
    ) -> None:
        self.widget = widget
        self.renderer = renderer
        self.client = client
        self.policy = policy or BackoffPolicy()
        self.stop = stop or threading.Event()
        self._lock = lock or threading.Lock()
        self.current_delay_ms = self.policy.initial()
        self.delays_used: list[float] = []
        self.outcome: PollOutcome | None = None
        self._thread: threading.Thread | None = None

    def start(self) -> bool:
        """Render the initial state. Returns True when polling is needed."""

        if self.widget.resolved:
            with self._lock:
                self.renderer.render_overall(self.widget.initial_class, self.widget.initial_message)
                for row in self.widget.accounts:
                    self.renderer.render_account(
                        row.element_id, row.initial_class, row.initial_message
                    )
            self.outcome = PollOutcome.RESOLVED
            return False
        with self._lock:
            self.renderer.mark_pending()
        return True

    def apply(self, envelope: StatusEnvelope) -> None:
        account_ids = self.widget.account_ids
        with self._lock:
            if not envelope.pending:
                display = overall_display(envelope)
                self.renderer.render_overall(display.css_class, display.message)
            for account in envelope.accounts:
                if account.pending:
                    continue
                element_id = account_element_id(account.name)
                if element_id not in account_ids:
                    continue
                display = account_display(account)
                self.renderer.render_account(element_id, display.css_class, display.message)

    def poll_once(self) -> PollOutcome:
        try:
            envelope = self.client.fetch(self.widget.endpoint_path)
        except SyncStatusFetchError as exc:
            logger.debug(
                "sync status poll failed, retrying in %sms: %s", self.current_delay_ms, exc
            )
            return PollOutcome.FAILED
        self.apply(envelope)
        if envelope.pending:
            return PollOutcome.PENDING
        return PollOutcome.RESOLVED

    def run(self) -> PollOutcome | None:
        """Start and poll until resolved or stopped. Returns None when stopped."""

        if not self.start():
            return self.outcome
        while not self.stop.wait(self.current_delay_ms / 1000.0):
            self.delays_used.append(self.current_delay_ms)
            outcome = self.poll_once()
            if outcome is PollOutcome.RESOLVED:
                self.outcome = outcome
                return outcome
            if outcome is PollOutcome.PENDING:
                self.current_delay_ms = self.policy.next(self.current_delay_ms)
        logger.debug("sync status polling stopped for %s", self.widget.endpoint_path)
        return None

    def start_background(self) -> threading.Thread:
        if self._thread is None:
            self._thread = threading.Thread(
                target=self.run, name=f"sync-status:{self.widget.endpoint_path}", daemon=True
            )
            self._thread.start()
        return self._thread

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)


class PageWatcher:
    """Runs one PollController per status widget found on a page."""

    def __init__(
        self,
        document: BeautifulSoup,
        location: str,
        client: SyncStatusClient,
        *,
        policy: BackoffPolicy | None = None,
        hooks: NavigationHooks | None = None,
    ) -> None:
        self.document = document
        self.hooks = hooks or NavigationHooks()
        self.stop = threading.Event()
        lock = threading.Lock()
        self.controllers = [
            PollController(
                widget,
                StatusRenderer(document, widget.element),
                client,
                policy=policy,
                stop=self.stop,
                lock=lock,
            )
            for widget in discover_widgets(document, location)
        ]
        self._subscription: Subscription | None = None

    def start(self) -> None:
        if self._subscription is None:
            self._subscription = self.hooks.subscribe_stop(self.stop)
        for controller in self.controllers:
            controller.start_background()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until every controller finished. Returns False on timeout."""

        deadline = None if timeout is None else time.monotonic() + timeout
        for controller in self.controllers:
            if deadline is None:
                controller.join()
            else:
                controller.join(max(0.0, deadline - time.monotonic()))
        done =not any(controller.running for controller in self.controllers)
        if done and self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        return done

    def close(self) -> None:
        self.stop.set()
        for controller in self.controllers:
            controller.join(5)
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def snapshot(self):
        return [controller.renderer.snapshot() for controller in self.controllers]
