from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

STATUS_CLASSES = ("success", "warning", "danger", "info")


class SyncStatusType(Enum):
    SYNC_SUCCESS = "sync success"
    SYNC_FAILURE = "sync failure"
    SYNC_WARNING = "sync warning"
    PROPOSED = "proposed"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> SyncStatusType:
        raw = str(value or "").strip()
        for member in cls:
            if member is not cls.UNKNOWN and member.value == raw:
                return member
        return cls.UNKNOWN


@dataclass(frozen=True)
class StatusDisplay:
    """One indicator's visual state. css_class None means neutral."""

    css_class: str | None
    message: str | None


# sync_status -> (class, account label)
_STATUS_DISPLAY: dict[SyncStatusType, tuple[str | None, str | None]] = {
    SyncStatusType.SYNC_SUCCESS: ("success", "Synced"),
    SyncStatusType.SYNC_FAILURE: ("danger", "Failed"),
    SyncStatusType.SYNC_WARNING: ("warning", "Not synced"),
    SyncStatusType.PROPOSED: ("info", "Requested"),
    SyncStatusType.UNKNOWN: (None, None),
}

PENDING_DISPLAY = StatusDisplay(None, "Pending")


@dataclass(frozen=True)
class AccountStatus:
    name: str
    pending: bool
    sync_status: SyncStatusType
    raw_status: str = ""


@dataclass(frozen=True)
class StatusEnvelope:
    pending: bool
    sync_status: SyncStatusType
    last_sync_details: str
    accounts: list[AccountStatus] = field(default_factory=list)
    raw_status: str = ""


def overall_display(envelope: StatusEnvelope) -> StatusDisplay:
    css_class, _label = _STATUS_DISPLAY[envelope.sync_status]
    if envelope.sync_status is SyncStatusType.UNKNOWN:
        logger.warning("unexpected server sync status: %r", envelope.raw_status)
    return StatusDisplay(css_class, envelope.last_sync_details)


def account_display(account: AccountStatus) -> StatusDisplay:
    css_class, label = _STATUS_DISPLAY[account.sync_status]
    if account.sync_status is SyncStatusType.UNKNOWN:
        logger.warning(
            "unexpected account sync status for %s: %r", account.name, account.raw_status
        )
        return StatusDisplay(None, account.raw_status or None)
    return StatusDisplay(css_class, label)


def _coerce_pending(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    raise ValueError(f"pending must be a boolean, got {type(value).__name__}")


def parse_account(item: Any) -> AccountStatus | None:
    if not isinstance(item, dict):
        return None
    name = item.get("name")
    if not isinstance(name, str) or not name:
        return None
    raw_status = str(item.get("sync_status") or "")
    return AccountStatus(
        name=name,
        pending=_coerce_pending(item.get("pending")),
        sync_status=SyncStatusType.parse(raw_status),
        raw_status=raw_status,
    )


def parse_envelope(payload: Any) -> StatusEnvelope:
    """Decode a /sync_status response body.

    Raises ValueError when the payload is not an envelope. Account entries
    that are not objects with a name are skipped.
    """

    if not isinstance(payload, dict):
        raise ValueError("sync status payload must be an object")
    if "pending" not in payload:
        raise ValueError("sync status payload is missing 'pending'")
    pending = _coerce_pending(payload.get("pending"))
    raw_status = str(payload.get("sync_status") or "")
    last_sync = payload.get("last_sync")
    details = ""
    if isinstance(last_sync, dict):
        details = str(last_sync.get("details") or "")
    accounts_raw = payload.get("accounts") or []
    if not isinstance(accounts_raw, list):
        raise ValueError("sync status 'accounts' must be a list")
    accounts = [a for a in (parse_account(item) for item in accounts_raw) if a is not None]
    return StatusEnvelope(
        pending=pending,
        sync_status=SyncStatusType.parse(raw_status),
        last_sync_details=details,
        accounts=accounts,
        raw_status=raw_status,
    )
