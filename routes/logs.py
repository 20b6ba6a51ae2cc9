# ─────────────────────────────────────────────────────────────────
# routes/logs.py — Device Event Log Endpoints
#
# Fire-and-forget: the device posts a light reading plus whether
# the alarm rang / the servo opened. Nothing here reads or changes
# the alarm handshake state.
# ─────────────────────────────────────────────────────────────────

import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends

from config import Settings
from database import LogStore, get_log_store, get_settings
from models import LogCreate

logger = logging.getLogger("logs")

router = APIRouter(
    prefix="/api/logs",
    tags=["Logs"]
)


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _leading_int(value: Optional[str]) -> Optional[int]:
    """Read the leading digits of a query value: "10abc" → 10, "abc" → None."""

    if value is None:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def _page(limit: Optional[str], offset: Optional[str], settings: Settings):
    """
    Lenient pagination, the way the firmware expects it:
    a missing, non-numeric or non-positive limit means the default;
    anything above the max is clamped. A bad offset means 0.
    """

    size = _leading_int(limit) or 0
    if size <= 0:
        size = settings.log_default_limit

    start = _leading_int(offset) or 0

    return min(size, settings.log_max_limit), max(start, 0)


def _listing(entries):
    return {
        "success": True,
        "data": [entry.model_dump(by_alias=True) for entry in entries],
        "count": len(entries)
    }


@router.post("", status_code=201)
def create_log(payload: LogCreate, store: LogStore = Depends(get_log_store)):
    entry = store.add(payload)

    logger.info(
        f"📝 Log #{entry.id} for '{entry.device_id}' | light: {entry.light} "
        f"| alarm: {entry.alarm_triggered} | servo: {entry.servo_opened}"
    )

    return {
        "success": True,
        "message": "Log recorded",
        "data": entry.model_dump(by_alias=True)
    }


@router.get("")
def list_logs(limit: Optional[str] = None, offset: Optional[str] = None,
              store: LogStore = Depends(get_log_store),
              settings: Settings = Depends(get_settings)):
    """All devices, newest first."""

    size, start = _page(limit, offset, settings)
    return _listing(store.recent(limit=size, offset=start))


@router.get("/{device_id}")
def list_device_logs(device_id: str, limit: Optional[str] = None, offset: Optional[str] = None,
                     store: LogStore = Depends(get_log_store),
                     settings: Settings = Depends(get_settings)):
    """One device's history, newest first."""

    size, start = _page(limit, offset, settings)
    return _listing(store.recent(device_id=device_id, limit=size, offset=start))
