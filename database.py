# ─────────────────────────────────────────────────────────────────
# database.py — In-Memory Storage
#
# This file owns the device config table and the device log table.
# If we ever swap to SQLite or PostgreSQL, we only change THIS file.
# Routes never touch the dicts directly; they go through the
# store methods below.
#
# The stores are plain objects created by main.create_app() and
# kept on app.state. Routes receive them through FastAPI's
# Depends(), so each test can start from an empty app.
# ─────────────────────────────────────────────────────────────────

import threading
from typing import Dict, List, Optional, Tuple

from fastapi import Request

from config import Settings
from coordinator import AlarmCoordinator
from models import ConfigUpdate, DeviceConfig, LogCreate, LogEntry, utc_now


class ConfigStore:
    """
    One DeviceConfig per device id.

    Structure:
      Key   → device id (string) e.g. "esp32-01"
      Value → DeviceConfig
    """

    def __init__(self, default_light_threshold: int = 300):
        self.default_light_threshold = default_light_threshold
        self._configs: Dict[str, DeviceConfig] = {}
        self._lock = threading.Lock()

    def _default(self, device_id: str) -> DeviceConfig:
        return DeviceConfig(
            device_id=device_id,
            alarms=[],
            light_threshold=self.default_light_threshold,
            enabled=True,
            updated_at=utc_now(),
        )

    def get(self, device_id: str) -> DeviceConfig:
        """Return the stored config, saving a default one on first read."""

        with self._lock:
            config = self._configs.get(device_id)
            if config is None:
                config = self._default(device_id)
                self._configs[device_id] = config
            return config

    def update(self, device_id: str, changes: ConfigUpdate) -> Tuple[DeviceConfig, bool]:
        """
        Apply a partial update. Returns (config, created).

        Fields left out of `changes` keep their stored value, or the
        default value when the device had no config yet.
        """

        with self._lock:
            current = self._configs.get(device_id)
            created = current is None
            if created:
                current = self._default(device_id)

            patch = changes.model_dump(exclude_unset=True)
            patch["updated_at"] = utc_now()

            config = current.model_copy(update=patch)
            self._configs[device_id] = config
            return config, created

    def __len__(self) -> int:
        return len(self._configs)


class LogStore:
    """
    Append-only list of device log entries.

    Ids are assigned in arrival order starting at 1, so sorting by
    id is the same as sorting by time.
    """

    def __init__(self):
        self._entries: List[LogEntry] = []
        self._next_id = 1
        self._lock = threading.Lock()

    def add(self, payload: LogCreate) -> LogEntry:
        with self._lock:
            entry = LogEntry(
                id=self._next_id,
                device_id=payload.device_id,
                light=payload.light,
                alarm_triggered=payload.alarm_triggered,
                servo_opened=payload.servo_opened,
                timestamp=utc_now(),
            )
            self._entries.append(entry)
            self._next_id += 1
            return entry

    def recent(self, device_id: Optional[str] = None, limit: int = 50, offset: int = 0) -> List[LogEntry]:
        """Newest first, optionally filtered to one device."""

        with self._lock:
            entries = list(self._entries)

        if device_id is not None:
            entries = [e for e in entries if e.device_id == device_id]

        entries.reverse()
        return entries[offset:offset + limit]

    def __len__(self) -> int:
        return len(self._entries)


# ─────────────────────────────────────────────────────────────────
# DEPENDENCIES — used with Depends() in the routers
# ─────────────────────────────────────────────────────────────────

def get_coordinator(request: Request) -> AlarmCoordinator:
    return request.app.state.coordinator


def get_config_store(request: Request) -> ConfigStore:
    return request.app.state.config_store


def get_log_store(request: Request) -> LogStore:
    return request.app.state.log_store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
