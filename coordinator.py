# ─────────────────────────────────────────────────────────────────
# coordinator.py — Alarm Handshake State Machine
#
# The device cannot be pushed to. It learns that the user wants the
# alarm silenced only by polling status(). So two facts are kept
# apart:
#   ringing         → what the DEVICE last reported
#   stop_requested  → what the USER asked for, until the device acks
#
#              trigger                 request_stop
#     IDLE ─────────────▶ RINGING ─────────────────▶ STOP_PENDING
#      ▲                     │                           │
#      └──── acknowledge ────┴─────── acknowledge ───────┘
#
# trigger from ANY state lands in RINGING (latest trigger wins).
#
# CONCURRENCY:
# FastAPI runs plain `def` endpoints on a thread pool, so two
# requests for the same device can run at the same moment.
# Each device gets its own threading.Lock; the table lock is held
# only long enough to find or create that per-device lock.
# Requests for different devices never wait on each other.
# When two calls race on one device, whichever takes the lock last
# decides the final state.
# ─────────────────────────────────────────────────────────────────

import threading
from typing import Callable, Dict, NamedTuple

from models import AlarmState, IDLE, RINGING, STOP_PENDING


class Transition(NamedTuple):
    device_id: str
    before: AlarmState
    after: AlarmState


class AlarmCoordinator:
    """
    Holds one AlarmState per device id.

    Create one per application (see main.create_app). Tests build
    as many independent instances as they like.
    """

    def __init__(self):
        self._states: Dict[str, AlarmState] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._table_lock = threading.Lock()

    def _lock_for(self, device_id: str) -> threading.Lock:
        with self._table_lock:
            lock = self._locks.get(device_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[device_id] = lock
            return lock

    def _apply(self, device_id: str, step: Callable[[AlarmState], AlarmState]) -> Transition:
        """
        The only place a state is written.

        `step` receives the current state and returns the next one.
        Both fields change together because the whole AlarmState
        object is replaced in a single dict assignment.
        """

        with self._lock_for(device_id):
            before = self._states.get(device_id, IDLE)
            after = step(before)
            self._states[device_id] = after
            return Transition(device_id, before, after)

    # ── device side ───────────────────────────────────────────────

    def trigger(self, device_id: str) -> Transition:
        """Device reports the buzzer started. Discards any pending stop."""
        return self._apply(device_id, lambda _: RINGING)

    def acknowledge(self, device_id: str) -> Transition:
        """Device reports the buzzer is off, whether or not a stop was asked for."""
        return self._apply(device_id, lambda _: IDLE)

    def status(self, device_id: str) -> AlarmState:
        # A device we have never heard of is simply idle.
        # Nothing is inserted, so polling an unknown id leaves no trace.
        return self._states.get(device_id, IDLE)

    # ── user side ─────────────────────────────────────────────────

    def request_stop(self, device_id: str) -> Transition:
        """
        User asks the device to stop ringing.

        ringing is cleared in the same write that sets stop_requested,
        which keeps {ringing: True, stop_requested: True} unreachable.
        Repeating the request while one is pending changes nothing.
        """
        return self._apply(device_id, lambda _: STOP_PENDING)

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, device_id: str) -> bool:
        return device_id in self._states
