# ─────────────────────────────────────────────────────────────────
# routes/alarms.py — Alarm Handshake Endpoints
#
# Who calls what:
#   device (ESP32)  → POST trigger, POST ack, GET status (polling)
#   user (app)      → POST stop, GET status
#
# The device id always comes from the URL, never from a body.
# None of these endpoints can fail for an unknown device: a device
# we have never seen is treated as idle.
#
# Plain `def` endpoints: FastAPI runs them on
# its thread pool and the coordinator's locks keep them consistent.
# ─────────────────────────────────────────────────────────────────

import logging

from fastapi import APIRouter, Depends

from alerts import announce_ringing, announce_stop_request
from coordinator import AlarmCoordinator
from database import get_coordinator
from models import utc_now

logger = logging.getLogger("alarm")

router = APIRouter(
    prefix="/api/alarm",
    tags=["Alarm"]
)


# ─────────────────────────────────────────────────────────────────
# GET /api/alarm/{device_id}/status — Poll the current state
# ─────────────────────────────────────────────────────────────────

@router.get("/{device_id}/status")
def alarm_status(device_id: str, coordinator: AlarmCoordinator = Depends(get_coordinator)):
    """
    The device polls this to learn whether it should stop ringing:
    if stopRequested is true, silence the buzzer and POST /ack.
    """

    state = coordinator.status(device_id)

    return {
        "success": True,
        "data": {
            "ringing": state.ringing,
            "stopRequested": state.stop_requested
        }
    }


# ─────────────────────────────────────────────────────────────────
# POST /api/alarm/{device_id}/trigger — Device started ringing
# ─────────────────────────────────────────────────────────────────

@router.post("/{device_id}/trigger")
def trigger_alarm(device_id: str, coordinator: AlarmCoordinator = Depends(get_coordinator)):
    transition = coordinator.trigger(device_id)

    if transition.before.stop_requested:
        logger.info(f"Pending stop for '{device_id}' discarded by new trigger")

    announce_ringing(device_id, utc_now())

    return {"success": True, "message": "Alarm registered as ringing"}


# ─────────────────────────────────────────────────────────────────
# POST /api/alarm/{device_id}/stop — User asks to silence the alarm
# ─────────────────────────────────────────────────────────────────

@router.post("/{device_id}/stop")
def stop_alarm(device_id: str, coordinator: AlarmCoordinator = Depends(get_coordinator)):
    """
    Returns immediately — the device picks the request up on its
    next status poll. Poll status again to see it confirmed.
    """

    transition = coordinator.request_stop(device_id)

    announce_stop_request(device_id, utc_now(), was_ringing=transition.before.ringing)

    return {"success": True, "message": "Alarm will be stopped"}


# ─────────────────────────────────────────────────────────────────
# POST /api/alarm/{device_id}/ack — Device confirms it is silent
# ─────────────────────────────────────────────────────────────────

@router.post("/{device_id}/ack")
def acknowledge_alarm(device_id: str, coordinator: AlarmCoordinator = Depends(get_coordinator)):
    transition = coordinator.acknowledge(device_id)

    logger.info(f"🔇 Alarm for '{device_id}' acknowledged as stopped (was {transition.before.phase})")

    return {"success": True, "message": "Alarm confirmed as stopped"}
