# ─────────────────────────────────────────────────────────────────
# alerts.py — Logging Setup & Alarm Notices
#
# All log formatting lives here. Other modules only ask for a
# named logger; they never call basicConfig themselves.
#
# The notice functions below are what the service says when the
# alarm changes hands: the device reports it is ringing, or the
# user asks for it to stop. Today they go to the console. A push
# notification to the user's phone would be added here.
# ─────────────────────────────────────────────────────────────────

import logging

from config import settings

# ── LOGGING CONFIGURATION ─────────────────────────────────────────
# %(asctime)s    → timestamp e.g. "2026-03-01 10:34:22"
# %(levelname)s  → severity e.g. "INFO", "WARNING"
# %(name)s       → which logger sent this e.g. "alarm"
# %(message)s    → the actual message
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s — %(levelname)s — [%(name)s] — %(message)s"
)

logger = logging.getLogger("alerts")


def announce_ringing(device_id: str, timestamp: str):
    """
    Called when a device reports that its buzzer started.

    The matching log entry (alarmTriggered=true) arrives separately
    through POST /api/logs; both carry the same device id so they
    can be correlated later.
    """

    logger.warning("⏰ " + "=" * 50)
    logger.warning(f"ALARM RINGING: device '{device_id}' at {timestamp}")
    logger.warning("=" * 50)


def announce_stop_request(device_id: str, timestamp: str, was_ringing: bool):
    """Called when the user asks a device to silence its alarm."""

    if was_ringing:
        logger.info(f"🔕 Stop requested for '{device_id}' at {timestamp} — waiting for device ack")
    else:
        logger.info(f"🔕 Stop requested for '{device_id}' at {timestamp} (alarm was not ringing)")
