# ─────────────────────────────────────────────────────────────────
# routes/configs.py — Device Config Endpoints
#
# The device downloads its alarm schedule and light threshold on
# boot; the app edits them. A device that never saved anything
# gets the defaults.
# ─────────────────────────────────────────────────────────────────

import logging

from fastapi import APIRouter, Depends

from database import ConfigStore, get_config_store
from models import ConfigUpdate

logger = logging.getLogger("config")

router = APIRouter(
    prefix="/api/config",
    tags=["Config"]
)


@router.get("/{device_id}")
def get_config(device_id: str, store: ConfigStore = Depends(get_config_store)):
    """Returns the device config, creating a default one on first read."""

    config = store.get(device_id)

    return {
        "success": True,
        "data": config.model_dump(by_alias=True)
    }


@router.put("/{device_id}")
def update_config(device_id: str, changes: ConfigUpdate, store: ConfigStore = Depends(get_config_store)):
    """
    Partial update — send only the fields you want to change.

    Validation is done by ConfigUpdate:
    - alarms must be a JSON array
    - lightThreshold must be a number >= 0
    """

    config, created = store.update(device_id, changes)

    if created:
        logger.info(f"🆕 Config created for '{device_id}'")
        message = "Config created"
    else:
        logger.info(f"✏️  Config updated for '{device_id}'")
        message = "Config updated"

    return {
        "success": True,
        "message": message,
        "data": config.model_dump(by_alias=True)
    }
