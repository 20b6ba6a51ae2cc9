# ─────────────────────────────────────────────────────────────────
# models.py — Data Models (Pydantic Schemas)
#
# Two kinds of shapes live here:
#   1. Records the service keeps in memory (AlarmState,
#      DeviceConfig, LogEntry)
#   2. Request bodies the API accepts (ConfigUpdate, LogCreate)
#
# The wire format is camelCase (what the ESP32 firmware and the
# mobile app send); Python attributes stay snake_case. Every model
# accepts either spelling thanks to populate_by_name.
# ─────────────────────────────────────────────────────────────────

from datetime import datetime, timezone
from typing import Annotated, Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator
from pydantic.alias_generators import to_camel

# A JSON number, int or float. Strings like "512" are rejected,
# not coerced. Ints stay ints so 300 is echoed back as 300.
Number = Union[StrictInt, StrictFloat]
NonNegativeNumber = Union[Annotated[StrictInt, Field(ge=0)], Annotated[StrictFloat, Field(ge=0)]]


def utc_now() -> str:
    """Timestamp format used by every record: ISO-8601, UTC."""
    return datetime.now(timezone.utc).isoformat()


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ─────────────────────────────────────────────────────────────────
# ALARM STATE
# ─────────────────────────────────────────────────────────────────

class AlarmState(_CamelModel):
    """
    The alarm handshake state of one device.

    Frozen: a state is never edited in place. Every operation builds
    a new AlarmState and swaps it into the table in one assignment,
    so a reader always sees both fields from the same write.

    Only three combinations are reachable:
        idle          ringing=False  stop_requested=False
        ringing       ringing=True   stop_requested=False
        stop_pending  ringing=False  stop_requested=True
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    ringing: bool = False           # device reports the buzzer is on
    stop_requested: bool = False    # user asked to stop, device has not acked yet

    @property
    def phase(self) -> str:
        if self.ringing:
            return "ringing"
        if self.stop_requested:
            return "stop_pending"
        return "idle"


IDLE = AlarmState(ringing=False, stop_requested=False)
RINGING = AlarmState(ringing=True, stop_requested=False)
STOP_PENDING = AlarmState(ringing=False, stop_requested=True)


# ─────────────────────────────────────────────────────────────────
# DEVICE CONFIG
# ─────────────────────────────────────────────────────────────────

class DeviceConfig(_CamelModel):
    """
    Settings the device downloads on boot:
    {
        "deviceId": "esp32-01",
        "alarms": [{"time": "07:00", "days": ["mon", "tue"]}],
        "lightThreshold": 300,
        "enabled": true,
        "updatedAt": "2026-03-01T10:34:22+00:00"
    }

    `alarms` is stored as-is — the firmware owns its format.
    """

    device_id: str
    alarms: List[Any] = Field(default_factory=list)
    light_threshold: NonNegativeNumber = 300
    enabled: bool = True
    updated_at: str


class ConfigUpdate(_CamelModel):
    """
    Body of PUT /api/config/{device_id}. Every field is optional —
    a field left out keeps its stored value. A field sent as null
    is rejected; leaving it out is the only way to keep it.

    Read the changes with model_dump(exclude_unset=True).
    """

    alarms: Optional[List[Any]] = None
    light_threshold: Optional[NonNegativeNumber] = None
    enabled: Optional[bool] = None

    @field_validator("alarms", "light_threshold", "enabled", mode="before")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("must not be null (omit the field to keep the stored value)")
        return value


# ─────────────────────────────────────────────────────────────────
# DEVICE LOGS
# ─────────────────────────────────────────────────────────────────

class LogCreate(_CamelModel):
    """
    Body of POST /api/logs, sent by the device after each reading:
    {
        "deviceId": "esp32-01",
        "light": 512,
        "alarmTriggered": true,
        "servoOpened": false
    }
    """

    device_id: str = Field(min_length=1)
    light: Number                     # raw light-sensor reading
    alarm_triggered: bool = False
    servo_opened: bool = False


class LogEntry(_CamelModel):
    id: int
    device_id: str
    light: Number
    alarm_triggered: bool
    servo_opened: bool
    timestamp: str
