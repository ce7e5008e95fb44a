"""Entity dataclasses shared by the repository and schema tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from repokit.models import FullEntity, SimpleEntity


@dataclass
class Device(FullEntity):
    name: str = field(default="", metadata={"index": True})
    port: int = 0
    serial: str | None = field(default=None, metadata={"unique": True})


@dataclass
class DeviceLog(SimpleEntity):
    device_id: int = 0
    message: str = ""
    level: int = 0


@dataclass
class Reading(SimpleEntity):
    __tablename__ = "sensor_readings"

    value: float = 0.0
    ok: bool = True
    payload: dict | None = None
    taken_at: datetime | None = None


@dataclass
class NoTimestamp:
    id: int | None = None
    name: str = ""
