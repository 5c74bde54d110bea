#!/usr/bin/env python3
"""RainBird - the typed replies of the controller (the decoded frames).

Each variant is identified by the opcode of its frame (the first byte).
"""

from __future__ import annotations

import dataclasses
from datetime import datetime as dt
from typing import ClassVar

from .const import MODEL_NAMES, RplCode
from .helpers import dt_or_none, hex_from_bytes


@dataclasses.dataclass(frozen=True, kw_only=True)
class Reply:
    """Base class for all replies."""

    code: ClassVar[int]

    frame: bytes = dataclasses.field(default=b"", repr=False, compare=False)

    @property
    def opcode(self) -> int:
        return self.frame[0] if self.frame else self.code

    def __str__(self) -> str:
        return f"{hex_from_bytes(self.frame)} # {self.__class__.__name__}"


@dataclasses.dataclass(frozen=True, kw_only=True)
class Acknowledged(Reply):
    code = RplCode.ACKNOWLEDGED

    command_code: int


@dataclasses.dataclass(frozen=True, kw_only=True)
class NotAcknowledged(Reply):
    """The controller refused the command (e.g. it is unsupported by this firmware)."""

    code = RplCode.NOT_ACKNOWLEDGED

    command_code: int
    error_code: int


@dataclasses.dataclass(frozen=True, kw_only=True)
class ModelAndVersion(Reply):
    code = RplCode.MODEL_AND_VERSION

    model_number: int
    version: str  # e.g. "2.9"

    @property
    def model_name(self) -> str:
        return MODEL_NAMES.get(self.model_number, str(self.model_number))


@dataclasses.dataclass(frozen=True, kw_only=True)
class AvailableZones(Reply):
    code = RplCode.AVAILABLE_ZONES

    page: int
    zones: tuple[int, ...]  # sorted, zone numbers are 1-based


@dataclasses.dataclass(frozen=True, kw_only=True)
class SerialNumber(Reply):
    code = RplCode.SERIAL_NUMBER

    serial_number: str


@dataclasses.dataclass(frozen=True, kw_only=True)
class ControllerTime(Reply):
    code = RplCode.CONTROLLER_TIME

    hour: int
    minute: int
    second: int


@dataclasses.dataclass(frozen=True, kw_only=True)
class ControllerDate(Reply):
    code = RplCode.CONTROLLER_DATE

    year: int
    month: int
    day: int


@dataclasses.dataclass(frozen=True, kw_only=True)
class IrrigationDelay(Reply):
    code = RplCode.IRRIGATION_DELAY

    days: int


@dataclasses.dataclass(frozen=True, kw_only=True)
class CurrentZoneState(Reply):
    """The state of the running zone, if any.

    Two hardware families use different layouts (distinguished by length), and only
    one of them (ESP-TM2) reports the running program.
    """

    code = RplCode.CURRENT_ZONE_STATE

    page: int
    zone_id: int
    time_remaining: int  # seconds
    running: bool
    program_number: int | None = None  # None if the layout has no program field


@dataclasses.dataclass(frozen=True, kw_only=True)
class RainSensorState(Reply):
    code = RplCode.RAIN_SENSOR_STATE

    set_point_reached: bool


@dataclasses.dataclass(frozen=True, kw_only=True)
class CurrentZone(Reply):
    code = RplCode.CURRENT_ZONE

    page: int
    zone_id: int  # 0 if no zone is running


@dataclasses.dataclass(frozen=True, kw_only=True)
class IrrigationState(Reply):
    code = RplCode.IRRIGATION_STATE

    enabled: bool


@dataclasses.dataclass(frozen=True, kw_only=True)
class ControllerState(Reply):
    code = RplCode.CONTROLLER_STATE

    hour: int
    minute: int
    second: int
    day: int
    month: int  # 1-12, if the controller is sane
    year: int
    delay_days: int
    rain_set_point_reached: bool
    irrigation_enabled: bool
    seasonal_adjust: int  # percent
    current_zone_time_remaining: int  # seconds
    current_zone: int

    @property
    def datetime(self) -> dt | None:
        """Return the controller's date/time, or None if it is not a valid date."""
        return dt_or_none(
            self.year, self.month, self.day, self.hour, self.minute, self.second
        )


@dataclasses.dataclass(frozen=True, kw_only=True)
class UnknownReply(Reply):
    """A reply with an opcode that is not known (it can be ignored)."""

    code = -1
