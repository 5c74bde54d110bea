#!/usr/bin/env python3
"""RainBird - The zones (and other state) of a controller."""

from __future__ import annotations

import dataclasses
from datetime import datetime as dt
from typing import Any

from .const import (
    DEFAULT_DURATION,
    MODEL_NAMES,
    SZ_ACTIVATION_TIMESTAMP,
    SZ_ACTIVE,
    SZ_ACTIVE_PROGRAM,
    SZ_ACTIVE_ZONE,
    SZ_DURATION,
    SZ_ENABLED,
    SZ_MODEL,
    SZ_MODEL_NUMBER,
    SZ_RAIN_SET_POINT_REACHED,
    SZ_REMAINING_DURATION,
    SZ_RUNNING,
    SZ_SERIAL_NUMBER,
    SZ_TIME_REMAINING,
    SZ_VERSION,
    SZ_ZONE_ID,
    SZ_ZONES,
)


@dataclasses.dataclass(frozen=True, kw_only=True)
class ControllerMetadata:
    """The identity of a controller, as learnt when it is started (never changes)."""

    model_number: int
    version: str
    serial_number: str
    zones: tuple[int, ...]

    @property
    def model_name(self) -> str:
        return MODEL_NAMES.get(self.model_number, str(self.model_number))

    def as_dict(self) -> dict[str, Any]:
        return {
            SZ_MODEL: self.model_name,
            SZ_MODEL_NUMBER: self.model_number,
            SZ_VERSION: self.version,
            SZ_SERIAL_NUMBER: self.serial_number,
            SZ_ZONES: list(self.zones),
        }


@dataclasses.dataclass(frozen=True, kw_only=True)
class ControllerStatus:
    """A snapshot of the controller's state, as read by a single status poll.

    The active_program_id is None if it can't be known (the firmware doesn't report it),
    and an empty string if no program is running.
    """

    active_zone_id: int  # 0 if no zone is running
    active_program_id: str | None
    time_remaining: int  # seconds
    running: bool
    rain_set_point_reached: bool | None  # None if the rain sensor state is unknown

    def as_dict(self) -> dict[str, Any]:
        return {
            SZ_ACTIVE_ZONE: self.active_zone_id,
            SZ_ACTIVE_PROGRAM: self.active_program_id,
            SZ_TIME_REMAINING: self.time_remaining,
            SZ_RUNNING: self.running,
            SZ_RAIN_SET_POINT_REACHED: self.rain_set_point_reached,
        }


@dataclasses.dataclass(kw_only=True)
class Zone:
    """The state of a zone (a valve), numbered from 1.

    Intent (active) is set by the consumer of the controller, whilst the running state
    is set by the status polls (or, on firmware that cannot report a remaining
    duration, approximated from when a run command was accepted).
    """

    zone_id: int

    active: bool = False
    running: bool = False
    remaining_duration: int = 0  # seconds, as at the activation_timestamp
    activation_timestamp: dt | None = None

    enabled: bool = True
    duration: int = DEFAULT_DURATION  # seconds, used if a run time is not given

    def __str__(self) -> str:
        return f"Zone {self.zone_id}"

    @property
    def in_use(self) -> bool:
        return self.activation_timestamp is not None

    def remaining(self, now: dt) -> int:
        """Return the remaining duration (seconds), as at now (0 if not active)."""

        if not self.active:
            return 0
        if self.activation_timestamp is None:
            return max(self.remaining_duration, 0)
        elapsed = round((now - self.activation_timestamp).total_seconds())
        return max(self.remaining_duration - elapsed, 0)

    def clear(self) -> None:
        """Reset the running state (but not the intent) of the zone."""

        self.running = False
        self.remaining_duration = 0
        self.activation_timestamp = None

    def as_dict(self, now: dt) -> dict[str, Any]:
        return {
            SZ_ZONE_ID: self.zone_id,
            SZ_ACTIVE: self.active,
            SZ_RUNNING: self.running,
            SZ_REMAINING_DURATION: self.remaining(now),
            SZ_ACTIVATION_TIMESTAMP: (
                self.activation_timestamp.isoformat()
                if self.activation_timestamp
                else None
            ),
            SZ_ENABLED: self.enabled,
            SZ_DURATION: self.duration,
        }
