#!/usr/bin/env python3
"""RainBird - the controller coordinator (constants)."""

from __future__ import annotations

from typing import Final

from rainbird_tx.const import (  # noqa: F401
    MODEL_NAMES as MODEL_NAMES,
    NO_PROGRAM as NO_PROGRAM,
)

# used by the coordinator...
DEBOUNCE_DELAY: Final[float] = 1.0  # seconds of quiet before a requested refresh
ZONE_JOB_TIMEOUT: Final[float] = 3600.0  # seconds, before a zone start-job is abandoned
CLOCK_DRIFT_LIMIT: Final[float] = 300.0  # seconds, before the clock is said to drift

DEFAULT_REFRESH_RATE: Final[float] = 300.0  # seconds between status polls
DEFAULT_DURATION: Final[int] = 300  # seconds, a zone's run time if none is given
DEFAULT_MIN_DURATION: Final[int] = 0
DEFAULT_MAX_DURATION: Final[int] = 3600
DEFAULT_IRRIGATION_DELAY: Final[int] = 1  # days

PROGRAM_IDS: Final[str] = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"

# used by the schemas...
SZ_CONFIG: Final = "config"
SZ_DEFAULT_DURATION: Final = "default_duration"
SZ_INCLUDE_ZONES: Final = "include_zones"
SZ_IRRIGATION_DELAY: Final = "irrigation_delay"
SZ_MAX_DURATION: Final = "max_duration"
SZ_MIN_DURATION: Final = "min_duration"
SZ_REFRESH_RATE: Final = "refresh_rate"
SZ_SYNC_TIME: Final = "sync_time"

# used by the status/metadata dicts...
SZ_ACTIVE: Final = "active"
SZ_ACTIVE_PROGRAM: Final = "active_program"
SZ_ACTIVE_ZONE: Final = "active_zone"
SZ_ACTIVATION_TIMESTAMP: Final = "activation_timestamp"
SZ_DURATION: Final = "duration"
SZ_ENABLED: Final = "enabled"
SZ_MODEL: Final = "model"
SZ_MODEL_NUMBER: Final = "model_number"
SZ_RAIN_SET_POINT_REACHED: Final = "rain_set_point_reached"
SZ_REMAINING_DURATION: Final = "remaining_duration"
SZ_RUNNING: Final = "running"
SZ_SERIAL_NUMBER: Final = "serial_number"
SZ_TIME_REMAINING: Final = "time_remaining"
SZ_VERSION: Final = "version"
SZ_ZONE_ID: Final = "zone_id"
SZ_ZONES: Final = "zones"
