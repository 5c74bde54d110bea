#!/usr/bin/env python3
"""RainBird - a client for the RainBird LNK/SIP irrigation protocol.

Schema processor for the controller (upper) layer.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import voluptuous as vol

from rainbird_tx.schemas import SCH_ENGINE_DICT

from .const import (
    DEFAULT_DURATION,
    DEFAULT_IRRIGATION_DELAY,
    DEFAULT_MAX_DURATION,
    DEFAULT_MIN_DURATION,
    DEFAULT_REFRESH_RATE,
    SZ_DEFAULT_DURATION,
    SZ_INCLUDE_ZONES,
    SZ_IRRIGATION_DELAY,
    SZ_MAX_DURATION,
    SZ_MIN_DURATION,
    SZ_REFRESH_RATE,
    SZ_SYNC_TIME,
)


def ErrorRenamedKey(new_key: str) -> Callable[[Any], None]:
    def renamed_key(node_value: Any) -> None:
        raise vol.Invalid(f"the key has been renamed to: {new_key}")

    return renamed_key


def _zone_list(value: Any) -> list[int]:
    """Coerce a list of zones, or a CSV string of them, to a sorted list of ints.

    A zone of 0 means all zones, as does an empty list.
    """
    if isinstance(value, str):
        value = [v for v in value.replace(" ", "").split(",") if v]
    zones = sorted({int(v) for v in value})
    return [] if 0 in zones else zones


def _check_durations(config: dict[str, Any]) -> dict[str, Any]:
    if config[SZ_MIN_DURATION] > config[SZ_MAX_DURATION]:
        raise vol.Invalid(f"{SZ_MIN_DURATION} is greater than {SZ_MAX_DURATION}")
    if not (
        config[SZ_MIN_DURATION] <= config[SZ_DEFAULT_DURATION] <= config[SZ_MAX_DURATION]
    ):
        raise vol.Invalid(f"{SZ_DEFAULT_DURATION} is out of range (min..max)")
    return config


#
# 1/1: Controller configuration
SCH_CONTROLLER_DICT = {
    vol.Optional(SZ_REFRESH_RATE, default=DEFAULT_REFRESH_RATE): vol.All(
        vol.Coerce(float), vol.Range(min=0)  # 0 disables the poll timer
    ),
    vol.Optional(SZ_SYNC_TIME, default=False): bool,
    vol.Optional(SZ_INCLUDE_ZONES, default=[]): vol.All(
        vol.Any(str, [vol.Coerce(int)]), _zone_list, [vol.Range(min=1)]
    ),
    vol.Optional(SZ_MIN_DURATION, default=DEFAULT_MIN_DURATION): vol.All(
        int, vol.Range(min=0)
    ),
    vol.Optional(SZ_MAX_DURATION, default=DEFAULT_MAX_DURATION): vol.All(
        int, vol.Range(min=1, max=255 * 60)
    ),
    vol.Optional(SZ_DEFAULT_DURATION, default=DEFAULT_DURATION): vol.All(
        int, vol.Range(min=0)
    ),
    vol.Optional(SZ_IRRIGATION_DELAY, default=DEFAULT_IRRIGATION_DELAY): vol.All(
        int, vol.Range(min=1)
    ),
    vol.Optional("refreshRate"): ErrorRenamedKey(SZ_REFRESH_RATE),
    vol.Optional("syncTime"): ErrorRenamedKey(SZ_SYNC_TIME),
}
SCH_CONTROLLER_CONFIG = vol.All(
    vol.Schema(SCH_CONTROLLER_DICT, extra=vol.REMOVE_EXTRA), _check_durations
)

SCH_GLOBAL_CONFIG = vol.All(
    vol.Schema(SCH_ENGINE_DICT | SCH_CONTROLLER_DICT, extra=vol.PREVENT_EXTRA),
    _check_durations,
)
