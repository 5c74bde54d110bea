#!/usr/bin/env python3
"""RainBird - a coordinator for RainBird irrigation controllers (LNK WiFi module).

Works with (and only with):
- ESP-RZXe, ESP-Me, ESP-ME3 & ESP-TM2 controllers (others may work)
"""

from __future__ import annotations

from rainbird_tx import Command, Engine, Reply

from .const import NO_PROGRAM
from .controller import Controller
from .events import (
    Event,
    ProgramChanged,
    RainSensorChanged,
    StatusChanged,
    ZoneEnableChanged,
)
from .helpers import get_program_id, get_program_number
from .schemas import SCH_CONTROLLER_CONFIG, SCH_GLOBAL_CONFIG
from .version import VERSION
from .zones import ControllerMetadata, ControllerStatus, Zone

__all__ = [
    "VERSION",
    "Controller",
    "Engine",
    #
    "NO_PROGRAM",
    "SCH_CONTROLLER_CONFIG",
    "SCH_GLOBAL_CONFIG",
    #
    "Command",
    "Reply",
    #
    "ControllerMetadata",
    "ControllerStatus",
    "Zone",
    #
    "Event",
    "ProgramChanged",
    "RainSensorChanged",
    "StatusChanged",
    "ZoneEnableChanged",
    #
    "get_program_id",
    "get_program_number",
]
