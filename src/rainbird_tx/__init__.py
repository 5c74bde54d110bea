#!/usr/bin/env python3
"""RainBird - a client for the RainBird LNK/SIP irrigation protocol."""

from __future__ import annotations

from .command import Command
from .const import MODEL_NAMES, NO_PROGRAM, CmdCode, RplCode
from .encryption import decode_response, encode_request
from .gateway import Engine
from .logger import set_logging
from .parsers import decode
from .protocol import Dispatcher, protocol_factory
from .reply import (
    Acknowledged,
    AvailableZones,
    ControllerDate,
    ControllerState,
    ControllerTime,
    CurrentZone,
    CurrentZoneState,
    IrrigationDelay,
    IrrigationState,
    ModelAndVersion,
    NotAcknowledged,
    RainSensorState,
    Reply,
    SerialNumber,
    UnknownReply,
)
from .schemas import SCH_ENGINE_CONFIG, SCH_ENGINE_DICT
from .transport import HttpTransport, transport_factory
from .typing import RetryParams
from .version import VERSION

__all__ = [
    "VERSION",
    "Engine",
    #
    "MODEL_NAMES",
    "NO_PROGRAM",
    "SCH_ENGINE_CONFIG",
    "SCH_ENGINE_DICT",
    #
    "CmdCode",
    "RplCode",
    #
    "Command",
    "Reply",
    "Acknowledged",
    "AvailableZones",
    "ControllerDate",
    "ControllerState",
    "ControllerTime",
    "CurrentZone",
    "CurrentZoneState",
    "IrrigationDelay",
    "IrrigationState",
    "ModelAndVersion",
    "NotAcknowledged",
    "RainSensorState",
    "SerialNumber",
    "UnknownReply",
    #
    "Dispatcher",
    "RetryParams",
    "protocol_factory",
    #
    "HttpTransport",
    "transport_factory",
    #
    "decode",
    "decode_response",
    "encode_request",
    "set_logging",
]
