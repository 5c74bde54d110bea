#!/usr/bin/env python3
"""RainBird - a client for the RainBird LNK/SIP irrigation protocol."""

from __future__ import annotations

from enum import IntEnum
from typing import Final

# used by the dispatcher (retries)...
DEFAULT_RETRY_DELAY: Final[float] = 30.0  # seconds between attempts of a failed send
DEFAULT_MAX_RETRIES: Final[int | None] = None  # None is uncapped (never give up)

# used by the transport...
DEFAULT_HTTP_TIMEOUT: Final[float] = 20.0  # seconds, for a single POST

STICK_URL: Final = "http://{host}/stick"

HTTP_HEADERS: Final[dict[str, str]] = {
    "Accept-Language": "en",
    "Accept-Encoding": "gzip, deflate",
    "User-Agent": "RainBird/2.0 CFNetwork/811.5.4 Darwin/16.7.0",
    "Accept": "*/*",
    "Connection": "keep-alive",
    "Content-Type": "application/octet-stream",
}

# used by the encryption (the SIP tunnel)...
BLOCK_SIZE: Final[int] = 16
PAD_CHAR: Final[int] = 0x10
REQUEST_SUFFIX: Final = "\x00\x10"
STRIP_CHARS: Final = b"\x10\x0a\x00"  # trailing control chars of a decrypted reply

RPC_ID: Final[int] = 9
RPC_METHOD: Final = "tunnelSip"
RPC_VERSION: Final = "2.0"

HASH_LENGTH: Final[int] = 32  # sha256 of the formatted request
IV_LENGTH: Final[int] = 16

# used by the codec...
NO_PROGRAM: Final[int] = 255  # no program is running (e.g. a manual zone run)
MAX_ZONE_DURATION: Final[int] = 255  # minutes, a single byte on the wire

SZ_CODE: Final = "code"
SZ_DATA: Final = "data"
SZ_ERROR: Final = "error"
SZ_ID: Final = "id"
SZ_JSONRPC: Final = "jsonrpc"
SZ_LENGTH: Final = "length"
SZ_MESSAGE: Final = "message"
SZ_METHOD: Final = "method"
SZ_PARAMS: Final = "params"
SZ_RESULT: Final = "result"

# used by the schemas...
SZ_HOST: Final = "host"
SZ_HTTP_TIMEOUT: Final = "http_timeout"
SZ_MAX_RETRIES: Final = "max_retries"
SZ_PASSWORD: Final = "password"
SZ_RETRY_DELAY: Final = "retry_delay"
SZ_SHOW_REQUEST_RESPONSE: Final = "show_request_response"


class CmdCode(IntEnum):
    """The opcode of a Command (the first byte of the frame)."""

    MODEL_AND_VERSION = 0x02
    AVAILABLE_ZONES = 0x03
    SERIAL_NUMBER = 0x05
    CONTROLLER_TIME_GET = 0x10
    CONTROLLER_TIME_SET = 0x11
    CONTROLLER_DATE_GET = 0x12
    CONTROLLER_DATE_SET = 0x13
    TEST = 0x31
    IRRIGATION_DELAY_GET = 0x36
    IRRIGATION_DELAY_SET = 0x37
    RUN_PROGRAM = 0x38
    RUN_ZONE = 0x39
    CURRENT_ZONE_STATE = 0x3B
    RAIN_SENSOR_STATE = 0x3E
    CURRENT_ZONE = 0x3F
    STOP_IRRIGATION = 0x40
    ADVANCE_ZONE = 0x42
    IRRIGATION_STATE = 0x48
    CONTROLLER_STATE_ALT = 0x4B
    CONTROLLER_STATE = 0x4C


class RplCode(IntEnum):
    """The opcode of a Reply (the first byte of the decrypted frame)."""

    NOT_ACKNOWLEDGED = 0x00
    ACKNOWLEDGED = 0x01
    MODEL_AND_VERSION = 0x82
    AVAILABLE_ZONES = 0x83
    SERIAL_NUMBER = 0x85
    CONTROLLER_TIME = 0x90
    CONTROLLER_DATE = 0x92
    IRRIGATION_DELAY = 0xB6
    CURRENT_ZONE_STATE = 0xBB
    RAIN_SENSOR_STATE = 0xBE
    CURRENT_ZONE = 0xBF
    IRRIGATION_STATE = 0xC8
    CONTROLLER_STATE = 0xCC


# Commands that are answered with an Acknowledged (or NotAcknowledged) reply
ACTION_CODES: Final[tuple[CmdCode, ...]] = (
    CmdCode.CONTROLLER_TIME_SET,
    CmdCode.CONTROLLER_DATE_SET,
    CmdCode.IRRIGATION_DELAY_SET,
    CmdCode.RUN_PROGRAM,
    CmdCode.RUN_ZONE,
    CmdCode.STOP_IRRIGATION,
    CmdCode.ADVANCE_ZONE,
)

MODEL_NAMES: Final[dict[int, str]] = {
    0x0003: "ESP-RZXe",
    0x0007: "ESP-Me",
    0x0009: "ESP-ME3",
    0x010A: "ESP-TM2",
}
