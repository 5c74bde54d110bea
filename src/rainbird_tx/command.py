#!/usr/bin/env python3
"""RainBird - a client for the RainBird LNK/SIP irrigation protocol.

Construct a command (frame that is to be sent).
"""

from __future__ import annotations

import logging
from datetime import datetime as dt
from typing import TYPE_CHECKING

from . import exceptions as exc
from .const import ACTION_CODES, MAX_ZONE_DURATION, CmdCode, RplCode
from .helpers import (
    be16_from_int,
    bytes_from_hex,
    hex_from_bytes,
    minutes_from_seconds,
    month_year_to_double,
)

if TYPE_CHECKING:
    from collections.abc import Iterable


DEV_MODE = False

_LOGGER = logging.getLogger(__name__)
if DEV_MODE:
    _LOGGER.setLevel(logging.DEBUG)


def _check_byte(name: str, value: int, min_value: int = 0, max_value: int = 255) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise exc.CommandInvalid(f"Invalid value for {name}: {value}")
    if not min_value <= value <= max_value:
        raise exc.CommandInvalid(f"Out of range, {name}: {value}")
    return value


class Command:
    """The Command class (frames to be sent to the controller).

    A command is an opcode, followed by zero or more bytes of fixed-layout fields.
    """

    def __init__(self, code: int, payload: Iterable[int] | bytes = b"") -> None:
        """Create a command from its opcode and (encoded) payload."""

        try:
            self._frame = bytes((_check_byte("opcode", code), *payload))
        except ValueError as err:  # a payload value not in range(256)
            raise exc.CommandInvalid(f"Invalid payload: {err}") from err

    @classmethod  # used by CLI for the raw command (NB: a hex string)
    def from_cli(cls, cmd_str: str) -> Command:
        """Create a command from a CLI string, e.g. '3B00' or '39 0003 05'."""

        try:
            frame = bytes_from_hex(cmd_str)
        except ValueError as err:
            raise exc.CommandInvalid(f"Command string is not hex: '{cmd_str}'") from err
        if not frame:
            raise exc.CommandInvalid(f"Command string is empty: '{cmd_str}'")
        return cls(frame[0], frame[1:])

    def __repr__(self) -> str:
        """Return an unambiguous string representation of this object."""
        try:
            name = CmdCode(self.code).name
        except ValueError:
            name = "RAW"
        return f"{self} # {name}"

    def __str__(self) -> str:
        """Return an brief readable string representation of this object."""
        return hex_from_bytes(self._frame)

    def __bytes__(self) -> bytes:
        return self._frame

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Command):
            return NotImplemented
        return self._frame == other._frame

    def __hash__(self) -> int:
        return hash(self._frame)

    def __len__(self) -> int:
        return len(self._frame)

    def encode(self) -> bytes:
        """Return the frame (the bytes to be tunnelled to the controller)."""
        return self._frame

    @property
    def code(self) -> int:
        return self._frame[0]

    @property
    def payload(self) -> bytes:
        return self._frame[1:]

    @property
    def rx_code(self) -> int:
        """Return the opcode of the expected reply (for actions, an acknowledgment)."""

        if self.code in ACTION_CODES:
            return RplCode.ACKNOWLEDGED
        if self.code == CmdCode.CONTROLLER_STATE_ALT:
            return RplCode.CONTROLLER_STATE
        return self.code | 0x80

    @classmethod  # constructor for 0x02
    def get_model_and_version(cls) -> Command:
        """Constructor to get the model number and firmware version (c.f. parser_82)."""
        return cls(CmdCode.MODEL_AND_VERSION)

    @classmethod  # constructor for 0x03
    def get_available_zones(cls, page: int = 0) -> Command:
        """Constructor to get the zones fitted to the controller (c.f. parser_83)."""
        return cls(CmdCode.AVAILABLE_ZONES, (_check_byte("page", page),))

    @classmethod  # constructor for 0x05
    def get_serial_number(cls) -> Command:
        """Constructor to get the serial number (c.f. parser_85)."""
        return cls(CmdCode.SERIAL_NUMBER)

    @classmethod  # constructor for 0x10
    def get_controller_time(cls) -> Command:
        """Constructor to get the controller's clock (c.f. parser_90)."""
        return cls(CmdCode.CONTROLLER_TIME_GET)

    @classmethod  # constructor for 0x11
    def set_controller_time(cls, hour: int, minute: int, second: int) -> Command:
        """Constructor to set the controller's clock."""

        payload = (
            _check_byte("hour", hour, max_value=23),
            _check_byte("minute", minute, max_value=59),
            _check_byte("second", second, max_value=59),
        )
        return cls(CmdCode.CONTROLLER_TIME_SET, payload)

    @classmethod  # constructor for 0x12
    def get_controller_date(cls) -> Command:
        """Constructor to get the controller's calendar date (c.f. parser_92)."""
        return cls(CmdCode.CONTROLLER_DATE_GET)

    @classmethod  # constructor for 0x13
    def set_controller_date(cls, day: int, month: int, year: int) -> Command:
        """Constructor to set the controller's calendar date.

        The month & year are packed as month * 4096 + year (this is not BCD).
        """

        day = _check_byte("day", day, min_value=1, max_value=31)
        month_year = be16_from_int(month_year_to_double(month, year))
        return cls(CmdCode.CONTROLLER_DATE_SET, (day, *month_year))

    @classmethod  # convenience constructor for 0x11 & 0x13
    def set_controller_datetime(cls, dtm: dt) -> tuple[Command, Command]:
        """Constructor to set the controller's date and clock, from a datetime."""

        return (
            cls.set_controller_date(dtm.day, dtm.month, dtm.year),
            cls.set_controller_time(dtm.hour, dtm.minute, dtm.second),
        )

    @classmethod  # constructor for 0x31
    def test(cls) -> Command:
        """Constructor for a no-op, used to test connectivity."""
        return cls(CmdCode.TEST)

    @classmethod  # constructor for 0x36
    def get_irrigation_delay(cls) -> Command:
        """Constructor to get the rain delay, in days (c.f. parser_b6)."""
        return cls(CmdCode.IRRIGATION_DELAY_GET)

    @classmethod  # constructor for 0x37
    def set_irrigation_delay(cls, days: int) -> Command:
        """Constructor to set the rain delay, in days (0 to cancel any delay)."""

        if not isinstance(days, int) or isinstance(days, bool):
            raise exc.CommandInvalid(f"Invalid value for days: {days}")
        return cls(CmdCode.IRRIGATION_DELAY_SET, be16_from_int(days))

    @classmethod  # constructor for 0x38
    def run_program(cls, program: int) -> Command:
        """Constructor to start a program, using its number (0 is program A)."""
        return cls(CmdCode.RUN_PROGRAM, (_check_byte("program", program, max_value=25),))

    @classmethod  # constructor for 0x39
    def run_zone(cls, zone: int, duration: float) -> Command:
        """Constructor to run a zone for a duration (in seconds).

        The duration is sent as whole minutes (rounding half up), so a duration of less
        than 30 seconds will be sent as zero minutes.
        """

        _check_byte("zone", zone, min_value=1, max_value=0xFFFF)
        if duration < 0:
            raise exc.CommandInvalid(f"Out of range, duration: {duration}")

        minutes = minutes_from_seconds(duration)
        if minutes > MAX_ZONE_DURATION:
            raise exc.CommandInvalid(f"Out of range, duration: {duration} (secs)")

        return cls(CmdCode.RUN_ZONE, (*be16_from_int(zone), minutes))

    @classmethod  # constructor for 0x3B
    def get_current_zone_state(cls, page: int = 0) -> Command:
        """Constructor to get the state of the running zone (c.f. parser_bb)."""
        return cls(CmdCode.CURRENT_ZONE_STATE, (_check_byte("page", page),))

    @classmethod  # constructor for 0x3E
    def get_rain_sensor_state(cls) -> Command:
        """Constructor to get the state of the rain sensor (c.f. parser_be)."""
        return cls(CmdCode.RAIN_SENSOR_STATE)

    @classmethod  # constructor for 0x3F
    def get_current_zone(cls) -> Command:
        """Constructor to get the running zone, as a bitmask (c.f. parser_bf)."""
        return cls(CmdCode.CURRENT_ZONE, (0x00,))

    @classmethod  # constructor for 0x40
    def stop_irrigation(cls) -> Command:
        """Constructor to stop all irrigation (the running zone & any queued zones)."""
        return cls(CmdCode.STOP_IRRIGATION)

    @classmethod  # constructor for 0x42
    def advance_zone(cls) -> Command:
        """Constructor to advance to the next queued zone (not all firmware has this)."""
        return cls(CmdCode.ADVANCE_ZONE, (0x00,))

    @classmethod  # constructor for 0x48
    def get_irrigation_state(cls) -> Command:
        """Constructor to get if irrigation is enabled (c.f. parser_c8)."""
        return cls(CmdCode.IRRIGATION_STATE)

    @classmethod  # constructor for 0x4C (or 0x4B)
    def get_controller_state(cls, legacy: bool = False) -> Command:
        """Constructor to get the combined controller state (c.f. parser_cc).

        Some (older) firmware uses 0x4B, rather than 0x4C, for the same query.
        """

        return cls(CmdCode.CONTROLLER_STATE_ALT if legacy else CmdCode.CONTROLLER_STATE)
