#!/usr/bin/env python3
"""RainBird - Protocol/frame helpers."""

from __future__ import annotations

import math
from datetime import datetime as dt

from . import exceptions as exc


def hex_from_bytes(value: bytes) -> str:
    """Convert bytes to an upper-case hex string (no separators)."""
    return value.hex().upper()


def bytes_from_hex(value: str) -> bytes:
    """Convert a hex string to bytes (whitespace is ignored)."""
    return bytes.fromhex("".join(value.split()))


def be16_from_int(value: int) -> bytes:
    """Convert an unsigned int to a big-endian double (2 bytes)."""
    if not 0 <= value <= 0xFFFF:
        raise exc.CommandInvalid(f"Out of range, double: {value}")
    return value.to_bytes(2, "big")


def int_from_be16(frame: bytes, idx: int) -> int:
    """Return the big-endian double (2 bytes) starting at frame[idx]."""
    return int.from_bytes(frame[idx : idx + 2], "big")


def int_from_le32(frame: bytes, idx: int) -> int:
    """Return the little-endian quad (4 bytes) starting at frame[idx]."""
    return int.from_bytes(frame[idx : idx + 4], "little")


def zones_from_bitmask(mask: int) -> list[int]:
    """Convert a zone bitmask to a sorted list of zone numbers (bit 0 is zone 1).

    >>> zones_from_bitmask(0b101)
    [1, 3]
    """
    return [i + 1 for i in range(mask.bit_length()) if mask & (1 << i)]


def zone_from_bitmask(mask: int) -> int:
    """Return the zone number of the (only) set bit of a bitmask, or 0 if none.

    If more than one bit is set, the highest one wins (as per log2).
    """
    return int(math.log2(mask)) + 1 if mask else 0


def month_year_to_double(month: int, year: int) -> int:
    """Pack a month and year, as used by the controller's date fields.

    The month is the high nibble, and the year is the low 12 bits, so this is not BCD.
    """
    if not 1 <= month <= 12:
        raise exc.CommandInvalid(f"Out of range, month: {month}")
    if not 0 <= year <= 0xFFF:
        raise exc.CommandInvalid(f"Out of range, year: {year}")
    return month * 4096 + year


def month_year_from_double(value: int) -> tuple[int, int]:
    """Unpack a month and year (see: month_year_to_double)."""
    return value >> 12, value & 0xFFF


def minutes_from_seconds(seconds: float) -> int:
    """Convert seconds to whole minutes, rounding half up (so 90s is 2 minutes)."""
    return int(math.floor(seconds / 60 + 0.5))


def dt_or_none(
    year: int, month: int, day: int, hour: int, minute: int, second: int
) -> dt | None:
    """Return a datetime, or None if the fields are not a valid date/time."""
    try:
        return dt(year, month, day, hour, minute, second)
    except ValueError:
        return None
