#!/usr/bin/env python3
"""RainBird - frame processors (the decode half of the codec).

Every parser is passed the complete frame, including its opcode at frame[0]. Multi-byte
fields are big-endian, except for zone bitmasks, which are little-endian (bit 0 is
zone 1).
"""

from __future__ import annotations

from . import exceptions as exc
from .helpers import (
    int_from_be16,
    int_from_le32,
    month_year_from_double,
    zone_from_bitmask,
    zones_from_bitmask,
)
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


def _check_length(frame: bytes, length: int) -> None:
    if len(frame) < length:
        raise exc.ReplyInvalid(
            f"{frame.hex().upper()} < Frame is too short ({len(frame)} < {length})"
        )


# not_acknowledged
def parser_00(frame: bytes) -> NotAcknowledged:
    # 003902  # RunZone refused, error 2
    _check_length(frame, 3)
    return NotAcknowledged(command_code=frame[1], error_code=frame[2], frame=frame)


# acknowledged
def parser_01(frame: bytes) -> Acknowledged:
    # 0139  # RunZone accepted
    _check_length(frame, 2)
    return Acknowledged(command_code=frame[1], frame=frame)


# model_and_version
def parser_82(frame: bytes) -> ModelAndVersion:
    # 82 0003 0209  # ESP-RZXe, v2.9
    _check_length(frame, 5)
    return ModelAndVersion(
        model_number=int_from_be16(frame, 1),
        version=f"{frame[3]}.{frame[4]}",
        frame=frame,
    )


# available_zones
def parser_83(frame: bytes) -> AvailableZones:
    # 83 00 3F000000  # page 0, zones 1-6
    _check_length(frame, 6)
    zones = zones_from_bitmask(int_from_le32(frame, 2))
    return AvailableZones(page=frame[1], zones=tuple(zones), frame=frame)


# serial_number
def parser_85(frame: bytes) -> SerialNumber:
    # 85 0000000000000000  # some firmware reports all zeros
    _check_length(frame, 8)
    return SerialNumber(serial_number=frame[1:8].hex(), frame=frame)


# controller_time
def parser_90(frame: bytes) -> ControllerTime:
    _check_length(frame, 4)
    return ControllerTime(hour=frame[1], minute=frame[2], second=frame[3], frame=frame)


# controller_date
def parser_92(frame: bytes) -> ControllerDate:
    # 92 0F A7E8  # 15 Oct 2024: month is the 1st nibble, year the remaining three
    _check_length(frame, 4)
    month, year = month_year_from_double(int_from_be16(frame, 2))
    return ControllerDate(year=year, month=month, day=frame[1], frame=frame)


# irrigation_delay
def parser_b6(frame: bytes) -> IrrigationDelay:
    _check_length(frame, 3)
    return IrrigationDelay(days=int_from_be16(frame, 1), frame=frame)


# current_zone_state
def parser_bb(frame: bytes) -> CurrentZoneState:
    """Return the state of the running zone.

    The layout depends upon the hardware family (and so, the length of the frame):
      - 12 bytes: ESP-TM2, includes the running program
      - 10 bytes: ESP-RZXe & ESP-Me series
    """

    if len(frame) == 12:  # ESP-TM2
        return CurrentZoneState(
            page=frame[1],
            zone_id=frame[8],
            time_remaining=int_from_be16(frame, 4),
            running=frame[11] != 0,
            program_number=frame[9],
            frame=frame,
        )

    if len(frame) == 10:  # ESP-RZXe & ESP-Me
        return CurrentZoneState(
            page=frame[1],
            zone_id=frame[6],
            time_remaining=int_from_be16(frame, 8),
            running=frame[3] != 0,
            frame=frame,
        )

    raise exc.ReplyInvalid(
        f"{frame.hex().upper()} < Unsupported layout (length is {len(frame)}, "
        "expecting 10 or 12)"
    )


# rain_sensor_state
def parser_be(frame: bytes) -> RainSensorState:
    _check_length(frame, 2)
    return RainSensorState(set_point_reached=frame[1] != 0, frame=frame)


# current_zone
def parser_bf(frame: bytes) -> CurrentZone:
    # BF 00 04000000  # zone 3 is running
    _check_length(frame, 6)
    return CurrentZone(
        page=frame[1], zone_id=zone_from_bitmask(int_from_le32(frame, 2)), frame=frame
    )


# irrigation_state
def parser_c8(frame: bytes) -> IrrigationState:
    _check_length(frame, 2)
    return IrrigationState(enabled=frame[1] != 0, frame=frame)


# controller_state
def parser_cc(frame: bytes) -> ControllerState:
    # CC 0E1E00 0F A7E8 0000 00 01 0064 012C 03
    _check_length(frame, 16)
    month, year = month_year_from_double(int_from_be16(frame, 5))
    return ControllerState(
        hour=frame[1],
        minute=frame[2],
        second=frame[3],
        day=frame[4],
        month=month,
        year=year,
        delay_days=int_from_be16(frame, 7),
        rain_set_point_reached=frame[9] != 0,
        irrigation_enabled=frame[10] != 0,
        seasonal_adjust=int_from_be16(frame, 11),
        current_zone_time_remaining=int_from_be16(frame, 13),
        current_zone=frame[15],
        frame=frame,
    )


def parser_unknown(frame: bytes) -> UnknownReply:
    return UnknownReply(frame=frame)


_REPLY_PARSERS = {
    int(k[7:], 16): v
    for k, v in locals().items()
    if callable(v) and k.startswith("parser_") and len(k) == 9
}


def decode(frame: bytes) -> Reply:
    """Decode a (decrypted) frame into a typed Reply, dispatching on its opcode.

    Unknown opcodes return an UnknownReply. Raise ReplyInvalid if the frame is empty,
    or its shape is not as expected.
    """

    if not frame:
        raise exc.ReplyInvalid("Frame is empty")

    return _REPLY_PARSERS.get(frame[0], parser_unknown)(bytes(frame))
