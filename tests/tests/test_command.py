#!/usr/bin/env python3
"""RainBird - Test the construction of commands (the encode half of the codec)."""

from datetime import datetime as dt

import pytest

from rainbird_tx import Command, exceptions as exc
from rainbird_tx.const import RplCode

from .helpers import assert_raises

COMMANDS = {  # the frame of each constructor (and its args)
    "02": (Command.get_model_and_version,),
    "0300": (Command.get_available_zones,),
    "0301": (Command.get_available_zones, 1),
    "05": (Command.get_serial_number,),
    "10": (Command.get_controller_time,),
    "110E1E00": (Command.set_controller_time, 14, 30, 0),
    "12": (Command.get_controller_date,),
    "130FA7E8": (Command.set_controller_date, 15, 10, 2024),
    "31": (Command.test,),
    "36": (Command.get_irrigation_delay,),
    "370003": (Command.set_irrigation_delay, 3),
    "3800": (Command.run_program, 0),
    "3819": (Command.run_program, 25),
    "39000305": (Command.run_zone, 3, 300),
    "3B00": (Command.get_current_zone_state,),
    "3E": (Command.get_rain_sensor_state,),
    "3F00": (Command.get_current_zone,),
    "40": (Command.stop_irrigation,),
    "4200": (Command.advance_zone,),
    "48": (Command.get_irrigation_state,),
    "4C": (Command.get_controller_state,),
    "4B": (Command.get_controller_state, True),
}


@pytest.mark.parametrize("frame", COMMANDS)
def test_command_frames(frame: str) -> None:
    fnc, *args = COMMANDS[frame]
    cmd = fnc(*args)

    assert str(cmd) == frame
    assert cmd.encode() == bytes.fromhex(frame)
    assert bytes(cmd) == cmd.encode()
    assert len(cmd) == len(frame) // 2
    assert cmd == Command.from_cli(frame)


def test_command_rx_codes() -> None:
    assert Command.get_model_and_version().rx_code == RplCode.MODEL_AND_VERSION
    assert Command.get_current_zone_state().rx_code == RplCode.CURRENT_ZONE_STATE
    assert Command.get_current_zone().rx_code == RplCode.CURRENT_ZONE
    assert Command.get_controller_state().rx_code == RplCode.CONTROLLER_STATE
    assert Command.get_controller_state(legacy=True).rx_code == RplCode.CONTROLLER_STATE

    for cmd in (
        Command.run_zone(1, 60),
        Command.run_program(0),
        Command.stop_irrigation(),
        Command.advance_zone(),
        Command.set_irrigation_delay(0),
    ):
        assert cmd.rx_code == RplCode.ACKNOWLEDGED


def test_run_zone_duration() -> None:
    """The duration is sent as whole minutes, rounding half up."""

    assert Command.run_zone(1, 0).payload[-1] == 0
    assert Command.run_zone(1, 29).payload[-1] == 0
    assert Command.run_zone(1, 30).payload[-1] == 1
    assert Command.run_zone(1, 89).payload[-1] == 1
    assert Command.run_zone(1, 90).payload[-1] == 2
    assert Command.run_zone(1, 255 * 60).payload[-1] == 255

    assert Command.run_zone(258, 60).payload == bytes.fromhex("010201")


def test_set_controller_datetime() -> None:
    date_cmd, time_cmd = Command.set_controller_datetime(dt(2024, 10, 15, 14, 30, 0))

    assert str(date_cmd) == "130FA7E8"
    assert str(time_cmd) == "110E1E00"


def test_command_repr() -> None:
    assert repr(Command.run_zone(3, 300)) == "39000305 # RUN_ZONE"
    assert repr(Command.from_cli("FF")) == "FF # RAW"


def test_from_cli() -> None:
    assert Command.from_cli("39 0003 05") == Command.run_zone(3, 300)
    assert Command.from_cli("3b00") == Command.get_current_zone_state()

    assert_raises(exc.CommandInvalid, Command.from_cli, "")
    assert_raises(exc.CommandInvalid, Command.from_cli, "ZZ")
    assert_raises(exc.CommandInvalid, Command.from_cli, "3B0")


def test_commands_invalid() -> None:
    assert_raises(exc.CommandInvalid, Command.run_zone, 0, 60)
    assert_raises(exc.CommandInvalid, Command.run_zone, 0x10000, 60)
    assert_raises(exc.CommandInvalid, Command.run_zone, 1, -1)
    assert_raises(exc.CommandInvalid, Command.run_zone, 1, 255 * 60 + 30)

    assert_raises(exc.CommandInvalid, Command.run_program, -1)
    assert_raises(exc.CommandInvalid, Command.run_program, 26)
    assert_raises(exc.CommandInvalid, Command.get_available_zones, 256)

    assert_raises(exc.CommandInvalid, Command.set_controller_time, 24, 0, 0)
    assert_raises(exc.CommandInvalid, Command.set_controller_time, 0, 60, 0)
    assert_raises(exc.CommandInvalid, Command.set_controller_date, 0, 1, 2024)
    assert_raises(exc.CommandInvalid, Command.set_controller_date, 1, 13, 2024)
    assert_raises(exc.CommandInvalid, Command.set_controller_date, 1, 1, 0x1000)

    assert_raises(exc.CommandInvalid, Command.set_irrigation_delay, -1)
    assert_raises(exc.CommandInvalid, Command.set_irrigation_delay, 0x10000)

    assert_raises(exc.CommandInvalid, Command, 0x39, [0x00, 0x100])
