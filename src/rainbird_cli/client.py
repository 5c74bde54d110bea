#!/usr/bin/env python3
"""A CLI for the rainbird_ctl library."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Final

import click
import voluptuous as vol
from colorama import Fore, Style, init as colorama_init

from rainbird_ctl import (
    Controller,
    Event,
    ProgramChanged,
    RainSensorChanged,
    StatusChanged,
    ZoneEnableChanged,
    exceptions as exc,
)
from rainbird_ctl.const import SZ_CONFIG
from rainbird_ctl.schemas import SCH_GLOBAL_CONFIG
from rainbird_tx import Command, Engine, set_logging
from rainbird_tx.const import SZ_SHOW_REQUEST_RESPONSE
from rainbird_tx.logger import DEFAULT_DATEFMT, DEFAULT_FMT

SZ_DBG_MODE: Final = "debug_mode"
DEBUG_ADDR: Final = "0.0.0.0"
DEBUG_PORT: Final = 5679

# this is called after import colorlog to ensure its handlers wrap the correct streams
logging.basicConfig(level=logging.WARNING, format=DEFAULT_FMT, datefmt=DEFAULT_DATEFMT)


DELAY: Final = "delay"
INFO: Final = "info"
MONITOR: Final = "monitor"
PROGRAM: Final = "program"
RAW: Final = "raw"
RUN_ZONE: Final = "run_zone"
STOP: Final = "stop"


COLORS = {
    StatusChanged: Fore.GREEN,
    RainSensorChanged: Fore.CYAN,
    ZoneEnableChanged: Fore.MAGENTA,
    ProgramChanged: Style.BRIGHT + Fore.YELLOW,
}

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

LIB_CFG_KEYS = tuple(str(k) for k in SCH_GLOBAL_CONFIG({}).keys())


def start_debugging(wait_for_client: bool) -> None:
    import debugpy  # type: ignore[import-untyped]

    debugpy.listen(address=(DEBUG_ADDR, DEBUG_PORT))
    print(f" - debugger is listening on: {DEBUG_ADDR}:{DEBUG_PORT}")

    if wait_for_client:
        print("   - waiting for a debugger to attach...")
        debugpy.wait_for_client()


def split_kwargs(obj: tuple[dict, dict], kwargs: dict) -> tuple[dict, dict]:
    """Split kwargs into cli/library kwargs."""
    cli_kwargs, lib_kwargs = obj

    cli_kwargs.update({k: v for k, v in kwargs.items() if k not in LIB_CFG_KEYS})
    lib_kwargs[SZ_CONFIG].update({k: v for k, v in kwargs.items() if k in LIB_CFG_KEYS})

    return cli_kwargs, lib_kwargs


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("-z", "--debug-mode", count=True, help="enable debugger")
@click.option("-v", "--verbose", count=True, help="-v for info, -vv for debug")
@click.option("-H", "--host", envvar="RAINBIRD_HOST", required=True)
@click.option("-P", "--password", envvar="RAINBIRD_PASSWORD", required=True)
@click.option("-c", "--config-file", type=click.File("r"), help="a JSON config file")
@click.option(  # show_request_response
    "-r",
    "--show-request-response",
    is_flag=True,
    default=None,
    help="log every request/response",
)
@click.pass_context
def cli(ctx: click.Context, config_file: Any = None, **kwargs: Any) -> None:
    """A CLI for the rainbird_ctl library."""

    if kwargs[SZ_DBG_MODE] > 0:  # Do first
        start_debugging(kwargs[SZ_DBG_MODE] == 1)

    lib_config: dict[str, Any] = json.load(config_file) if config_file else {}
    if kwargs.pop(SZ_SHOW_REQUEST_RESPONSE) is not None:
        lib_config[SZ_SHOW_REQUEST_RESPONSE] = True

    ctx.obj = kwargs, {SZ_CONFIG: lib_config}


#
# 1/7: INFO
@click.command()
@click.pass_obj
def info(obj: tuple[dict, dict], **kwargs: Any) -> tuple[str, dict, dict]:
    """Print the controller's metadata & status."""
    config, lib_config = split_kwargs(obj, kwargs)
    return INFO, lib_config, config


#
# 2/7: MONITOR
@click.command()
@click.option("--refresh-rate", type=click.FLOAT, help="seconds between polls")
@click.pass_obj
def monitor(obj: tuple[dict, dict], **kwargs: Any) -> tuple[str, dict, dict]:
    """Print the controller's events, until interrupted."""
    if kwargs["refresh_rate"] is None:
        del kwargs["refresh_rate"]
    config, lib_config = split_kwargs(obj, kwargs)
    return MONITOR, lib_config, config


#
# 3/7: RUN_ZONE
@click.command()
@click.argument("zone", type=click.INT)
@click.argument("seconds", type=click.INT, required=False)
@click.pass_obj
def run_zone(obj: tuple[dict, dict], **kwargs: Any) -> tuple[str, dict, dict]:
    """Run a zone (for its default duration, if none is given)."""
    config, lib_config = split_kwargs(obj, kwargs)
    return RUN_ZONE, lib_config, config


#
# 4/7: STOP
@click.command()
@click.pass_obj
def stop(obj: tuple[dict, dict], **kwargs: Any) -> tuple[str, dict, dict]:
    """Stop all irrigation."""
    config, lib_config = split_kwargs(obj, kwargs)
    return STOP, lib_config, config


#
# 5/7: PROGRAM
@click.command()
@click.argument("letter", type=click.STRING)
@click.pass_obj
def program(obj: tuple[dict, dict], **kwargs: Any) -> tuple[str, dict, dict]:
    """Start a program (A, B, C...)."""
    config, lib_config = split_kwargs(obj, kwargs)
    return PROGRAM, lib_config, config


#
# 6/7: DELAY
@click.command()
@click.argument("days", type=click.INT, required=False)
@click.pass_obj
def delay(obj: tuple[dict, dict], **kwargs: Any) -> tuple[str, dict, dict]:
    """Print the irrigation delay (after setting it, if DAYS is given)."""
    config, lib_config = split_kwargs(obj, kwargs)
    return DELAY, lib_config, config


#
# 7/7: RAW
@click.command()
@click.argument("frame", type=click.STRING)
@click.pass_obj
def raw(obj: tuple[dict, dict], **kwargs: Any) -> tuple[str, dict, dict]:
    """Send a raw frame (as hex, e.g. '3B00') and print the decoded reply."""
    config, lib_config = split_kwargs(obj, kwargs)
    return RAW, lib_config, config


def print_event(event: Event) -> None:
    """Process the event as it arrives (a callback).

    In this case, the event is merely printed.
    """

    if isinstance(event, StatusChanged):
        print(f"{COLORS[StatusChanged]}{json.dumps(event.snapshot.as_dict())}")
    else:
        print(f"{COLORS.get(type(event), '')}{event}")


def print_summary(ctl: Controller) -> None:
    print(f"Metadata[{ctl}] = {json.dumps(ctl.metadata.as_dict(), indent=4)}\r\n")
    print(f"Status[{ctl}] = {json.dumps(ctl.status, indent=4)}\r\n")


async def send_raw(lib_kwargs: dict, **kwargs: Any) -> None:
    """Send a single raw frame, using only the engine (the controller isn't started)."""

    cmd = Command.from_cli(kwargs["frame"])

    try:
        engine = Engine(kwargs["host"], kwargs["password"], **lib_kwargs[SZ_CONFIG])
    except vol.Invalid as err:
        print(f"\r\nclient.py: Invalid config: {err}")
        return

    await engine.start()
    try:
        rply = await engine.async_send_cmd(cmd)
    finally:
        await engine.stop()

    print(f"{Fore.CYAN}{cmd!r}")
    print(f"{Fore.GREEN}{rply!r}" if rply else f"{Fore.RED}No (valid) reply")


async def async_main(command: str, lib_kwargs: dict, **kwargs: Any) -> None:
    """Run the command against the controller."""

    colorama_init(autoreset=True)

    level = {0: logging.WARNING, 1: logging.INFO}.get(kwargs["verbose"], logging.DEBUG)
    for name in ("rainbird_tx", "rainbird_ctl"):
        set_logging(logging.getLogger(name), level=level)

    if command == RAW:
        await send_raw(lib_kwargs, **kwargs)
        return

    try:
        ctl = Controller(kwargs["host"], kwargs["password"], **lib_kwargs)
    except vol.Invalid as err:
        print(f"\r\nclient.py: Invalid config: {err}")
        return

    print("\r\nclient.py: Starting controller...")

    try:  # main code here
        await ctl.start()

        if command == INFO:
            print(f"Irrigation delay = {await ctl.get_irrigation_delay()} (days)")

        elif command == MONITOR:
            ctl.add_handler(print_event)
            await asyncio.Event().wait()  # until cancelled

        elif command == RUN_ZONE:
            ctl.activate_zone(kwargs["zone"], kwargs["seconds"])
            await ctl.join()

        elif command == STOP:
            await ctl.stop_irrigation()

        elif command == PROGRAM:
            letter = kwargs["letter"]
            await ctl.start_program(letter)
            print(f"Program {letter} running = {ctl.is_program_running(letter)}")

        elif command == DELAY:
            if kwargs["days"] is not None:
                await ctl.set_irrigation_delay(kwargs["days"])
            print(f"Irrigation delay = {await ctl.get_irrigation_delay()} (days)")

    except asyncio.CancelledError:
        msg = "ended via: CancelledError (e.g. SIGINT)"
    except exc.RainBirdException as err:
        msg = f"ended via: RainBirdException: {err}"
    else:
        msg = "ended without error"
    finally:
        await ctl.stop()

    print(f"\r\nclient.py: Controller stopped: {msg}")

    if command in (INFO, MONITOR) and ctl._metadata:
        print_summary(ctl)


cli.add_command(info)
cli.add_command(monitor)
cli.add_command(run_zone)
cli.add_command(stop)
cli.add_command(program)
cli.add_command(delay)
cli.add_command(raw)


def main() -> None:
    try:
        result = cli(standalone_mode=False)
    except click.ClickException as err:
        print(f"Error: {err}")
        sys.exit(-1)

    if isinstance(result, int):
        sys.exit(result)

    (command, lib_kwargs, kwargs) = result

    try:
        asyncio.run(async_main(command, lib_kwargs, **kwargs))
    except KeyboardInterrupt:
        print("\r\nclient.py: Controller stopped: ended via: KeyboardInterrupt")


if __name__ == "__main__":
    main()
