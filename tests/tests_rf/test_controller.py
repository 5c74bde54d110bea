#!/usr/bin/env python3
"""RainBird - Test the Controller (zones, programs & status polling).

The controller is started against a virtual one, in which time does not pass (i.e.
a zone runs until it is finished by the test).
"""

import asyncio
from datetime import datetime as dt, timedelta as td

import pytest
import voluptuous as vol

from rainbird_ctl import (
    Controller,
    Event,
    ProgramChanged,
    RainSensorChanged,
    StatusChanged,
    ZoneEnableChanged,
    exceptions as exc,
)
from rainbird_tx import CmdCode, Command

from .conftest import HOST, PASSWORD, ControllerFactoryT, assert_this_happens
from .virtual_controller import MODEL_TM2, VirtualController

STARTUP_CODES = [
    CmdCode.MODEL_AND_VERSION,
    CmdCode.SERIAL_NUMBER,
    CmdCode.AVAILABLE_ZONES,
    CmdCode.CURRENT_ZONE_STATE,  # the probe
    CmdCode.IRRIGATION_STATE,
    CmdCode.CONTROLLER_DATE_GET,
    CmdCode.CONTROLLER_TIME_GET,
    CmdCode.RAIN_SENSOR_STATE,
    CmdCode.CURRENT_ZONE_STATE,
]


def _collect(ctl: Controller, event_filter=None) -> list[Event]:
    events: list[Event] = []
    ctl.add_handler(events.append, event_filter=event_filter)
    return events


async def _start_zone_at_controller(
    ctl: Controller, vc: VirtualController, zone_id: int, seconds: int = 600
) -> None:
    """Start a zone, as if from the controller's own dial (and wait to observe it)."""

    vc.start_zone(zone_id, seconds)
    ctl.refresh_status()
    await assert_this_happens(lambda: ctl.is_in_use(zone_id))


async def _finish_zone_at_controller(ctl: Controller, vc: VirtualController) -> None:
    vc.finish_zone()
    ctl.refresh_status()
    await assert_this_happens(lambda: not ctl.is_in_use())


# ### Start-up ##########################################################################


async def test_start(controller: Controller, vc: VirtualController) -> None:
    assert vc.codes() == STARTUP_CODES

    assert controller.model == "ESP-RZXe"
    assert controller.version == "2.9"
    assert controller.serial_number == "0123456789abcd"
    assert controller.zones == [1, 2, 3, 4, 5, 6]

    assert controller.metadata.as_dict()["model_number"] == 3
    assert controller.irrigation_enabled is True
    assert controller.rain_set_point_reached is False
    assert controller.controller_datetime is not None

    status = controller.status
    assert status["active_zone"] == 0
    assert status["active_program"] is None  # this model doesn't report it
    assert sorted(status["zones"]) == [1, 2, 3, 4, 5, 6]

    assert not controller.is_active() and not controller.is_in_use()
    assert controller.remaining_duration() == 0
    assert controller.duration(1) == 300


async def test_include_zones(
    controller_factory: ControllerFactoryT, vc: VirtualController
) -> None:
    ctl = await controller_factory(vc, include_zones="1, 3, 9")

    assert ctl.zones == [1, 3]
    assert sorted(ctl.status["zones"]) == [1, 3]

    with pytest.raises(exc.ZoneInvalid):
        ctl.is_active(2)
    with pytest.raises(exc.ZoneInvalid):
        ctl.activate_zone(2)


async def test_not_started() -> None:
    ctl = Controller(HOST, PASSWORD)

    with pytest.raises(exc.ControllerNotStarted):
        ctl.metadata
    with pytest.raises(exc.ControllerNotStarted):
        ctl.is_active(1)
    with pytest.raises(RuntimeError):
        await ctl.async_send_cmd(Command.test())

    await ctl.stop()


async def test_bad_config() -> None:
    with pytest.raises(TypeError):
        Controller(HOST, PASSWORD, refresh_rate=60)
    with pytest.raises(vol.Invalid):
        Controller(HOST, PASSWORD, config={"refreshRate": 60})
    with pytest.raises(vol.Invalid):
        Controller(HOST, PASSWORD, config={"default_duration": 9000})


async def test_irrigation_off(
    controller_factory: ControllerFactoryT, vc: VirtualController
) -> None:
    vc.enabled = False
    ctl = await controller_factory(vc)

    assert ctl.irrigation_enabled is False


async def test_clock_drift(controller_factory: ControllerFactoryT) -> None:
    vc_0 = VirtualController(clock=dt.now() - td(hours=1))
    await controller_factory(vc_0)

    assert vc_0.count(CmdCode.CONTROLLER_DATE_SET) == 0  # only a warning

    vc_1 = VirtualController(clock=dt.now() - td(hours=1))
    await controller_factory(vc_1, sync_time=True)

    assert vc_1.count(CmdCode.CONTROLLER_DATE_SET) == 1
    assert vc_1.count(CmdCode.CONTROLLER_TIME_SET) == 1
    assert vc_1.clock is None


# ### Zones #############################################################################


async def test_activate_zone(controller: Controller, vc: VirtualController) -> None:
    events = _collect(controller, event_filter=StatusChanged)

    controller.activate_zone(2, 90)
    assert controller.is_active(2) and not controller.is_in_use(2)

    await asyncio.wait_for(controller.join(), 1)
    await assert_this_happens(lambda: controller.is_in_use(2))

    assert vc.sent_with(CmdCode.RUN_ZONE) == [Command.run_zone(2, 90)]
    assert str(vc.sent_with(CmdCode.RUN_ZONE)[0]) == "39000202"  # 2 mins

    assert controller.is_active(2) and controller.is_in_use()
    assert controller.status["active_zone"] == 2

    samples = []
    for _ in range(3):
        samples.append(controller.remaining_duration(2))
        await asyncio.sleep(0.01)
    assert 0 < samples[-1] <= 120
    assert samples == sorted(samples, reverse=True)

    await assert_this_happens(lambda: bool(events))
    assert events[-1].snapshot.active_zone_id == 2

    await _finish_zone_at_controller(controller, vc)
    assert not controller.is_active(2)
    assert controller.remaining_duration(2) == 0


async def test_durations(
    controller_factory: ControllerFactoryT, vc: VirtualController
) -> None:
    ctl = await controller_factory(vc, min_duration=60, max_duration=600)

    assert ctl.set_duration(1, 30) == 60
    assert ctl.set_duration(1, 6000) == 600
    assert ctl.set_duration(1, 120) == 120 == ctl.duration(1)

    ctl.activate_zone(1)  # uses the zone's duration
    await asyncio.wait_for(ctl.join(), 1)
    await assert_this_happens(lambda: ctl.is_in_use(1))

    await _finish_zone_at_controller(ctl, vc)

    ctl.activate_zone(2, 6000)  # is clamped
    await asyncio.wait_for(ctl.join(), 1)

    assert vc.sent_with(CmdCode.RUN_ZONE) == [
        Command.run_zone(1, 120),
        Command.run_zone(2, 600),
    ]


async def test_zone_waits_for_running_zone(
    controller: Controller, vc: VirtualController
) -> None:
    await _start_zone_at_controller(controller, vc, 3)
    assert controller.is_active(3)  # started by the controller, but still active

    controller.activate_zone(5, 120)
    await asyncio.sleep(0.05)

    assert vc.count(CmdCode.RUN_ZONE) == 0
    assert controller.is_active(5) and not controller.is_in_use(5)
    assert controller.is_in_use(3)

    vc.finish_zone()
    controller.refresh_status()

    await asyncio.wait_for(controller.join(), 1)
    await assert_this_happens(lambda: controller.is_in_use(5))

    assert vc.sent_with(CmdCode.RUN_ZONE) == [Command.run_zone(5, 120)]
    assert not controller.is_active(3) and not controller.is_in_use(3)
    assert vc.overlaps == []


async def test_one_zone_at_a_time(controller: Controller, vc: VirtualController) -> None:
    controller.activate_zone(1, 60)
    controller.activate_zone(2, 60)

    await assert_this_happens(lambda: vc.running_zone == 1)
    await asyncio.sleep(0.05)
    assert vc.running_zone == 1  # zone 2 is waiting

    vc.finish_zone()
    controller.refresh_status()

    await asyncio.wait_for(controller.join(), 1)
    await assert_this_happens(lambda: controller.is_in_use(2))

    assert vc.sent_with(CmdCode.RUN_ZONE) == [
        Command.run_zone(1, 60),
        Command.run_zone(2, 60),
    ]
    assert vc.overlaps == []
    assert not controller.is_in_use(1)


async def test_skip_inactive_zone(controller: Controller, vc: VirtualController) -> None:
    await _start_zone_at_controller(controller, vc, 3)

    controller.activate_zone(5)
    await asyncio.sleep(0.05)

    await controller.deactivate_zone(5)  # not yet in use, so nothing is sent
    assert not controller.is_active(5)

    vc.finish_zone()
    controller.refresh_status()
    await asyncio.wait_for(controller.join(), 1)

    assert vc.count(CmdCode.RUN_ZONE) == 0
    assert vc.count(CmdCode.ADVANCE_ZONE) == vc.count(CmdCode.STOP_IRRIGATION) == 0


async def test_deactivate_all_zones(
    controller: Controller, vc: VirtualController
) -> None:
    await _start_zone_at_controller(controller, vc, 3)

    controller.activate_zone(4)
    controller.activate_zone(5)
    await asyncio.sleep(0.05)

    controller.deactivate_all_zones()
    assert not controller.is_active()
    assert vc.running_zone == 3  # the running zone is not stopped

    vc.finish_zone()
    controller.refresh_status()
    await asyncio.wait_for(controller.join(), 1)

    assert vc.count(CmdCode.RUN_ZONE) == 0
    assert vc.count(CmdCode.ADVANCE_ZONE) == vc.count(CmdCode.STOP_IRRIGATION) == 0


async def test_deactivate_zone(controller: Controller, vc: VirtualController) -> None:
    controller.activate_zone(2)
    await assert_this_happens(lambda: controller.is_in_use(2))

    await controller.deactivate_zone(2)
    assert not controller.is_active(2)

    await assert_this_happens(lambda: not controller.is_in_use(2))
    assert vc.count(CmdCode.ADVANCE_ZONE) == 1
    assert vc.count(CmdCode.STOP_IRRIGATION) == 0


async def test_deactivate_zone_no_advance(
    controller_factory: ControllerFactoryT,
) -> None:
    vc = VirtualController(advance=False)
    ctl = await controller_factory(vc)

    for zone_id in (2, 3):
        ctl.activate_zone(zone_id)
        await assert_this_happens(lambda: ctl.is_in_use(zone_id))

        await ctl.deactivate_zone(zone_id)
        await assert_this_happens(lambda: not ctl.is_in_use(zone_id))

    assert vc.count(CmdCode.ADVANCE_ZONE) == 1  # is not tried a second time
    assert vc.count(CmdCode.STOP_IRRIGATION) == 2


@pytest.mark.parametrize("frame", ["FF00", "BB00"])  # an unknown reply, an invalid one
async def test_deactivate_zone_bad_advance(
    controller: Controller, vc: VirtualController, frame: str
) -> None:
    vc.replies[CmdCode.ADVANCE_ZONE] = bytes.fromhex(frame)

    for zone_id in (2, 3):
        controller.activate_zone(zone_id)
        await assert_this_happens(lambda: controller.is_in_use(zone_id))

        await controller.deactivate_zone(zone_id)
        await assert_this_happens(lambda: not controller.is_in_use(zone_id))

    assert vc.count(CmdCode.ADVANCE_ZONE) == 2  # is tried again
    assert vc.count(CmdCode.STOP_IRRIGATION) == 2


async def test_no_zone_state(controller_factory: ControllerFactoryT) -> None:
    vc = VirtualController(zone_state=False)
    ctl = await controller_factory(vc)

    assert vc.count(CmdCode.CURRENT_ZONE) == 1  # instead of the zone state

    ctl.activate_zone(2, 120)
    await asyncio.wait_for(ctl.join(), 1)

    assert ctl.is_in_use(2)  # as approximated, not yet polled
    assert 100 < ctl.remaining_duration(2) <= 120

    await asyncio.sleep(0.05)  # the refresh
    assert vc.count(CmdCode.CURRENT_ZONE) >= 2
    assert ctl.is_in_use(2) and ctl.status["active_zone"] == 2
    assert 100 < ctl.remaining_duration(2) <= 120

    await _finish_zone_at_controller(ctl, vc)
    assert ctl.remaining_duration() == 0


async def test_zone_started_by_controller(
    controller_factory: ControllerFactoryT,
) -> None:
    vc = VirtualController(zone_state=False)
    ctl = await controller_factory(vc)

    await _start_zone_at_controller(ctl, vc, 4)

    assert ctl.is_active(4)
    assert ctl.remaining_duration(4) == 0  # can't be known


# ### Programs ##########################################################################


async def test_program_unknown(controller: Controller) -> None:
    assert controller.is_program_running("A") is None

    with pytest.raises(exc.ProgramInvalid):
        controller.is_program_running("1")
    with pytest.raises(exc.ProgramInvalid):
        await controller.start_program("AA")


async def test_programs(controller_factory: ControllerFactoryT) -> None:
    vc = VirtualController(model_number=MODEL_TM2)
    ctl = await controller_factory(vc)
    events = _collect(ctl, event_filter=ProgramChanged)

    assert ctl.model == "ESP-TM2"
    assert ctl.is_program_running("B") is False

    await ctl.start_program("b")

    assert vc.sent_with(CmdCode.RUN_PROGRAM) == [Command.run_program(1)]
    assert ctl.is_program_running("B") is True
    assert ctl.is_program_running("A") is False
    assert ctl.is_in_use(1)  # the program's first zone

    await ctl.stop_irrigation()
    await assert_this_happens(lambda: ctl.is_program_running("B") is False)

    await assert_this_happens(lambda: len(events) == 2)
    assert events == [
        ProgramChanged(program_id="B", running=True),
        ProgramChanged(program_id="B", running=False),
    ]


# ### Status, events & other ############################################################


async def test_rain_sensor(controller: Controller, vc: VirtualController) -> None:
    events = _collect(controller, event_filter=RainSensorChanged)

    controller.refresh_status()
    await asyncio.sleep(0.05)
    assert events == []  # no change

    vc.rain_set_point_reached = True
    controller.refresh_status()

    await assert_this_happens(lambda: bool(events))
    assert events == [RainSensorChanged(reached=True)]
    assert controller.rain_set_point_reached is True


async def test_zone_enable(controller: Controller) -> None:
    events = _collect(controller, event_filter=(ZoneEnableChanged, ProgramChanged))

    controller.enable_zone(1, False)
    controller.enable_zone(1, False)  # no change
    controller.enable_zone(2, True)  # no change
    await asyncio.sleep(0)

    assert events == [ZoneEnableChanged(zone_id=1, enabled=False)]
    assert controller.status["zones"][1]["enabled"] is False


async def test_remove_handler(controller: Controller) -> None:
    events: list[Event] = []
    remover = controller.add_handler(events.append)

    controller.refresh_status()
    await assert_this_happens(lambda: len(events) == 1)

    remover()
    remover()  # is idempotent

    controller.refresh_status()
    await asyncio.sleep(0.05)
    assert len(events) == 1


async def test_debounce(controller: Controller, vc: VirtualController) -> None:
    count = vc.count(CmdCode.RAIN_SENSOR_STATE)

    for _ in range(10):
        controller.refresh_status()
        await asyncio.sleep(0)
    await asyncio.sleep(0.1)

    assert vc.count(CmdCode.RAIN_SENSOR_STATE) == count + 1  # a single poll


async def test_irrigation_delay(controller: Controller, vc: VirtualController) -> None:
    assert await controller.get_irrigation_delay() == 0

    assert await controller.set_irrigation_delay(3) is True
    assert vc.delay_days == 3
    assert await controller.get_irrigation_delay() == 3

    assert await controller.set_irrigation_delay() is True  # the configured delay
    assert vc.delay_days == 1


async def test_transport_retries(controller: Controller, vc: VirtualController) -> None:
    vc.fail_next(3)
    assert await controller.get_irrigation_delay() == 0  # retries are uncapped


async def test_stop(controller: Controller, vc: VirtualController) -> None:
    controller.activate_zone(1)
    await controller.stop()

    count = len(vc.sent)
    controller.refresh_status()  # is ignored once stopped
    await asyncio.sleep(0.05)
    assert len(vc.sent) == count


async def test_stop_releases_join(controller: Controller, vc: VirtualController) -> None:
    await _start_zone_at_controller(controller, vc, 3)

    controller.activate_zone(4)
    controller.activate_zone(5)
    await asyncio.sleep(0.05)  # zone 4 is waiting, zone 5 is queued

    await controller.stop()
    await asyncio.wait_for(controller.join(), 1)

    assert vc.count(CmdCode.RUN_ZONE) == 0


async def test_zone_job_timeout(
    monkeypatch: pytest.MonkeyPatch, controller: Controller, vc: VirtualController
) -> None:
    monkeypatch.setattr("rainbird_ctl.controller.ZONE_JOB_TIMEOUT", 0.3)

    await _start_zone_at_controller(controller, vc, 3)

    controller.activate_zone(4)
    controller.activate_zone(5, 120)
    await asyncio.sleep(0.45)  # zone 4 is abandoned, zone 5 is now waiting
    assert vc.count(CmdCode.RUN_ZONE) == 0

    vc.finish_zone()
    controller.refresh_status()
    await asyncio.wait_for(controller.join(), 1)

    assert vc.sent_with(CmdCode.RUN_ZONE) == [Command.run_zone(5, 120)]


# ### Status polling ####################################################################


@pytest.mark.parametrize(
    "refresh_rate, remaining, expected",
    [
        (60, 600, 60),  # the refresh rate is sooner
        (600, 120, 120),  # the zone finishes sooner
        (0, 120, 120),  # only the zone
        (60, 0, 60),  # only the refresh rate
        (0, 0, None),  # no timer
    ],
)
async def test_poll_timer(
    controller_factory: ControllerFactoryT,
    vc: VirtualController,
    refresh_rate: float,
    remaining: int,
    expected: float | None,
) -> None:
    ctl = await controller_factory(vc, refresh_rate=refresh_rate)

    if remaining:
        await _start_zone_at_controller(ctl, vc, 3, remaining)
        await asyncio.sleep(0.05)  # the timer is re-armed after the refresh

    if expected is None:
        assert ctl._poll_timer is None
        return

    assert ctl._poll_timer is not None
    delay = ctl._poll_timer.when() - asyncio.get_running_loop().time()
    assert delay == pytest.approx(expected, abs=1)


async def test_poll_after_unexpected_error(
    controller_factory: ControllerFactoryT, vc: VirtualController
) -> None:
    ctl = await controller_factory(vc, refresh_rate=0.05)

    vc.raise_next(AttributeError("unexpected"))  # will escape the next poll
    count = vc.count(CmdCode.RAIN_SENSOR_STATE)

    await assert_this_happens(
        lambda: vc.count(CmdCode.RAIN_SENSOR_STATE) >= count + 3
    )
    assert ctl.status["active_zone"] == 0
