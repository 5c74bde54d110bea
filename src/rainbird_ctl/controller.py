#!/usr/bin/env python3
"""RainBird - the controller (coordinates zones & programs, polls for status).

The controller can run only one zone at a time and cannot push its state, so:
 - zone starts are queued, and run strictly one at a time, in the order requested
 - a start waits until any running zone has finished (as observed by a status poll)
 - the status is polled, more often as the running zone nears its end
 - requests for a refresh are debounced (coalesced) into a single poll
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime as dt
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any

from rainbird_tx import (
    Acknowledged,
    AvailableZones,
    Command,
    ControllerDate,
    ControllerTime,
    CurrentZone,
    CurrentZoneState,
    Engine,
    IrrigationDelay,
    IrrigationState,
    ModelAndVersion,
    NotAcknowledged,
    RainSensorState,
    SerialNumber,
)
from rainbird_tx.helpers import dt_or_none

from . import exceptions as exc
from .const import (
    CLOCK_DRIFT_LIMIT,
    DEBOUNCE_DELAY,
    NO_PROGRAM,
    PROGRAM_IDS,
    SZ_CONFIG,
    SZ_ZONES,
    ZONE_JOB_TIMEOUT,
)
from .events import (
    Event,
    ProgramChanged,
    RainSensorChanged,
    StatusChanged,
    ZoneEnableChanged,
)
from .helpers import get_program_id, get_program_number
from .schemas import SCH_CONTROLLER_CONFIG, SCH_GLOBAL_CONFIG
from .zones import ControllerMetadata, ControllerStatus, Zone

if TYPE_CHECKING:
    import aiohttp

    from rainbird_tx import Reply

    from .events import EventFilterT, EventHandlerT


_LOGGER = logging.getLogger(__name__)


class Controller(Engine):
    """The controller class."""

    def __init__(
        self,
        host: str,
        password: str,
        /,
        *,
        session: aiohttp.ClientSession | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        **kwargs: Any,
    ) -> None:
        if kwargs.pop("debug_mode", None):
            _LOGGER.setLevel(logging.DEBUG)

        config: dict[str, Any] = SCH_GLOBAL_CONFIG(kwargs.pop(SZ_CONFIG, {}))
        if kwargs:
            raise TypeError(f"Unexpected keyword arguments: {', '.join(kwargs)}")

        super().__init__(host, password, session=session, loop=loop, **config)

        self.config = SimpleNamespace(**SCH_CONTROLLER_CONFIG(config))

        self._metadata: ControllerMetadata | None = None  # None until self.start()
        self._zones: dict[int, Zone] = {}
        self._status: ControllerStatus | None = None

        self._current_zone_id: int = 0
        self._program_id: str | None = None  # None if it can't be known
        self._rain_set_point_reached: bool | None = None
        self._irrigation_enabled: bool | None = None
        self._controller_datetime: dt | None = None

        # firmware capabilities, None until probed
        self._zone_state_supported: bool | None = None
        self._advance_supported: bool | None = None

        self._handlers: list[tuple[EventHandlerT, EventFilterT | None]] = []

        self._poll_timer: asyncio.TimerHandle | None = None
        self._debounce_timer: asyncio.TimerHandle | None = None
        self._zone_queue: asyncio.Queue[tuple[int, int]] = asyncio.Queue()
        self._closing = False

    def __repr__(self) -> str:
        return f"Controller(host={self.host}, config={self.config})"

    async def start(self) -> None:
        """Start the Controller, learning its metadata, zones & capabilities."""

        _LOGGER.debug(f"{self}: Starting...")

        await super().start()

        self._metadata = await self._get_metadata()
        self._zones = {
            z: Zone(zone_id=z, duration=self.config.default_duration)
            for z in self._metadata.zones
        }
        self._zone_state_supported = await self._probe_zone_state()

        await self._check_irrigation_state()
        await self._check_clock()

        await self._update_status()
        self._set_poll_timer()

        self.add_task(
            self._loop.create_task(self._zone_worker(), name=f"{self}: zone worker")
        )

        _LOGGER.info(
            f"{self}: Started: {self._metadata.model_name} v{self._metadata.version}"
            f" (serial number: {self._metadata.serial_number}),"
            f" zones: {list(self._metadata.zones)}"
        )

    async def stop(self) -> None:
        """Stop the Controller and tidy up."""

        self._closing = True
        self._cancel_poll_timer()
        if self._debounce_timer:
            self._debounce_timer.cancel()
            self._debounce_timer = None

        await super().stop()

        while not self._zone_queue.empty():  # the worker has gone, so release join()
            self._zone_queue.get_nowait()
            self._zone_queue.task_done()

    # Initialisation (learn the controller)

    async def _get_metadata(self) -> ControllerMetadata:
        rply: Reply | None

        rply = await self.async_send_cmd(Command.get_model_and_version())
        if not isinstance(rply, ModelAndVersion):
            raise exc.ReplyInvalid(f"Unable to get the model & version: {rply}")
        model_and_version = rply

        rply = await self.async_send_cmd(Command.get_serial_number())
        if not isinstance(rply, SerialNumber):
            raise exc.ReplyInvalid(f"Unable to get the serial number: {rply}")
        serial_number = rply.serial_number

        rply = await self.async_send_cmd(Command.get_available_zones())
        if not isinstance(rply, AvailableZones):
            raise exc.ReplyInvalid(f"Unable to get the available zones: {rply}")
        zones = rply.zones

        if include := self.config.include_zones:
            if missing := [z for z in include if z not in zones]:
                _LOGGER.warning(f"{self}: Zones {missing} are not available, ignored")
            zones = tuple(z for z in zones if z in include)

        return ControllerMetadata(
            model_number=model_and_version.model_number,
            version=model_and_version.version,
            serial_number=serial_number,
            zones=zones,
        )

    async def _probe_zone_state(self) -> bool:
        """Return True if the firmware can report the state of the running zone.

        Otherwise, only the running zone can be known (not its remaining duration).
        """

        try:
            rply = await self.async_send_cmd(Command.get_current_zone_state())
        except exc.ProtocolError:
            rply = None

        result = isinstance(rply, CurrentZoneState)
        _LOGGER.debug(f"{self}: Zone state queries are supported: {result}")
        return result

    async def _check_irrigation_state(self) -> None:
        rply = await self.async_send_cmd(Command.get_irrigation_state())
        if isinstance(rply, IrrigationState):
            self._irrigation_enabled = rply.enabled

        if self._irrigation_enabled is False:
            _LOGGER.warning(
                "RainBird controller is currently OFF."
                " Please turn it ON so that it can be controlled"
            )

    async def _check_clock(self) -> None:
        """Warn if the controller's clock has drifted (and correct it, if configured)."""

        date = await self.async_send_cmd(Command.get_controller_date())
        time = await self.async_send_cmd(Command.get_controller_time())
        if not isinstance(date, ControllerDate) or not isinstance(time, ControllerTime):
            _LOGGER.debug(f"{self}: Unable to get the controller's date/time")
            return

        self._controller_datetime = dt_or_none(
            date.year, date.month, date.day, time.hour, time.minute, time.second
        )
        if self._controller_datetime is None:
            _LOGGER.warning(f"{self}: The controller's date/time is invalid")
        else:
            drift = (self._controller_datetime - self._dt_now()).total_seconds()
            if abs(drift) <= CLOCK_DRIFT_LIMIT:
                return
            _LOGGER.warning(
                f"RainBird controller time {self._controller_datetime} is more than"
                f" {CLOCK_DRIFT_LIMIT / 60:.0f} minutes {'fast' if drift > 0 else 'slow'}"
            )

        if self.config.sync_time:
            await self.sync_time()

    async def sync_time(self) -> bool:
        """Set the controller's date & time to the local time."""

        for cmd in Command.set_controller_datetime(self._dt_now()):
            rply = await self.async_send_cmd(cmd)
            if not isinstance(rply, Acknowledged):
                _LOGGER.warning(f"{self}: Unable to set the date/time: {rply}")
                return False

        _LOGGER.info(f"{self}: The controller's date/time has been set")
        self._controller_datetime = self._dt_now()
        return True

    # Metadata (known once started)

    @property
    def metadata(self) -> ControllerMetadata:
        if self._metadata is None:
            raise exc.ControllerNotStarted(f"{self}: metadata is not yet known")
        return self._metadata

    @property
    def model(self) -> str:
        return self.metadata.model_name

    @property
    def version(self) -> str:
        return self.metadata.version

    @property
    def serial_number(self) -> str:
        return self.metadata.serial_number

    @property
    def zones(self) -> list[int]:
        return list(self.metadata.zones)

    def _get_zone(self, zone_id: int) -> Zone:
        if self._metadata is None:
            raise exc.ControllerNotStarted(f"{self}: zones are not yet known")
        try:
            return self._zones[zone_id]
        except KeyError:
            raise exc.ZoneInvalid(f"{self}: Zone {zone_id} is not known") from None

    # State (as at the most recent status poll)

    @property
    def status(self) -> dict[str, Any]:
        now = self._dt_now()
        return {
            **(self._status.as_dict() if self._status else {}),
            SZ_ZONES: {z.zone_id: z.as_dict(now) for z in self._zones.values()},
        }

    @property
    def rain_set_point_reached(self) -> bool:
        return bool(self._rain_set_point_reached)

    @property
    def irrigation_enabled(self) -> bool | None:
        return self._irrigation_enabled

    @property
    def controller_datetime(self) -> dt | None:
        return self._controller_datetime

    def is_active(self, zone_id: int | None = None) -> bool:
        """Return True if the zone (or any zone) is active (is wanted to run)."""
        if zone_id is None:
            return any(z.active for z in self._zones.values())
        return self._get_zone(zone_id).active

    def is_in_use(self, zone_id: int | None = None) -> bool:
        """Return True if the zone (or any zone) is running."""
        if zone_id is None:
            return any(z.in_use for z in self._zones.values())
        return self._get_zone(zone_id).in_use

    def remaining_duration(self, zone_id: int | None = None) -> int:
        """Return the remaining run time of the zone (or all zones), in seconds."""
        now = self._dt_now()
        if zone_id is None:
            return sum(z.remaining(now) for z in self._zones.values())
        return self._get_zone(zone_id).remaining(now)

    def duration(self, zone_id: int) -> int:
        return self._get_zone(zone_id).duration

    def set_duration(self, zone_id: int, duration: int) -> int:
        """Set the default run time of a zone (clamped to the min/max configured)."""
        zone = self._get_zone(zone_id)
        zone.duration = self._clamp_duration(duration)
        return zone.duration

    def _clamp_duration(self, duration: float) -> int:
        return int(
            min(max(duration, self.config.min_duration), self.config.max_duration)
        )

    def enable_zone(self, zone_id: int, enabled: bool) -> None:
        zone = self._get_zone(zone_id)
        if zone.enabled == enabled:
            return
        zone.enabled = enabled
        self._publish(ZoneEnableChanged(zone_id=zone_id, enabled=enabled))

    # Zones (one runs at a time)

    def activate_zone(self, zone_id: int, duration: int | None = None) -> None:
        """Request that a zone is run, queuing it behind any other requests.

        If no duration (in seconds) is given, the zone's default is used.
        """

        zone = self._get_zone(zone_id)
        duration = self._clamp_duration(zone.duration if duration is None else duration)

        _LOGGER.debug(f"{zone}: Activate for {duration} seconds")

        zone.active = True
        self._zone_queue.put_nowait((zone_id, duration))

    async def deactivate_zone(self, zone_id: int) -> None:
        """Cancel any request for a zone to run, and stop it if it is running."""

        zone = self._get_zone(zone_id)

        _LOGGER.debug(f"{zone}: Deactivate")

        zone.active = False
        if not zone.in_use:
            return

        try:
            await self._stop_zone()
        except exc.RainBirdException as err:
            _LOGGER.warning(f"{zone}: Failed to stop [{err}]")
        self.refresh_status()

    def deactivate_all_zones(self) -> None:
        """Cancel all requests for zones to run (any running zone is not stopped)."""
        for zone in self._zones.values():
            zone.active = False

    async def _stop_zone(self) -> None:
        """Stop the running zone, advancing to the next (queued) zone, if possible.

        Not all firmware can advance a zone: if it is refused, irrigation is stopped
        instead, and will be for the rest of the session. Any other reply to the
        advance also results in irrigation being stopped.
        """

        if self._advance_supported is not False:
            rply = await self.async_send_cmd(Command.advance_zone())
            if isinstance(rply, Acknowledged):
                self._advance_supported = True
                return
            if isinstance(rply, NotAcknowledged):
                _LOGGER.info(
                    f"{self}: Unable to advance zones, will stop irrigation instead"
                )
                self._advance_supported = False
            else:  # an unexpected reply (or none), so try again next time
                _LOGGER.warning(f"{self}: Failed to advance zone: {rply}")

        await self.async_send_cmd(Command.stop_irrigation())

    async def join(self) -> None:
        """Wait until all the queued zone starts have been processed."""
        await self._zone_queue.join()

    async def _zone_worker(self) -> None:
        """Run the queued zone starts, one at a time, in the order requested."""

        while True:
            zone_id, duration = await self._zone_queue.get()
            try:
                await asyncio.wait_for(
                    self._start_zone(zone_id, duration), timeout=ZONE_JOB_TIMEOUT
                )
            except TimeoutError:
                _LOGGER.warning(f"Zone {zone_id}: Timed out waiting to start")
            finally:
                self._zone_queue.task_done()

    async def _start_zone(self, zone_id: int, duration: int) -> None:
        zone = self._zones[zone_id]

        _LOGGER.debug(f"{zone}: Start for {duration} seconds")

        try:
            self._cancel_poll_timer()
            await self._update_status()

            if not zone.active:
                _LOGGER.info(f"{zone}: Skipped as it is not active")
                return

            if self._current_zone_id:
                self._set_poll_timer()
                await self._wait_for_zone_clear()
                self._cancel_poll_timer()

            if not zone.active:
                _LOGGER.info(f"{zone}: Skipped as it is not active")
                return

            if zone.in_use:
                _LOGGER.info(f"{zone}: Skipped as it is already in use")
                return

            _LOGGER.info(f"{zone}: Run for {duration} seconds")

            rply = await self.async_send_cmd(Command.run_zone(zone_id, duration))
            if isinstance(rply, NotAcknowledged):
                _LOGGER.warning(f"{zone}: Failed to start [{rply}]")

            elif not self._zone_state_supported:  # approximate what can't be polled
                zone.remaining_duration = duration
                zone.activation_timestamp = self._dt_now()

        except exc.RainBirdException as err:
            _LOGGER.warning(f"{zone}: Failed to start [{err}]")

        finally:
            self.refresh_status()

    async def _wait_for_zone_clear(self) -> None:
        """Wait until a status poll observes that no zone is running."""

        fut: asyncio.Future[None] = self._loop.create_future()

        def handler(event: Event) -> None:
            assert isinstance(event, StatusChanged)  # mypy
            if event.snapshot.active_zone_id == 0 and not fut.done():
                fut.set_result(None)

        remover = self.add_handler(handler, event_filter=StatusChanged)
        try:
            await fut
        finally:
            remover()

    # Programs

    async def start_program(self, program_id: str) -> None:
        """Start a program (by its letter), and refresh the status."""

        program_number = get_program_number(program_id)

        _LOGGER.info(f"Program {program_id.upper()}: Start")

        rply = await self.async_send_cmd(Command.run_program(program_number))
        if isinstance(rply, NotAcknowledged):
            _LOGGER.warning(f"Program {program_id.upper()}: Failed to start [{rply}]")

        await self._perform_status_refresh()

    def is_program_running(self, program_id: str) -> bool | None:
        """Return True if the program is running, or None if that can't be known."""

        get_program_number(program_id)  # validate the program id
        if self._program_id is None:
            return None
        return self._program_id == program_id.upper()

    async def stop_irrigation(self) -> None:
        """Stop the running zone, and any queued zones (and any running program)."""

        await self.async_send_cmd(Command.stop_irrigation())
        self.refresh_status()

    # Irrigation (rain) delay

    async def get_irrigation_delay(self) -> int | None:
        """Return the irrigation delay, in days (None if it can't be known)."""

        rply = await self.async_send_cmd(Command.get_irrigation_delay())
        return rply.days if isinstance(rply, IrrigationDelay) else None

    async def set_irrigation_delay(self, days: int | None = None) -> bool:
        """Set the irrigation delay, in days (0 cancels any delay).

        If no delay is given, the configured one is used.
        """

        days = self.config.irrigation_delay if days is None else days
        rply = await self.async_send_cmd(Command.set_irrigation_delay(days))
        return isinstance(rply, Acknowledged)

    # Status polling

    def refresh_status(self) -> None:
        """Request a status refresh (requests are debounced into a single poll)."""

        if self._closing:
            return

        if self._debounce_timer:
            self._debounce_timer.cancel()
        self._debounce_timer = self._loop.call_later(
            DEBOUNCE_DELAY, self._fire_debounce_timer
        )

    def _fire_debounce_timer(self) -> None:
        self._debounce_timer = None
        self._spawn_status_refresh()

    def _fire_poll_timer(self) -> None:
        self._poll_timer = None
        self._spawn_status_refresh()

    def _spawn_status_refresh(self) -> None:
        if not self._closing:
            self.add_task(self._loop.create_task(self._perform_status_refresh()))

    def _cancel_poll_timer(self) -> None:
        if self._poll_timer:
            self._poll_timer.cancel()
            self._poll_timer = None

    def _set_poll_timer(self) -> None:
        """Arm the poll timer, to fire at the refresh rate (or as the zone finishes)."""

        self._cancel_poll_timer()
        if self._closing:
            return

        delay: float = self.config.refresh_rate
        zone = self._zones.get(self._current_zone_id)
        if zone and zone.remaining_duration > 0:
            remaining = zone.remaining_duration
            delay = min(delay, remaining) if delay else remaining

        if delay > 0:
            _LOGGER.debug(f"{self}: Status timer set for {delay} secs")
            self._poll_timer = self._loop.call_later(delay, self._fire_poll_timer)

    async def _perform_status_refresh(self) -> None:
        self._cancel_poll_timer()
        try:
            await self._update_status()
        except exc.RainBirdException as err:
            _LOGGER.warning(f"{self}: Failed to get status [{err}]")
        finally:  # whatever the outcome, keep polling
            self._set_poll_timer()

    async def _get_status(self) -> ControllerStatus | None:
        """Poll the controller and return a snapshot of its state (None on failure)."""

        rply: Reply | None

        rply = await self.async_send_cmd(Command.get_rain_sensor_state())
        reached = rply.set_point_reached if isinstance(rply, RainSensorState) else None

        if self._zone_state_supported:
            rply = await self.async_send_cmd(Command.get_current_zone_state())
            if not isinstance(rply, CurrentZoneState):
                return None
            return ControllerStatus(
                active_zone_id=rply.zone_id if rply.running else 0,
                active_program_id=_program_id_or_none(rply.program_number),
                time_remaining=rply.time_remaining if rply.running else 0,
                running=rply.running,
                rain_set_point_reached=reached,
            )

        rply = await self.async_send_cmd(Command.get_current_zone())
        if not isinstance(rply, CurrentZone):
            return None
        return ControllerStatus(
            active_zone_id=rply.zone_id,
            active_program_id=None,
            time_remaining=0,
            running=rply.zone_id != 0,
            rain_set_point_reached=reached,
        )

    async def _update_status(self) -> None:
        if (snapshot := await self._get_status()) is None:
            _LOGGER.warning(f"{self}: Unable to retrieve controller status")
            return
        self._handle_status(snapshot)

    def _handle_status(self, snapshot: ControllerStatus) -> None:
        """Reconcile a status snapshot into the state of the zones & programs."""

        now = self._dt_now()
        prev_zone_id, self._current_zone_id = (
            self._current_zone_id,
            snapshot.active_zone_id,
        )
        self._status = snapshot

        if prev_zone_id and prev_zone_id != snapshot.active_zone_id:
            _LOGGER.info(f"Zone {prev_zone_id}: Complete")

        for zone in self._zones.values():
            if zone.zone_id != snapshot.active_zone_id:
                if zone.zone_id == prev_zone_id:
                    zone.active = False
                zone.clear()
                continue

            zone.active = True
            zone.running = True
            if self._zone_state_supported:
                zone.remaining_duration = snapshot.time_remaining
                zone.activation_timestamp = now
            elif zone.activation_timestamp is None:  # e.g. started by a program
                zone.activation_timestamp = now

        self._handle_program(snapshot.active_program_id)

        reached = snapshot.rain_set_point_reached
        if reached is not None and reached != self._rain_set_point_reached:
            self._rain_set_point_reached = reached
            self._publish(RainSensorChanged(reached=reached))

        self._publish(StatusChanged(snapshot=snapshot))

    def _handle_program(self, program_id: str | None) -> None:
        prev_program_id, self._program_id = self._program_id, program_id
        if prev_program_id == program_id:
            return

        if prev_program_id:
            _LOGGER.info(f"Program {prev_program_id}: Complete")
            self._publish(ProgramChanged(program_id=prev_program_id, running=False))
        if program_id:
            _LOGGER.info(f"Program {program_id}: Started")
            self._publish(ProgramChanged(program_id=program_id, running=True))

    # Events

    def add_handler(
        self,
        handler: EventHandlerT,
        /,
        *,
        event_filter: EventFilterT | None = None,
    ) -> Callable[[], None]:
        """Add an event handler to the list of such callbacks.

        Returns a callback that can be used to subsequently remove the handler.
        """

        entry = (handler, event_filter)

        def del_handler() -> None:
            if entry in self._handlers:
                self._handlers.remove(entry)

        if entry not in self._handlers:
            self._handlers.append(entry)

        return del_handler

    def _publish(self, event: Event) -> None:
        for handler, event_filter in self._handlers:
            if event_filter is None or isinstance(event, event_filter):
                self._loop.call_soon(handler, event)


def _program_id_or_none(program_number: int | None) -> str | None:
    """Return the program id, or None if the number is absent (or not a program)."""

    if program_number is None:
        return None
    if program_number != NO_PROGRAM and program_number >= len(PROGRAM_IDS):
        return None
    return get_program_id(program_number)
