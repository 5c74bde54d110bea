#!/usr/bin/env python3
"""RainBird - the events published by a controller."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import TypeAlias

from .zones import ControllerStatus


@dataclasses.dataclass(frozen=True, kw_only=True)
class Event:
    """Base class for all events."""


@dataclasses.dataclass(frozen=True, kw_only=True)
class StatusChanged(Event):
    """A status poll has completed (published every poll, whether or not it changed)."""

    snapshot: ControllerStatus


@dataclasses.dataclass(frozen=True, kw_only=True)
class RainSensorChanged(Event):
    reached: bool


@dataclasses.dataclass(frozen=True, kw_only=True)
class ZoneEnableChanged(Event):
    zone_id: int
    enabled: bool


@dataclasses.dataclass(frozen=True, kw_only=True)
class ProgramChanged(Event):
    program_id: str
    running: bool


EventHandlerT: TypeAlias = Callable[[Event], None]
EventFilterT: TypeAlias = tuple[type[Event], ...] | type[Event]
