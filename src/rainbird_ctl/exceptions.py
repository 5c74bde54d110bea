#!/usr/bin/env python3
"""RainBird - exceptions above the dispatcher/transport layer."""

from __future__ import annotations

from rainbird_tx.exceptions import (
    CommandInvalid as CommandInvalid,
    ProtocolError as ProtocolError,
    RainBirdException as RainBirdException,
    ReplyInvalid as ReplyInvalid,
    TransportError as TransportError,
)


class _RainBirdUpperError(RainBirdException):
    """A failure in the upper layer (the controller coordinator)."""


########################################################################################
# Errors above the dispatcher/transport layer, incl. zone & program state


class ControllerNotStarted(_RainBirdUpperError):
    """The controller's metadata & zones are not known until it has been started."""

    HINT = "await controller.start() first"


class ZoneInvalid(_RainBirdUpperError):
    """The zone is not one of the controller's (available or included) zones."""


class ProgramInvalid(_RainBirdUpperError):
    """The program is not a valid identifier (a single letter, A-Z)."""
