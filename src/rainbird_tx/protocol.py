#!/usr/bin/env python3
"""RainBird - the dispatcher (one Command in flight, with retries)."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Final

from . import exceptions as exc
from .const import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY, RplCode
from .typing import RetryParams

if TYPE_CHECKING:
    from .command import Command
    from .reply import Reply
    from .transport import HttpTransport

#
# NOTE: All debug flags should be False for deployment to end-users
_DBG_FORCE_LOG_COMMANDS: Final[bool] = False

_LOGGER = logging.getLogger(__name__)


class Dispatcher:
    """Send one Command at a time, retrying (indefinitely, by default) on failure.

    Transport errors are retried after a fixed delay. Protocol errors (the controller
    rejected the request) are raised immediately. Replies that can't be decoded are
    returned as None.
    """

    def __init__(
        self,
        transport: HttpTransport,
        /,
        *,
        retry: RetryParams | None = None,
        show_request_response: bool = False,
    ) -> None:
        self._transport = transport
        self._retry = retry or RetryParams()
        self._log_level = (
            logging.WARNING
            if show_request_response or _DBG_FORCE_LOG_COMMANDS
            else logging.DEBUG
        )

        self._lock = asyncio.Lock()  # only one Command is in flight
        self._closing = False

    def __repr__(self) -> str:
        return f"Dispatcher({self._transport!r}, {self._retry!r})"

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    def _log_command(self, msg: str, *args: object) -> None:
        _LOGGER.log(self._log_level, f"[COMMAND] {msg}", *args)

    async def send(self, cmd: Command) -> Reply | None:
        """Send a Command and return its Reply (or None if it couldn't be decoded).

        Will raise:
            ProtocolError:  the controller rejected the Command (not retried)
            TransportError: only if the retry policy has a cap, and it was reached
        """

        async with self._lock:
            self._log_command("Request: %r", cmd)
            rply = await self._send(cmd)
            self._log_command("Response: %s", rply or "Unknown")

        if rply is not None and rply.opcode not in (
            cmd.rx_code,
            RplCode.ACKNOWLEDGED,
            RplCode.NOT_ACKNOWLEDGED,
        ):
            _LOGGER.info(f"{cmd!r} < Unexpected reply: {rply}")

        return rply

    async def _send(self, cmd: Command) -> Reply | None:
        retries = 0

        while True:
            try:
                return await self._transport.call(cmd)

            except exc.ProtocolError as err:
                _LOGGER.error(f"{cmd!r} < Controller returned an error: {err}")
                raise

            except exc.ReplyInvalid as err:
                _LOGGER.warning(f"{cmd!r} < Reply is invalid: {err}")
                return None

            except exc.TransportError as err:
                _LOGGER.warning(f"RainBird controller request failed: {err}")
                if self._closing or self._retry.is_exhausted(retries):
                    raise

            retries += 1
            _LOGGER.warning(f"Will retry in {self._retry.delay} seconds")
            await asyncio.sleep(self._retry.delay)

    def close(self) -> None:
        """Stop retrying (any in-flight Command will fail at its next attempt)."""
        self._closing = True


def protocol_factory(
    transport: HttpTransport,
    /,
    *,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    max_retries: int | None = DEFAULT_MAX_RETRIES,
    show_request_response: bool = False,
) -> Dispatcher:
    """Create and return a Dispatcher for a transport."""

    return Dispatcher(
        transport,
        retry=RetryParams(delay=retry_delay, max_retries=max_retries),
        show_request_response=show_request_response,
    )
