#!/usr/bin/env python3
"""RainBird - The engine (a dispatcher & transport to a LNK WiFi module)."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime as dt
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any

from .const import SZ_HOST, SZ_PASSWORD
from .protocol import protocol_factory
from .schemas import SCH_CONNECTION, validate_engine_config
from .transport import transport_factory

if TYPE_CHECKING:
    import aiohttp

    from .command import Command
    from .protocol import Dispatcher
    from .reply import Reply
    from .transport import HttpTransport


_LOGGER = logging.getLogger(__name__)


class Engine:
    """The engine class."""

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
        SCH_CONNECTION({SZ_HOST: host, SZ_PASSWORD: password})

        self.host = host
        self._password = password
        self._session = session
        self._loop = loop or asyncio.get_running_loop()

        # extra keys (e.g. those of the controller config) are removed by the schema
        self._engine_config = SimpleNamespace(**validate_engine_config(kwargs))

        self._protocol: Dispatcher | None = None  # None until self.start()
        self._transport: HttpTransport | None = None

        self._tasks: list[asyncio.Task[Any]] = []

    def __str__(self) -> str:
        return f"RainBird ({self.host})"

    def _dt_now(self) -> dt:
        return dt.now()

    @property
    def is_started(self) -> bool:
        return self._protocol is not None

    async def start(self) -> None:
        """Create a transport & dispatcher for the controller."""

        self._transport = transport_factory(
            self.host,
            self._password,
            session=self._session,
            timeout=self._engine_config.http_timeout,
        )
        self._protocol = protocol_factory(
            self._transport,
            retry_delay=self._engine_config.retry_delay,
            max_retries=self._engine_config.max_retries,
            show_request_response=self._engine_config.show_request_response,
        )

    async def stop(self) -> None:
        """Cancel any tasks and close the transport."""

        async def cancel_all_tasks() -> None:
            _ = [t.cancel() for t in self._tasks if not t.done()]
            if tasks := [t for t in self._tasks if not t.done()]:
                await asyncio.gather(*tasks, return_exceptions=True)

        if self._protocol:
            self._protocol.close()

        await cancel_all_tasks()

        if self._transport:
            await self._transport.close()

    def add_task(self, task: asyncio.Task[Any]) -> None:
        # keep a track of tasks, so we can tidy-up
        self._tasks = [t for t in self._tasks if not t.done()]
        self._tasks.append(task)

    async def async_send_cmd(self, cmd: Command, /) -> Reply | None:
        """Send a Command and return the corresponding Reply.

        Returns None if the Reply could not be decoded. Otherwise, raise:
            ProtocolError:  the controller rejected the Command
            TransportError: the controller was unreachable (only if retries are capped)
        """

        if self._protocol is None:
            raise RuntimeError(f"{self}: the engine has not been started")

        return await self._protocol.send(cmd)
