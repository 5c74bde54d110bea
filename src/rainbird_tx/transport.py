#!/usr/bin/env python3
"""RainBird - the HTTP transport (the SIP tunnel to the controller's /stick).

Each call is a single POST of an encrypted JSON-RPC request; retries are the
responsibility of the Dispatcher.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Final

import aiohttp

from . import exceptions as exc
from .command import Command
from .const import (
    DEFAULT_HTTP_TIMEOUT,
    HTTP_HEADERS,
    STICK_URL,
    SZ_CODE,
    SZ_DATA,
    SZ_ERROR,
    SZ_MESSAGE,
    SZ_RESULT,
)
from .encryption import decode_response, encode_request
from .helpers import bytes_from_hex
from .parsers import decode
from .reply import Reply

#
# NOTE: All debug flags should be False for deployment to end-users
_DBG_FORCE_LOG_FRAMES: Final[bool] = False

_LOGGER = logging.getLogger(__name__)


class HttpTransport:
    """A transport that tunnels Commands to the controller over HTTP."""

    def __init__(
        self,
        host: str,
        password: str,
        /,
        *,
        session: aiohttp.ClientSession | None = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ) -> None:
        self._host = host
        self._password = password
        self._url = STICK_URL.format(host=host)
        self._timeout = aiohttp.ClientTimeout(total=timeout)

        self._session = session
        self._own_session = session is None
        self._closing = False

    def __repr__(self) -> str:
        return f"HttpTransport(url={self._url})"

    @property
    def host(self) -> str:
        return self._host

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._own_session = True
        return self._session

    async def _post(self, body: bytes) -> bytes:
        """POST a body to the controller and return the body of its response."""

        try:
            async with self._get_session().post(
                self._url, data=body, headers=HTTP_HEADERS, timeout=self._timeout
            ) as resp:
                if resp.status != 200:
                    raise exc.TransportError(
                        f"Invalid response (status={resp.status}, reason={resp.reason})"
                    )
                return await resp.read()

        except aiohttp.ClientError as err:
            raise exc.TransportError(f"Unable to reach {self._host}: {err}") from err
        except asyncio.TimeoutError as err:
            raise exc.TransportError(f"Timed out waiting for {self._host}") from err

    def _get_frame(self, envelope: dict[str, Any]) -> bytes:
        """Return the frame from a decrypted JSON-RPC envelope."""

        if error := envelope.get(SZ_ERROR):
            code = error.get(SZ_CODE) if isinstance(error, dict) else None
            msg = error.get(SZ_MESSAGE) if isinstance(error, dict) else error
            raise exc.ProtocolError(f"Controller returned an error: {msg}", code=code)

        result = envelope.get(SZ_RESULT)
        if not isinstance(result, dict) or SZ_DATA not in result:
            raise exc.TransportError(f"Response has no result: {envelope}")

        if not isinstance(result[SZ_DATA], str):
            raise exc.TransportError(f"Response data is not a string: {result}")

        try:
            return bytes_from_hex(result[SZ_DATA])
        except ValueError as err:
            raise exc.TransportError(f"Response data is not hex: {result}") from err

    async def call(self, cmd: Command) -> Reply:
        """Send a Command (a single attempt) and return the decoded Reply.

        Will raise:
            TransportError: the exchange failed (is retryable)
            ProtocolError:  the controller rejected the request
            ReplyInvalid:   the codec did not recognise the reply
        """

        if self._closing:
            raise exc.TransportError("The transport is closed")

        if _DBG_FORCE_LOG_FRAMES:
            _LOGGER.warning(f"Sending to {self._host}: {cmd!r}")

        body = await self._post(encode_request(cmd, self._password))
        frame = self._get_frame(decode_response(body, self._password))

        if _DBG_FORCE_LOG_FRAMES:
            _LOGGER.warning(f"Recv'd from {self._host}: {frame.hex().upper()}")

        return decode(frame)

    async def close(self) -> None:
        """Close the transport (and its session, if it created one)."""

        self._closing = True
        if self._own_session and self._session and not self._session.closed:
            await self._session.close()


def transport_factory(
    host: str,
    password: str,
    /,
    *,
    session: aiohttp.ClientSession | None = None,
    timeout: float = DEFAULT_HTTP_TIMEOUT,
) -> HttpTransport:
    """Create and return a transport to the controller."""

    return HttpTransport(host, password, session=session, timeout=timeout)
