#!/usr/bin/env python3
"""RainBird - a client for the RainBird LNK/SIP irrigation protocol.

Schema processor for the dispatcher/transport (lower) layer.
"""

from __future__ import annotations

from typing import Any, TypedDict

import voluptuous as vol

from .const import (
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY,
    SZ_HOST,
    SZ_HTTP_TIMEOUT,
    SZ_MAX_RETRIES,
    SZ_PASSWORD,
    SZ_RETRY_DELAY,
    SZ_SHOW_REQUEST_RESPONSE,
)


class EngineConfigT(TypedDict, total=False):
    http_timeout: float
    max_retries: int | None
    retry_delay: float
    show_request_response: bool


#
# 1/2: Controller (connection) configuration
SCH_CONNECTION = vol.Schema(
    {
        vol.Required(SZ_HOST): vol.All(str, vol.Length(min=1)),
        vol.Required(SZ_PASSWORD): str,
    },
    extra=vol.PREVENT_EXTRA,
)


#
# 2/2: Engine configuration
SCH_ENGINE_DICT = {
    vol.Optional(SZ_RETRY_DELAY, default=DEFAULT_RETRY_DELAY): vol.All(
        vol.Coerce(float), vol.Range(min=0)
    ),
    vol.Optional(SZ_MAX_RETRIES, default=DEFAULT_MAX_RETRIES): vol.Any(
        None,  # None is uncapped: never give up
        vol.All(int, vol.Range(min=0)),
    ),
    vol.Optional(SZ_HTTP_TIMEOUT, default=DEFAULT_HTTP_TIMEOUT): vol.All(
        vol.Coerce(float), vol.Range(min=0, min_included=False)
    ),
    vol.Optional(SZ_SHOW_REQUEST_RESPONSE, default=False): bool,
}
SCH_ENGINE_CONFIG = vol.Schema(SCH_ENGINE_DICT, extra=vol.REMOVE_EXTRA)


def validate_engine_config(config: dict[str, Any]) -> EngineConfigT:
    """Return a validated engine config (with defaults), or raise vol.Invalid."""
    return SCH_ENGINE_CONFIG(config)  # type: ignore[no-any-return]
