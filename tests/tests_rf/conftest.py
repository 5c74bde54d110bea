#!/usr/bin/env python3
"""Fixtures for testing."""

import asyncio
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any, Final, TypeAlias

import pytest

import rainbird_tx.gateway
from rainbird_ctl import Controller

from .virtual_controller import VirtualController

HOST: Final = "192.168.0.10"
PASSWORD: Final = "secret"

# other constants
ASSERT_CYCLE_TIME: Final = 0.001  # max_cycles_per_assert = max_sleep / ASSERT_CYCLE_TIME
DEFAULT_MAX_SLEEP: Final = 1

CTL_CONFIG: Final[dict[str, Any]] = {
    "refresh_rate": 0,  # no poll timer, unless a zone is running
    "retry_delay": 0.01,
}

ControllerFactoryT: TypeAlias = Callable[..., Awaitable[Controller]]


#######################################################################################


@pytest.fixture(autouse=True)
def patches_for_tests(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("rainbird_ctl.controller.DEBOUNCE_DELAY", 0.01)


async def assert_this_happens(
    fnc: Callable[[], bool], max_sleep: float = DEFAULT_MAX_SLEEP
) -> None:
    """Fail if the condition doesn't become True before max_sleep."""

    for _ in range(int(max_sleep / ASSERT_CYCLE_TIME)):
        if fnc():
            break
        await asyncio.sleep(ASSERT_CYCLE_TIME)
    assert fnc()


#######################################################################################


@pytest.fixture()
def vc() -> VirtualController:
    """Utilize a virtual controller (an ESP-RZXe, with six zones)."""
    return VirtualController()


@pytest.fixture()
async def controller_factory(
    monkeypatch: pytest.MonkeyPatch,
) -> AsyncGenerator[ControllerFactoryT, None]:
    """Return a factory of started Controllers, that are each using a virtual one."""

    controllers: list[Controller] = []

    async def factory(vc: VirtualController, **config: Any) -> Controller:
        monkeypatch.setattr(
            rainbird_tx.gateway, "transport_factory", lambda *args, **kwargs: vc
        )

        ctl = Controller(HOST, PASSWORD, config=CTL_CONFIG | config)
        await ctl.start()
        controllers.append(ctl)
        return ctl

    try:
        yield factory
    finally:
        for ctl in controllers:
            await ctl.stop()


@pytest.fixture()
async def controller(
    controller_factory: ControllerFactoryT, vc: VirtualController
) -> Controller:
    """Utilize a (started) controller, using the virtual controller."""
    return await controller_factory(vc)
