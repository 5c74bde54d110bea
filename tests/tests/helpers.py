#!/usr/bin/env python3
"""RainBird - helpers for the unit tests."""

import logging
import warnings
from collections.abc import Callable
from typing import Any

warnings.filterwarnings("ignore", category=DeprecationWarning)

logging.disable(logging.WARNING)  # usu. WARNING

PASSWORD = "secret"  # the password used to encrypt the test vectors


def assert_raises(exception: type[Exception], fnc: Callable, *args: Any) -> None:
    try:
        fnc(*args)
    except exception:
        pass
    else:
        assert False, f"{fnc.__name__}{args} did not raise {exception.__name__}"
