#!/usr/bin/env python3
"""RainBird - Typing for the Dispatcher & HttpTransport."""

from .const import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY


class RetryParams:
    """A container for retry attributes (the retry policy of the Dispatcher)."""

    def __init__(
        self,
        *,
        delay: float | None = DEFAULT_RETRY_DELAY,
        max_retries: int | None = DEFAULT_MAX_RETRIES,
    ) -> None:
        """Create a RetryParams instance (max_retries=None is uncapped)."""

        self._delay = DEFAULT_RETRY_DELAY if delay is None else delay
        self._max_retries = max_retries

    def __repr__(self) -> str:
        return f"RetryParams(delay={self._delay}, max_retries={self._max_retries})"

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def max_retries(self) -> int | None:
        return self._max_retries

    def is_exhausted(self, retries: int) -> bool:
        """Return True if no more retries are allowed."""
        return self._max_retries is not None and retries >= self._max_retries
