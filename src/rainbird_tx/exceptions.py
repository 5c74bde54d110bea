#!/usr/bin/env python3
"""RainBird - exceptions within the codec/transport/dispatcher layer."""

from __future__ import annotations


class _RainBirdBaseException(Exception):
    """Base class for all rainbird_tx exceptions."""

    pass


class RainBirdException(_RainBirdBaseException):
    """Base class for all rainbird_tx exceptions."""

    HINT: None | str = None

    def __init__(self, *args: object):
        super().__init__(*args)
        self.message: str | None = args[0] if args else None  # type: ignore[assignment]

    def __str__(self) -> str:
        if self.message and self.HINT:
            return f"{self.message} (hint: {self.HINT})"
        if self.message:
            return self.message
        if self.HINT:
            return f"Hint: {self.HINT}"
        return ""


class _RainBirdLowerError(RainBirdException):
    """A failure in the lower layer (codec, crypto, transport, dispatcher)."""


########################################################################################
# Errors at/below the dispatcher/transport layer


class TransportError(_RainBirdLowerError):
    """An error when exchanging frames with the controller (always retryable).

    Includes: connection failures, timeouts, a non-200 status, a reply that can't be
    decrypted into JSON, or one without a result.
    """


class TransportAuthError(TransportError):
    """The reply could not be decrypted into JSON (usu. the password is wrong)."""

    HINT = "check the controller's password"


class ProtocolError(_RainBirdLowerError):
    """The controller understood the request, but rejected it (a JSON-RPC error)."""

    def __init__(self, *args: object, code: int | None = None):
        super().__init__(*args)
        self.code = code


########################################################################################
# Errors at/below the codec layer, incl. frame processing


class ParserBaseError(_RainBirdLowerError):
    """The frame is corrupt/not internally consistent, or cannot be parsed."""


class ReplyInvalid(ParserBaseError):
    """The reply frame has a shape that the codec does not recognise."""


class CommandInvalid(ParserBaseError):
    """The command is corrupt/not internally consistent."""
