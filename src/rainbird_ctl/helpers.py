#!/usr/bin/env python3
"""RainBird - Helper functions."""

from __future__ import annotations

from . import exceptions as exc
from .const import NO_PROGRAM, PROGRAM_IDS


def get_program_id(program_number: int) -> str:
    """Return the letter of a program, or an empty string if there is no program.

    >>> get_program_id(0), get_program_id(25), get_program_id(255)
    ('A', 'Z', '')
    """

    if program_number == NO_PROGRAM:
        return ""
    if not 0 <= program_number < len(PROGRAM_IDS):
        raise exc.ProgramInvalid(f"Invalid program number: {program_number}")
    return PROGRAM_IDS[program_number]


def get_program_number(program_id: str) -> int:
    """Return the (zero-based) number of a program, given its letter (A is 0)."""

    if (
        not isinstance(program_id, str)
        or len(program_id) != 1
        or program_id.upper() not in PROGRAM_IDS
    ):
        raise exc.ProgramInvalid(f"Invalid program id: {program_id!r}")
    return PROGRAM_IDS.index(program_id.upper())
