"""Central exit-code taxonomy for the flagconv launcher."""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes used by ``flagconv``.

    ``INVALID_INPUT`` matches click's usage-error code so marshal failures
    surfaced through click parameters and through the launcher agree.
    """

    SUCCESS = 0
    INVALID_INPUT = 2
    STATE_ERROR = 10
    INTERNAL_ERROR = 70
