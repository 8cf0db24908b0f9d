"""Observable state of a scaffold run.

A ``ScaffoldState`` moves ``idle -> busy -> done`` exactly once.  Only the
fetch/extract task writes it; everything else reads it.
"""

from __future__ import annotations

from enum import Enum


class ScaffoldPhase(str, Enum):
    IDLE = "idle"
    BUSY = "busy"
    DONE = "done"


class StateError(Exception):
    """Raised on an illegal transition or when ``success`` is read while busy."""


class ScaffoldState:
    """Two observable booleans, ``busy`` and ``success``, plus their phase."""

    def __init__(self) -> None:
        self._phase = ScaffoldPhase.IDLE
        self._success = False

    @property
    def phase(self) -> ScaffoldPhase:
        return self._phase

    @property
    def busy(self) -> bool:
        return self._phase == ScaffoldPhase.BUSY

    @property
    def success(self) -> bool:
        """Whether fetch and extraction both succeeded.

        Raises:
            StateError: If read while the scaffold is still busy.
        """
        if self._phase == ScaffoldPhase.BUSY:
            raise StateError("Scaffold success is undefined while it is still busy")
        return self._success

    def start(self) -> None:
        """Transition ``idle -> busy``."""
        if self._phase != ScaffoldPhase.IDLE:
            raise StateError(f"Cannot start a scaffold that is {self._phase.value}")
        self._phase = ScaffoldPhase.BUSY

    def finish(self, success: bool) -> None:
        """Transition ``busy -> done``, recording the outcome."""
        if self._phase != ScaffoldPhase.BUSY:
            raise StateError(f"Cannot finish a scaffold that is {self._phase.value}")
        self._success = success
        self._phase = ScaffoldPhase.DONE
