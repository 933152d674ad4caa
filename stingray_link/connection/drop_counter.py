"""
Silent drop counter for console frames.

Malformed and binary frames are dropped without surfacing an error to
listeners. The counters make those drops observable when debugging a
misbehaving console server.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass(slots=True)
class DropCounter:
    malformed_frame: int = 0
    binary_frame: int = 0
    unsent_message: int = 0
    _last_reset: float = field(default_factory=time.monotonic)

    def increment_malformed_frame(self) -> None:
        self.malformed_frame += 1

    def increment_binary_frame(self) -> None:
        self.binary_frame += 1

    def increment_unsent_message(self) -> None:
        self.unsent_message += 1

    @property
    def total(self) -> int:
        return (
            self.malformed_frame
            + self.binary_frame
            + self.unsent_message
        )

    @property
    def interval_seconds(self) -> float:
        return time.monotonic() - self._last_reset

    def reset(self) -> "DropCounterSnapshot":
        """
        Reset all counters and return a snapshot of the values before reset.
        """
        snapshot = DropCounterSnapshot(
            malformed_frame=self.malformed_frame,
            binary_frame=self.binary_frame,
            unsent_message=self.unsent_message,
            interval_seconds=self.interval_seconds,
        )

        self.malformed_frame = 0
        self.binary_frame = 0
        self.unsent_message = 0
        self._last_reset = time.monotonic()

        return snapshot


@dataclass(frozen=True)
class DropCounterSnapshot:
    malformed_frame: int
    binary_frame: int
    unsent_message: int
    interval_seconds: float

    @property
    def total(self) -> int:
        return (
            self.malformed_frame
            + self.binary_frame
            + self.unsent_message
        )

    @property
    def has_drops(self) -> bool:
        return self.total > 0
