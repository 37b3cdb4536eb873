"""Per-project session time tracker.

Seeded from a project's ``time_spent_seconds`` when the detail view opens.
Counts whole seconds while running, pauses on stop, and is never written
back to the project.
"""

import time
from typing import Callable


class TimeTracker:
    def __init__(self, seed_seconds: int = 0, clock: Callable[[], float] = time.monotonic):
        self.seed_seconds = seed_seconds
        self._clock = clock
        self._accumulated = 0.0
        self._started_at: float | None = None

    @property
    def running(self) -> bool:
        return self._started_at is not None

    def start(self) -> None:
        if not self.running:
            self._started_at = self._clock()

    def stop(self) -> None:
        if self._started_at is not None:
            self._accumulated += self._clock() - self._started_at
            self._started_at = None

    def toggle(self) -> bool:
        """Start or stop; returns the new running state."""
        if self.running:
            self.stop()
        else:
            self.start()
        return self.running

    @property
    def elapsed(self) -> int:
        running_for = self._clock() - self._started_at if self._started_at is not None else 0.0
        return self.seed_seconds + int(self._accumulated + running_for)

    def format(self) -> str:
        return format_duration(self.elapsed)


def format_duration(seconds: int) -> str:
    h, rest = divmod(seconds, 3600)
    m, s = divmod(rest, 60)
    return f"{h}h {m}m {s}s"
