"""Timer abstraction used by the availability monitor."""

import threading
from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None:
        """Prevent the callback from running if it has not started yet."""
        ...


class Scheduler(Protocol):
    """Arms one-shot timers. Swapped for a manual clock in tests."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class ThreadingScheduler:
    """Scheduler backed by daemon threading.Timer instances."""

    def __init__(self, name: str = "AvailabilityMonitor"):
        self._name = name

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(max(0.0, delay), callback)
        timer.daemon = True
        timer.name = f"{self._name}-Timer"
        timer.start()
        return timer
