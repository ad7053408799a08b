"""Shared fixtures: a manual clock scheduler and a scripted health probe."""

from typing import Callable, List

import pytest

from clinrec.services.monitoring import ProbeResult, ServerState


class ManualTimer:
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by advance() instead of wall-clock time."""

    def __init__(self):
        self.now = 0.0
        self.timers: List[ManualTimer] = []

    def call_later(self, delay, callback):
        timer = ManualTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> List[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]

    def next_due(self):
        pending = self.pending
        return min(t.due for t in pending) if pending else None

    def advance(self, seconds: float):
        """Move the clock forward, firing due timers in order."""
        target = self.now + seconds
        while True:
            due = [t for t in self.pending if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.now = max(self.now, timer.due)
            timer.cancelled = True  # one-shot
            timer.callback()
        self.now = target


class ScriptedProbe:
    """Returns queued states in order, then repeats the last one."""

    def __init__(self, *states: ServerState):
        self.states = list(states)
        self.calls = 0
        self.on_check = None

    def push(self, *states: ServerState):
        self.states.extend(states)

    def check(self) -> ProbeResult:
        self.calls += 1
        if self.on_check:
            self.on_check()
        state = self.states.pop(0) if len(self.states) > 1 else self.states[0]
        return ProbeResult(state)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def make_probe():
    """Factory for scripted probes: make_probe(ServerState.ONLINE, ...)."""
    return ScriptedProbe
