"""
Server State - Facts produced by health probes.

A probe yields exactly one ServerState. The monitor publishes it as-is and
uses it to pick the polling cadence; presentation decisions live elsewhere.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ServerState(Enum):
    """Backend availability as classified from the most recent probe."""

    # 2xx within the timeout
    ONLINE = "online"

    # 5xx within the timeout (deploy or restart in progress)
    RESTARTING = "restarting"

    # No response before the timeout (cold start)
    WAKING = "waking"

    # Transport failure or an unexpected status
    OFFLINE = "offline"

    def __str__(self):
        return self.value


class Cadence(Enum):
    """Polling speed."""

    FAST = "fast"
    SLOW = "slow"

    def __str__(self):
        return self.value


INITIAL_STATE = ServerState.WAKING
INITIAL_CADENCE = Cadence.FAST


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single health check."""

    state: ServerState
    status_code: Optional[int] = None
    elapsed: float = 0.0
    error: Optional[str] = None


def classify_status(status_code: int) -> ServerState:
    """Map an HTTP status code received within the timeout to a ServerState."""
    if 200 <= status_code <= 299:
        return ServerState.ONLINE
    if status_code >= 500:
        return ServerState.RESTARTING
    return ServerState.OFFLINE


def next_cadence(current: Cadence, state: ServerState) -> Cadence:
    """
    Pick the cadence after a probe.

    Back off once the backend is confirmed up or confirmed unreachable; keep
    the current speed while it may still be starting.
    """
    if state is ServerState.OFFLINE:
        return Cadence.SLOW
    if current is Cadence.FAST and state is ServerState.ONLINE:
        return Cadence.SLOW
    return current
