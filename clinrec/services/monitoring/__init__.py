"""
Monitoring subpackage - Backend availability monitoring.

- ServerState / Cadence: Facts produced by probes and the polling speed
- HealthProbe: One bounded GET against /health, classified into a ServerState
- AvailabilityMonitor: Adaptive polling loop that publishes ServerState to observers
- ThreadingScheduler: Default timer implementation for the monitor
"""

from clinrec.services.monitoring.availability_monitor import AvailabilityMonitor
from clinrec.services.monitoring.health_probe import HealthChecker, HealthProbe
from clinrec.services.monitoring.scheduler import Scheduler, ThreadingScheduler
from clinrec.services.monitoring.server_state import (
    Cadence,
    ProbeResult,
    ServerState,
    classify_status,
    next_cadence,
)

__all__ = [
    "AvailabilityMonitor",
    "Cadence",
    "HealthChecker",
    "HealthProbe",
    "ProbeResult",
    "Scheduler",
    "ServerState",
    "ThreadingScheduler",
    "classify_status",
    "next_cadence",
]
