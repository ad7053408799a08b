"""clinrec - Headless client for the clinical records backend."""

__version__ = "0.1.0"
__author__ = "clinrec contributors"
__description__ = "Clinical records API client with backend availability monitoring"

from clinrec.services.monitoring import AvailabilityMonitor, HealthProbe, ServerState
from clinrec.services.records_client import RecordsClient

__all__ = ["AvailabilityMonitor", "HealthProbe", "RecordsClient", "ServerState", "__version__"]
