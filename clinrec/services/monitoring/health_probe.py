"""Health Probe - One bounded GET against the backend health endpoint."""

import time
from typing import Optional, Protocol

import requests
from loguru import logger

from clinrec.core.constants import API_BASE_URL, HEALTH_PATH, HEALTH_TIMEOUT

from .server_state import ProbeResult, ServerState, classify_status


class HealthChecker(Protocol):
    """Protocol for probe implementations - lets the monitor run against fakes."""

    def check(self) -> ProbeResult:
        """Run one health check. Must not raise."""
        ...


class HealthProbe:
    """
    Classifies the backend by issuing GET {base_url}/health.

    Classification:
    - response within timeout: 2xx -> ONLINE, 5xx -> RESTARTING, other -> OFFLINE
    - no response before timeout -> WAKING (connection is closed, not left running)
    - transport failure (refused, DNS, reset) -> OFFLINE
    """

    DEFAULT_TIMEOUT = HEALTH_TIMEOUT

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: Optional[float] = None,
        path: str = HEALTH_PATH,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the probe.

        Args:
            base_url: API root, e.g. http://localhost:3001/api
            timeout: Seconds to wait for a response before reporting WAKING
            path: Health endpoint path appended to base_url
            session: Optional requests session (a private one is created otherwise)
        """
        self.url = base_url.rstrip("/") + "/" + path.lstrip("/")
        self.timeout = self.DEFAULT_TIMEOUT if timeout is None else timeout
        self._session = session or requests.Session()
        self._owns_session = session is None

    def check(self) -> ProbeResult:
        """
        Perform a single health check and classify the outcome.

        The timeout is a limit on the whole exchange. requests only bounds
        connect and each socket read, so the response is streamed and the
        clock is checked once the headers arrive and while the body drains.
        """
        started = time.monotonic()
        deadline = started + self.timeout
        try:
            with self._session.get(self.url, timeout=self.timeout, stream=True) as response:
                status_code = response.status_code
                if time.monotonic() <= deadline:
                    for _ in response.iter_content(chunk_size=1024):
                        if time.monotonic() > deadline:
                            break
        except requests.RequestException as e:
            elapsed = time.monotonic() - started
            # requests reports a body read timeout as ConnectionError
            if isinstance(e, requests.Timeout) or elapsed > self.timeout:
                return self._timed_out(elapsed)
            logger.debug(f"[HealthProbe] Transport failure for {self.url}: {e}")
            return ProbeResult(ServerState.OFFLINE, elapsed=elapsed, error=str(e))

        elapsed = time.monotonic() - started
        if elapsed > self.timeout:
            return self._timed_out(elapsed)

        state = classify_status(status_code)
        logger.debug(f"[HealthProbe] {self.url} -> HTTP {status_code} ({state}) in {elapsed:.2f}s")
        return ProbeResult(state, status_code=status_code, elapsed=elapsed)

    def _timed_out(self, elapsed: float) -> ProbeResult:
        logger.debug(f"[HealthProbe] No complete response from {self.url} after {elapsed:.2f}s")
        return ProbeResult(ServerState.WAKING, elapsed=elapsed, error="timeout")

    def close(self):
        """Release the HTTP session if this probe created it."""
        if self._owns_session:
            self._session.close()
