"""Availability Monitor - Adaptive health polling with observer notifications."""

import threading
from typing import Callable, List, Optional

from loguru import logger

from clinrec.core.constants import FAST_POLL_INTERVAL, SLOW_POLL_INTERVAL

from .health_probe import HealthChecker
from .scheduler import Scheduler, ThreadingScheduler, TimerHandle
from .server_state import (
    INITIAL_CADENCE,
    INITIAL_STATE,
    Cadence,
    ProbeResult,
    ServerState,
    next_cadence,
)

StateObserver = Callable[[ServerState], None]


class AvailabilityMonitor:
    """
    Polls the backend health endpoint and publishes the resulting ServerState.

    Cadence Logic:
    - start() probes immediately in FAST cadence (every FAST_INTERVAL seconds)
    - ONLINE while FAST, or OFFLINE at any time -> SLOW cadence
    - WAKING / RESTARTING keep the current cadence

    At most one health check per session is in flight. A tick that fires while
    that session's check is still running is skipped and the timer is re-armed at
    the current cadence. A request left over from a stopped session never blocks
    the next session.

    Observers are notified after every completed probe, including repeats of
    the same state. They are called on the polling thread while the monitor
    lock is held, so they must return quickly and must not wait on another
    thread that reads the monitor.
    """

    FAST_INTERVAL = FAST_POLL_INTERVAL
    SLOW_INTERVAL = SLOW_POLL_INTERVAL

    def __init__(
        self,
        probe: HealthChecker,
        scheduler: Optional[Scheduler] = None,
        fast_interval: Optional[float] = None,
        slow_interval: Optional[float] = None,
    ):
        """
        Initialize the monitor.

        Args:
            probe: Health checker (normally a HealthProbe)
            scheduler: Timer factory; defaults to daemon threading timers
            fast_interval: Seconds between probes in FAST cadence
            slow_interval: Seconds between probes in SLOW cadence
        """
        self._probe = probe
        self._scheduler = scheduler or ThreadingScheduler()
        self._intervals = {
            Cadence.FAST: self.FAST_INTERVAL if fast_interval is None else fast_interval,
            Cadence.SLOW: self.SLOW_INTERVAL if slow_interval is None else slow_interval,
        }

        # Re-entrant: observers may read state or call stop() from a callback
        self._lock = threading.RLock()
        self._observers: List[StateObserver] = []

        # State
        self._state = INITIAL_STATE
        self._cadence = INITIAL_CADENCE
        self._last_result: Optional[ProbeResult] = None
        self._timer: Optional[TimerHandle] = None
        self._running = False
        self._in_flight_session: Optional[int] = None  # Session whose health check is awaiting a response
        self._session_id = 0  # Bumped on start/stop so stale probes and timers are ignored

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> ServerState:
        with self._lock:
            return self._state

    @property
    def cadence(self) -> Cadence:
        with self._lock:
            return self._cadence

    @property
    def is_available(self) -> bool:
        """True only when the backend answered the last probe with 2xx."""
        return self.state is ServerState.ONLINE

    @property
    def last_result(self) -> Optional[ProbeResult]:
        with self._lock:
            return self._last_result

    def interval_for(self, cadence: Cadence) -> float:
        """Seconds between health checks at the given cadence."""
        return self._intervals[cadence]

    def is_running(self) -> bool:
        with self._lock:
            return self._running

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        """
        Register an observer. Returns a callable that unsubscribes it.

        The observer runs under the monitor lock. It may read the monitor or
        call stop() from the same thread, but it must not block: joining or
        waiting on a thread that touches the monitor deadlocks. Hand slow work
        off to a queue or another thread instead.
        """
        with self._lock:
            self._observers.append(observer)
        return lambda: self.unsubscribe(observer)

    def unsubscribe(self, observer: StateObserver):
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def _notify(self, state: ServerState):
        """Deliver a state to every observer. Caller holds the lock."""
        for observer in list(self._observers):
            try:
                observer(state)
            except Exception as e:
                logger.error(f"[AvailabilityMonitor] Error in state observer: {e}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self):
        """Start polling: immediate probe, then FAST cadence."""
        with self._lock:
            if self._running:
                return

            self._running = True
            self._session_id += 1
            self._cadence = INITIAL_CADENCE
            self._cancel_timer()
            self._timer = self._scheduler.call_later(0.0, self._make_timer_callback(self._session_id))

            logger.info(
                f"[AvailabilityMonitor] Started session {self._session_id} "
                f"(fast={self.interval_for(Cadence.FAST)}s, slow={self.interval_for(Cadence.SLOW)}s)"
            )

    def stop(self):
        """Stop polling. A probe already in flight will not publish its result."""
        with self._lock:
            if not self._running:
                return

            self._running = False
            session_id = self._session_id
            self._session_id += 1  # Invalidate session to drop late results
            self._cancel_timer()

            logger.info(f"[AvailabilityMonitor] Stopped session {session_id}")

    # ------------------------------------------------------------------
    # Probing
    # ------------------------------------------------------------------

    def probe(self) -> ServerState:
        """
        Run one health check and publish its state.

        Never raises. If another probe is in flight this one is skipped and
        the current state is returned unchanged.
        """
        with self._lock:
            session_id = self._session_id
        state = self._probe_once(session_id)
        return self.state if state is None else state

    def refresh(self) -> ServerState:
        """Manual retry: probe now without touching the cadence or the schedule."""
        logger.info("[AvailabilityMonitor] Manual refresh requested")
        return self.probe()

    def tick(self) -> ServerState:
        """Probe and apply the cadence rule, re-arming the timer if the cadence changed."""
        with self._lock:
            session_id = self._session_id
        return self._tick(session_id, rearm=False)

    def _tick(self, session_id: int, rearm: bool) -> ServerState:
        state = self._probe_once(session_id)

        with self._lock:
            if session_id != self._session_id:
                return self._state

            if state is None:
                if rearm and self._running:
                    self._arm_timer(session_id)
                return self._state

            previous = self._cadence
            self._cadence = next_cadence(previous, state)
            if self._cadence is not previous:
                logger.info(f"[AvailabilityMonitor] Cadence {previous} -> {self._cadence} (state={state})")

            if self._running and (rearm or self._cadence is not previous):
                self._arm_timer(session_id)
            return state

    def _probe_once(self, session_id: int) -> Optional[ServerState]:
        """Run the probe; returns None when skipped or when the session ended meanwhile."""
        with self._lock:
            if self._in_flight_session == session_id:
                logger.debug("[AvailabilityMonitor] Probe already in flight, skipping")
                return None
            self._in_flight_session = session_id

        try:
            try:
                result = self._probe.check()
            except Exception as e:
                logger.error(f"[AvailabilityMonitor] Probe raised unexpectedly: {e}")
                result = ProbeResult(ServerState.OFFLINE, error=str(e))

            # Publish before clearing the in-flight flag so results cannot be reordered
            with self._lock:
                if session_id != self._session_id:
                    logger.debug(f"[AvailabilityMonitor] Dropped {result.state} result from ended session {session_id}")
                    return None

                previous = self._state
                self._state = result.state
                self._last_result = result
                if previous is not result.state:
                    logger.info(f"[AvailabilityMonitor] Server state {previous} -> {result.state}")

                self._notify(result.state)
                return result.state
        finally:
            with self._lock:
                if self._in_flight_session == session_id:
                    self._in_flight_session = None

    # ------------------------------------------------------------------
    # Timer management (caller holds the lock)
    # ------------------------------------------------------------------

    def _make_timer_callback(self, session_id: int) -> Callable[[], None]:
        return lambda: self._on_timer(session_id)

    def _on_timer(self, session_id: int):
        with self._lock:
            if not self._running or session_id != self._session_id:
                return
            self._timer = None

        try:
            self._tick(session_id, rearm=True)
        except Exception as e:
            logger.error(f"[AvailabilityMonitor] Error in polling tick: {e}")

    def _arm_timer(self, session_id: int):
        self._cancel_timer()
        delay = self.interval_for(self._cadence)
        self._timer = self._scheduler.call_later(delay, self._make_timer_callback(session_id))
        logger.debug(f"[AvailabilityMonitor] Next probe in {delay}s ({self._cadence})")

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
