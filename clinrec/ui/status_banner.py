"""Status Banner - What each ServerState looks like to a user."""

from dataclasses import dataclass
from typing import Optional

from clinrec.services.monitoring import ServerState


@dataclass(frozen=True)
class StatusBanner:
    heading: str
    message: str
    tone: str  # "warning" or "error"
    retry_label: Optional[str] = None

    @property
    def offers_retry(self) -> bool:
        return self.retry_label is not None


# WAKING and RESTARTING resolve on their own through polling, so only OFFLINE offers a retry
_BANNERS = {
    ServerState.WAKING: StatusBanner(
        heading="Waking the server",
        message=(
            "The server went to sleep due to inactivity. "
            "Re-establishing connection, this may take up to 60 seconds."
        ),
        tone="warning",
    ),
    ServerState.RESTARTING: StatusBanner(
        heading="Server is restarting",
        message=(
            "The server is being redeployed or restarted. This usually resolves in under a minute. "
            "Please wait and the data will refresh automatically."
        ),
        tone="warning",
    ),
    ServerState.OFFLINE: StatusBanner(
        heading="Could not reach the server",
        message="Network error: the backend is unreachable. Check your connection or try again.",
        tone="error",
        retry_label="Retry connection",
    ),
}

SLOW_WAKE_HINT = "Still starting. A cold start can take a moment on the first request."
SLOW_WAKE_AFTER = 30.0  # seconds spent waking before the hint is shown


def banner_for(state: ServerState) -> Optional[StatusBanner]:
    """Banner to show for a state, or None when the backend is online."""
    return _BANNERS.get(state)


def wake_hint(state: ServerState, seconds_waking: float) -> Optional[str]:
    """Extra reassurance once the server has been waking for a while."""
    if state is ServerState.WAKING and seconds_waking >= SLOW_WAKE_AFTER:
        return SLOW_WAKE_HINT
    return None


def can_create_records(state: ServerState) -> bool:
    """Mutating actions are only offered while the backend is fully available."""
    return state is ServerState.ONLINE


def indicator_label(state: ServerState) -> str:
    """Short label for a navigation-bar style status indicator."""
    if state is ServerState.ONLINE:
        return "Registry Online"
    if state in (ServerState.WAKING, ServerState.RESTARTING):
        return "Connecting…"
    return "Registry Offline"
