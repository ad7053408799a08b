"""Tests for status presentation helpers."""

import pytest

from clinrec.services.monitoring import ServerState
from clinrec.ui.formatting import format_date
from clinrec.ui.status_banner import (
    SLOW_WAKE_HINT,
    banner_for,
    can_create_records,
    indicator_label,
    wake_hint,
)


class TestBanners:
    def test_online_has_no_banner(self):
        assert banner_for(ServerState.ONLINE) is None

    def test_only_offline_offers_retry(self):
        assert banner_for(ServerState.OFFLINE).offers_retry is True
        assert banner_for(ServerState.OFFLINE).retry_label == "Retry connection"
        assert banner_for(ServerState.WAKING).offers_retry is False
        assert banner_for(ServerState.RESTARTING).offers_retry is False

    def test_tones(self):
        assert banner_for(ServerState.OFFLINE).tone == "error"
        assert banner_for(ServerState.WAKING).tone == "warning"
        assert banner_for(ServerState.RESTARTING).heading == "Server is restarting"

    def test_wake_hint_after_thirty_seconds(self):
        assert wake_hint(ServerState.WAKING, 29.9) is None
        assert wake_hint(ServerState.WAKING, 30) == SLOW_WAKE_HINT
        assert wake_hint(ServerState.OFFLINE, 120) is None

    @pytest.mark.parametrize("state", [ServerState.WAKING, ServerState.RESTARTING, ServerState.OFFLINE])
    def test_create_gated_unless_online(self, state):
        assert can_create_records(state) is False

    def test_create_allowed_online(self):
        assert can_create_records(ServerState.ONLINE) is True

    def test_indicator_labels(self):
        assert indicator_label(ServerState.ONLINE) == "Registry Online"
        assert indicator_label(ServerState.WAKING) == "Connecting…"
        assert indicator_label(ServerState.OFFLINE) == "Registry Offline"


class TestFormatDate:
    def test_plain_date(self):
        assert format_date("2024-02-19") == "19 Feb 2024"

    def test_timestamp_with_zulu(self):
        assert format_date("2024-02-19T08:30:00Z") == "19 Feb 2024"

    def test_empty(self):
        assert format_date(None) == "—"
        assert format_date("") == "—"

    def test_unparsable_returned_as_is(self):
        assert format_date("next tuesday") == "next tuesday"
