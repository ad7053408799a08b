"""Tests for state classification and cadence selection."""

import pytest

from clinrec.services.monitoring import Cadence, ServerState, classify_status, next_cadence


@pytest.mark.parametrize(
    "status_code, expected",
    [
        (200, ServerState.ONLINE),
        (201, ServerState.ONLINE),
        (299, ServerState.ONLINE),
        (300, ServerState.OFFLINE),
        (304, ServerState.OFFLINE),
        (404, ServerState.OFFLINE),
        (429, ServerState.OFFLINE),
        (499, ServerState.OFFLINE),
        (500, ServerState.RESTARTING),
        (503, ServerState.RESTARTING),
        (599, ServerState.RESTARTING),
        (199, ServerState.OFFLINE),
    ],
)
def test_classify_status(status_code, expected):
    assert classify_status(status_code) == expected


@pytest.mark.parametrize(
    "current, state, expected",
    [
        (Cadence.FAST, ServerState.ONLINE, Cadence.SLOW),
        (Cadence.FAST, ServerState.OFFLINE, Cadence.SLOW),
        (Cadence.FAST, ServerState.WAKING, Cadence.FAST),
        (Cadence.FAST, ServerState.RESTARTING, Cadence.FAST),
        (Cadence.SLOW, ServerState.ONLINE, Cadence.SLOW),
        (Cadence.SLOW, ServerState.OFFLINE, Cadence.SLOW),
        (Cadence.SLOW, ServerState.WAKING, Cadence.SLOW),
        (Cadence.SLOW, ServerState.RESTARTING, Cadence.SLOW),
    ],
)
def test_next_cadence(current, state, expected):
    assert next_cadence(current, state) == expected


def test_state_string_values():
    assert [str(s) for s in ServerState] == ["online", "restarting", "waking", "offline"]
    assert ServerState("waking") is ServerState.WAKING
