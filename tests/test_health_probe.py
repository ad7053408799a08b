"""Tests for HealthProbe against a local HTTP server."""

import itertools
import socket
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest.mock import MagicMock, patch

import pytest
import requests

from clinrec.services.monitoring import HealthProbe, ServerState


class _HealthHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        server = self.server
        server.requests_seen.append(self.path)
        if server.delay:
            time.sleep(server.delay)
        try:
            self.send_response(server.status)
            self.send_header("Content-Length", "0")
            self.end_headers()
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, format, *args):
        pass


@pytest.fixture
def health_server():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _HealthHandler)
    server.daemon_threads = True
    server.status = 200
    server.delay = 0.0
    server.requests_seen = []
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


def _base_url(server) -> str:
    host, port = server.server_address
    return f"http://{host}:{port}/api"


def _unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def _drip_server(pieces, gap):
    """Accept one connection and send the response in pieces, `gap` seconds apart."""
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)

    def serve():
        conn, _ = listener.accept()
        with conn:
            conn.recv(4096)
            try:
                for piece in pieces:
                    time.sleep(gap)
                    conn.sendall(piece)
            except OSError:
                pass

    threading.Thread(target=serve, daemon=True).start()
    return listener


HEADERS_IN_PIECES = [
    b"HTTP/1.1 200 OK\r\n",
    b"Content-Type: text/plain\r\n",
    b"Content-Length: 2\r\n",
    b"Connection: close\r\n",
    b"\r\nok",
]

BODY_IN_PIECES = [
    b"HTTP/1.1 200 OK\r\nContent-Length: 5\r\nConnection: close\r\n\r\n",
    b"o",
    b"k",
    b"!",
    b"!",
    b"!",
]


class TestHealthProbe:
    @pytest.mark.parametrize(
        "status, expected",
        [
            (200, ServerState.ONLINE),
            (204, ServerState.ONLINE),
            (500, ServerState.RESTARTING),
            (503, ServerState.RESTARTING),
            (404, ServerState.OFFLINE),
            (401, ServerState.OFFLINE),
        ],
    )
    def test_status_classification(self, health_server, status, expected):
        health_server.status = status
        probe = HealthProbe(_base_url(health_server), timeout=2.0)

        result = probe.check()
        probe.close()

        assert result.state == expected
        assert result.status_code == status
        assert result.error is None
        assert health_server.requests_seen == ["/api/health"]

    def test_response_after_timeout_is_waking(self, health_server):
        health_server.delay = 0.6
        probe = HealthProbe(_base_url(health_server), timeout=0.2)

        result = probe.check()
        probe.close()

        assert result.state == ServerState.WAKING
        assert result.status_code is None
        assert result.elapsed < 0.6

    @pytest.mark.parametrize("pieces", [HEADERS_IN_PIECES, BODY_IN_PIECES], ids=["headers", "body"])
    def test_slow_drip_past_timeout_is_waking(self, pieces):
        # Every piece lands inside the per-read timeout, the whole response does not
        listener = _drip_server(pieces, gap=0.2)
        host, port = listener.getsockname()
        checker = HealthProbe(f"http://{host}:{port}/api", timeout=0.3)

        try:
            result = checker.check()
        finally:
            checker.close()
            listener.close()

        assert result.state == ServerState.WAKING
        assert result.error == "timeout"

    def test_connection_refused_is_offline(self):
        probe = HealthProbe(f"http://127.0.0.1:{_unused_port()}/api", timeout=2.0)

        result = probe.check()
        probe.close()

        assert result.state == ServerState.OFFLINE
        assert result.error

    def test_url_building(self):
        assert HealthProbe("http://localhost:3001/api/").url == "http://localhost:3001/api/health"
        assert HealthProbe("http://x", path="status").url == "http://x/status"

    def test_default_timeout(self):
        assert HealthProbe("http://x").timeout == HealthProbe.DEFAULT_TIMEOUT
        assert HealthProbe("http://x", timeout=0.5).timeout == 0.5


class TestHealthProbeWithSession:
    def test_timeout_exception(self):
        session = MagicMock()
        session.get.side_effect = requests.ReadTimeout("read timed out")

        result = HealthProbe("http://x", timeout=8.0, session=session).check()

        assert result.state == ServerState.WAKING
        session.get.assert_called_once_with("http://x/health", timeout=8.0, stream=True)

    def test_late_complete_response_is_waking(self):
        session = MagicMock()
        session.get.return_value.__enter__.return_value.status_code = 200
        clock = MagicMock()
        clock.monotonic.side_effect = itertools.chain([100.0], itertools.repeat(108.5))

        with patch("clinrec.services.monitoring.health_probe.time", clock):
            result = HealthProbe("http://x", timeout=8.0, session=session).check()

        assert result.state == ServerState.WAKING
        assert result.status_code is None

    def test_body_read_failure_after_deadline_is_waking(self):
        session = MagicMock()
        response = session.get.return_value.__enter__.return_value
        response.status_code = 200
        response.iter_content.side_effect = requests.ConnectionError("Read timed out.")
        clock = MagicMock()
        clock.monotonic.side_effect = itertools.chain([0.0, 1.0], itertools.repeat(9.0))

        with patch("clinrec.services.monitoring.health_probe.time", clock):
            result = HealthProbe("http://x", timeout=8.0, session=session).check()

        assert result.state == ServerState.WAKING

    def test_connect_timeout_is_waking(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectTimeout("connect timed out")

        assert HealthProbe("http://x", session=session).check().state == ServerState.WAKING

    def test_dns_failure_is_offline(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("Name or service not known")

        result = HealthProbe("http://x", session=session).check()

        assert result.state == ServerState.OFFLINE
        assert "Name or service not known" in result.error

    def test_injected_session_not_closed(self):
        session = MagicMock()
        HealthProbe("http://x", session=session).close()
        session.close.assert_not_called()
