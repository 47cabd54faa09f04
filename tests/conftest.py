"""Pytest configuration and fixtures."""

import copy
import http.server
import json
import socketserver
import threading

import pytest

from tests.services_fixtures import SERVICES


@pytest.fixture
def services():
    """Fresh copy of a small services registry."""
    return copy.deepcopy(SERVICES)


@pytest.fixture
def services_server(tmp_path):
    """
    Fixture for serving services registries over HTTP.

    Usage:
        def test_remote_registry(services_server, services):
            url = services_server.publish("services.json", services)
            ...

    Attributes:
        port (int): The port the server is listening on
        fixtures_dir (Path): Directory the server serves files from
        requests (list[str]): Paths requested so far
    """

    class ServicesServer:
        def __init__(self, port, fixtures_dir, requests):
            self.port = port
            self.fixtures_dir = fixtures_dir
            self.requests = requests

        def url_for(self, name):
            return f"http://127.0.0.1:{self.port}/{name}"

        def publish(self, name, data):
            """Write data as JSON and return its URL."""
            (self.fixtures_dir / name).write_text(json.dumps(data), encoding="utf-8")
            return self.url_for(name)

    fixtures_dir = tmp_path / "services_fixtures"
    fixtures_dir.mkdir()
    requests = []

    class ServicesHTTPRequestHandler(http.server.SimpleHTTPRequestHandler):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, directory=str(fixtures_dir), **kwargs)

        def do_GET(self):
            requests.append(self.path)
            super().do_GET()

        def log_message(self, format, *args):
            pass  # Suppress logging during tests

    # Start server on auto-assigned port
    server = socketserver.TCPServer(("127.0.0.1", 0), ServicesHTTPRequestHandler)
    port = server.server_address[1]

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    yield ServicesServer(port, fixtures_dir, requests)

    # Cleanup: shutdown server
    server.shutdown()
    server.server_close()
    thread.join(timeout=1.0)
