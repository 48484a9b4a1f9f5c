import threading

import pytest

from responder.server import StaticResponderServer


class BackgroundServer:
    """Static responder running in a background thread."""

    def __init__(self, host='127.0.0.1', port=0):
        self.host = host
        self.port = port
        self.server = None

    def start(self):
        """Start server in background thread."""
        self.server = StaticResponderServer(self.host, self.port)
        self.port = self.server.server_address[1]
        thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        thread.start()

    @property
    def url(self):
        return f"http://{self.host}:{self.port}"

    def stop(self):
        """Stop the server."""
        if self.server:
            self.server.shutdown()
            self.server.server_close()


@pytest.fixture
def responder():
    server = BackgroundServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture(autouse=True)
def no_proxy(monkeypatch):
    for name in ('HTTP_PROXY', 'HTTPS_PROXY', 'ALL_PROXY', 'http_proxy', 'https_proxy', 'all_proxy'):
        monkeypatch.delenv(name, raising=False)
