"""Pytest fixtures for transport tests."""

import socket
import threading
import time

import pytest

TRICKLED_RESPONSE = b"HTTP/1.1 204 No Content\r\nContent-Length: 0\r\n\r\n"


@pytest.fixture
def trickling_server(monkeypatch):
    """Local HTTP server that answers one request a byte at a time.

    Each byte arrives well within a read timeout, but the whole response
    takes several seconds.
    """
    for var in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(var, raising=False)

    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    listener.settimeout(5)
    port = listener.getsockname()[1]

    def serve():
        try:
            conn, _ = listener.accept()
        except OSError:
            return
        with conn:
            try:
                conn.recv(65536)
                for byte in TRICKLED_RESPONSE:
                    conn.sendall(bytes([byte]))
                    time.sleep(0.15)
            except OSError:
                return

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()

    yield f"http://127.0.0.1:{port}/api/v1/write"

    listener.close()
    thread.join(timeout=10)
