"""Fake remote write endpoint for client tests."""

import httpx

from promrw.remote import PrometheusRemoteWrite

URL = "http://prometheus.test/api/v1/write"


class RecordingEndpoint:
    """Fake remote write endpoint that records and decodes every request."""

    def __init__(self, status_code: int = 204, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        self.requests: list[httpx.Request] = []
        self.error: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def series(self, index: int = -1) -> list[dict]:
        """Decode the time series of a recorded request."""
        request = self.requests[index]
        protocol = PrometheusRemoteWrite()
        write_request = protocol.decode_write_request(
            request.content, request.headers["Content-Encoding"]
        )
        return protocol.extract_time_series(write_request)
