"""HTTP delivery of remote write payloads.

A transmitter performs exactly one POST per call and classifies the outcome:
2xx is success, any other status raises :class:`TransmitStatusError`, and a
missing response raises :class:`TransmitTimeoutError` or
:class:`TransmitConnectionError`. There is no retry.

The timeout is a deadline for the whole exchange, not only for each socket
operation, so an endpoint that trickles its response still times out.
"""

import asyncio
import socket
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Any, Mapping

import httpx
import structlog

from promrw.exceptions import (
    TransmitConnectionError,
    TransmitStatusError,
    TransmitTimeoutError,
)
from promrw.remote.protocol import CONTENT_TYPE, REMOTE_WRITE_VERSION, Compression

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0

# httpcore trace events whose return value is a freshly opened network stream
_CONNECT_EVENTS = frozenset(
    {
        "connection.connect_tcp.complete",
        "connection.connect_unix_socket.complete",
        "connection.start_tls.complete",
    }
)


def build_headers(
    user_agent: str,
    compression: Compression = "gzip",
    extra: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """
    Build the request headers for a remote write POST.

    Extra headers (for example ``Authorization``) are applied first, so they
    can never replace the protocol headers.
    """
    headers = dict(extra or {})
    headers.update(
        {
            "Content-Type": CONTENT_TYPE,
            "Content-Encoding": compression,
            "User-Agent": user_agent,
            "X-Prometheus-Remote-Write-Version": REMOTE_WRITE_VERSION,
        }
    )
    return headers


def _read_body(response: httpx.Response) -> str | None:
    """Read an error response body, giving up quietly if the read fails."""
    try:
        response.read()
    except (httpx.HTTPError, httpx.StreamError) as e:
        logger.debug("error_body_unreadable", status_code=response.status_code, error=str(e))
        return None
    return response.text


async def _aread_body(response: httpx.Response) -> str | None:
    try:
        await response.aread()
    except (httpx.HTTPError, httpx.StreamError) as e:
        logger.debug("error_body_unreadable", status_code=response.status_code, error=str(e))
        return None
    return response.text


def _shutdown_stream(stream: Any) -> None:
    sock = stream.get_extra_info("socket")
    if sock is None:
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError as e:
        logger.debug("stream_shutdown_failed", error=str(e))


class _InflightRequest:
    """Network streams used by one blocking request, so a deadline can cut them."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._streams: list[Any] = []
        self._aborted = False

    def trace(self, event_name: str, info: dict[str, Any]) -> None:
        """httpx ``trace`` extension callback."""
        if event_name in _CONNECT_EVENTS:
            self.attach(info.get("return_value"))

    def attach(self, stream: Any) -> None:
        if stream is None:
            return
        with self._lock:
            self._streams.append(stream)
            aborted = self._aborted
        if aborted:
            _shutdown_stream(stream)

    def abort(self) -> None:
        with self._lock:
            self._aborted = True
            streams = list(self._streams)
        for stream in streams:
            _shutdown_stream(stream)


class Transmitter:
    """Blocking remote write transport backed by ``httpx.Client``.

    The underlying client keeps a connection pool and may be shared by
    concurrent pushes. Each POST runs on a worker thread so the caller can
    stop waiting at the deadline; the connection is then shut down.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize transmitter.

        Args:
            timeout: Request deadline in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.timeout = timeout
        self._client = httpx.Client(timeout=timeout, transport=transport)
        self._executor = ThreadPoolExecutor(thread_name_prefix="promrw-send")

    def _post(
        self,
        url: str,
        payload: bytes,
        headers: Mapping[str, str],
        timeout: float,
        inflight: _InflightRequest,
    ) -> tuple[httpx.Response, str | None]:
        with self._client.stream(
            "POST",
            url,
            content=payload,
            headers=headers,
            timeout=timeout,
            extensions={"trace": inflight.trace},
        ) as response:
            if response.is_success:
                return response, None
            # A reused pooled connection is only known once headers arrive.
            inflight.attach(response.extensions.get("network_stream"))
            return response, _read_body(response)

    def send(
        self,
        url: str,
        payload: bytes,
        headers: Mapping[str, str],
        timeout: float | None = None,
    ) -> httpx.Response:
        """
        POST a payload once.

        Args:
            url: Remote write endpoint
            payload: Compressed request body
            headers: Request headers
            timeout: Deadline for this call, defaults to the transmitter timeout

        Returns:
            httpx.Response: The successful response (body discarded)

        Raises:
            TransmitTimeoutError: If the deadline passed before a response
            TransmitConnectionError: If no response could be obtained
            TransmitStatusError: If the response status is not 2xx
        """
        request_timeout = self.timeout if timeout is None else timeout
        inflight = _InflightRequest()

        future = self._executor.submit(
            self._post, url, payload, headers, request_timeout, inflight
        )
        try:
            response, body = future.result(timeout=request_timeout)
        except FuturesTimeoutError:
            future.cancel()
            inflight.abort()
            logger.debug("remote_write_deadline_exceeded", url=url, timeout_seconds=request_timeout)
            raise TransmitTimeoutError(url, request_timeout) from None
        except httpx.TimeoutException as e:
            raise TransmitTimeoutError(url, request_timeout) from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise TransmitConnectionError(url, str(e) or type(e).__name__) from e

        if response.is_success:
            return response
        raise TransmitStatusError(url, response.status_code, body)

    def close(self) -> None:
        """Release pooled connections and the worker threads."""
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._client.close()


class AsyncTransmitter:
    """Asyncio twin of :class:`Transmitter` backed by ``httpx.AsyncClient``."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def _post(
        self,
        url: str,
        payload: bytes,
        headers: Mapping[str, str],
        timeout: float,
    ) -> tuple[httpx.Response, str | None]:
        async with self._client.stream(
            "POST", url, content=payload, headers=headers, timeout=timeout
        ) as response:
            if response.is_success:
                return response, None
            return response, await _aread_body(response)

    async def send(
        self,
        url: str,
        payload: bytes,
        headers: Mapping[str, str],
        timeout: float | None = None,
    ) -> httpx.Response:
        """POST a payload once. Raises the same errors as :meth:`Transmitter.send`."""
        request_timeout = self.timeout if timeout is None else timeout

        try:
            response, body = await asyncio.wait_for(
                self._post(url, payload, headers, request_timeout),
                timeout=request_timeout,
            )
        except asyncio.TimeoutError:
            logger.debug("remote_write_deadline_exceeded", url=url, timeout_seconds=request_timeout)
            raise TransmitTimeoutError(url, request_timeout) from None
        except httpx.TimeoutException as e:
            raise TransmitTimeoutError(url, request_timeout) from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise TransmitConnectionError(url, str(e) or type(e).__name__) from e

        if response.is_success:
            return response
        raise TransmitStatusError(url, response.status_code, body)

    async def aclose(self) -> None:
        await self._client.aclose()
