"""Remote write clients.

A client holds the connection-level configuration for one destination
(endpoint, identity, global labels) and runs the push pipeline:

    validate -> encode -> send -> clear samples on success

Any failure is raised to the caller and leaves the metric's samples in
place, so the same push can simply be retried.
"""

from typing import Iterable, Mapping

import httpx
import structlog

from promrw.config import Settings, get_settings
from promrw.exceptions import ConfigurationError, PromRWError
from promrw.labels import METRIC_NAME_LABEL, Label, merge_labels, validate_labels
from promrw.metric import Metric, Sample
from promrw.remote.protocol import SUPPORTED_COMPRESSIONS, Compression, PrometheusRemoteWrite
from promrw.remote.transport import (
    DEFAULT_TIMEOUT_SECONDS,
    AsyncTransmitter,
    Transmitter,
    build_headers,
)

logger = structlog.get_logger(__name__)


def _check_url(url: str) -> None:
    """Reject endpoint URLs that httpx could never send to."""
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise ConfigurationError(f"Invalid remote write URL: {e}", url=url) from e

    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ConfigurationError(
            f"Remote write URL must be an absolute http(s) URL: {url}", url=url
        )


class _BaseRemoteWriteClient:
    """Configuration and payload preparation shared by both clients."""

    def __init__(
        self,
        url: str,
        user_agent: str,
        labels: Iterable[Label] | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        compression: Compression = "gzip",
        headers: Mapping[str, str] | None = None,
    ) -> None:
        if compression not in SUPPORTED_COMPRESSIONS:
            raise ConfigurationError(
                f"Unsupported compression: {compression}", compression=compression
            )
        if timeout <= 0:
            raise ConfigurationError(
                f"Timeout must be positive, got {timeout}", timeout=timeout
            )

        _check_url(url)

        global_labels = tuple(labels or ())
        validate_labels(global_labels)

        self.url = url
        self.user_agent = user_agent
        self.labels = global_labels
        self.timeout = timeout
        self.compression = compression
        self.headers = build_headers(user_agent, compression, headers)
        self._protocol = PrometheusRemoteWrite()

    @staticmethod
    def _client_kwargs(settings: Settings | None) -> dict:
        settings = settings or get_settings()
        if not settings.remote_write_url:
            raise ConfigurationError("No remote write URL configured")

        return {
            "url": settings.remote_write_url,
            "user_agent": settings.remote_write_user_agent,
            "labels": settings.global_labels,
            "timeout": settings.remote_write_timeout_seconds,
            "compression": settings.remote_write_compression,
            "headers": settings.remote_write_headers,
        }

    def _encode(self, labels: list[Label], samples: Iterable[Sample]) -> bytes:
        validate_labels(labels)
        return self._protocol.encode_write_request(labels, samples, self.compression)

    def _metric_labels(self, metric: Metric) -> list[Label]:
        return merge_labels(self.labels, metric.labels)

    def _series_labels(self, name: str, labels: Iterable[Label] | None) -> list[Label]:
        return merge_labels(
            [Label(name=METRIC_NAME_LABEL, value=name)], self.labels, labels or []
        )


class RemoteWriteClient(_BaseRemoteWriteClient):
    """Blocking client for a Prometheus-compatible remote write endpoint.

    Example:
        with RemoteWriteClient(
            "https://prometheus.example.com/api/v1/write",
            "billing-service/1.4.0",
            labels=[Label("env", "prod")],
        ) as client:
            metric = Metric("invoices_processed")
            metric.add_sample(42)
            client.push(metric)
    """

    def __init__(
        self,
        url: str,
        user_agent: str,
        labels: Iterable[Label] | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        compression: Compression = "gzip",
        headers: Mapping[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Create a client.

        Args:
            url: Remote write endpoint URL
            user_agent: Identity sent as the User-Agent header
            labels: Global labels added to every pushed series
            timeout: Request timeout in seconds
            compression: "gzip" (default) or "snappy"
            headers: Extra request headers, e.g. Authorization
            transport: Optional httpx transport (used by tests)

        Raises:
            LabelValidationError: If a global label is invalid
            ConfigurationError: If the URL, compression or timeout are invalid
        """
        super().__init__(url, user_agent, labels, timeout, compression, headers)
        self._transmitter = Transmitter(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> "RemoteWriteClient":
        """Create a client from configuration (defaults to get_settings())."""
        return cls(**cls._client_kwargs(settings), transport=transport)

    def push(self, metric: Metric, timeout: float | None = None) -> int:
        """
        Push a metric's pending samples and commit them.

        Global labels come first, then the metric's labels. Once the endpoint
        accepts the request, the samples that were sent are removed from the
        metric. On any error the metric is left untouched.

        Args:
            metric: Metric whose samples should be sent
            timeout: Deadline for this push, defaults to the client timeout

        Returns:
            int: Number of samples sent and cleared from the metric

        Raises:
            LabelValidationError: If the merged label set is invalid
            EncodeError: If the payload cannot be built
            TransmitError: If delivery fails
        """
        samples = metric.samples
        try:
            payload = self._encode(self._metric_labels(metric), samples)
            self._transmitter.send(self.url, payload, self.headers, timeout)
        except PromRWError as e:
            logger.debug(
                "remote_write_failed",
                metric=metric.name,
                samples=len(samples),
                error_type=type(e).__name__,
                error=e.message,
            )
            raise

        cleared = metric.clear_samples(len(samples))
        logger.debug(
            "remote_write_push",
            metric=metric.name,
            samples=cleared,
            payload_bytes=len(payload),
        )
        return cleared

    def push_samples(
        self,
        name: str,
        samples: Iterable[Sample],
        labels: Iterable[Label] | None = None,
        timeout: float | None = None,
    ) -> int:
        """
        Push samples for a series without keeping a Metric around.

        The series labels are ``__name__=<name>``, then the global labels,
        then ``labels``.

        Returns:
            int: Number of samples sent
        """
        samples = list(samples)
        try:
            payload = self._encode(self._series_labels(name, labels), samples)
            self._transmitter.send(self.url, payload, self.headers, timeout)
        except PromRWError as e:
            logger.debug(
                "remote_write_failed",
                metric=name,
                samples=len(samples),
                error_type=type(e).__name__,
                error=e.message,
            )
            raise

        logger.debug(
            "remote_write_push", metric=name, samples=len(samples), payload_bytes=len(payload)
        )
        return len(samples)

    def close(self) -> None:
        """Release the HTTP transport."""
        self._transmitter.close()

    def __enter__(self) -> "RemoteWriteClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class AsyncRemoteWriteClient(_BaseRemoteWriteClient):
    """Asyncio client with the same semantics as :class:`RemoteWriteClient`.

    Cancelling the task running a push aborts the request and propagates
    ``asyncio.CancelledError``; the metric keeps its samples. To give up on a
    push and get a ``TransmitTimeoutError`` instead, pass ``timeout=``.
    """

    def __init__(
        self,
        url: str,
        user_agent: str,
        labels: Iterable[Label] | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        compression: Compression = "gzip",
        headers: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(url, user_agent, labels, timeout, compression, headers)
        self._transmitter = AsyncTransmitter(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "AsyncRemoteWriteClient":
        return cls(**cls._client_kwargs(settings), transport=transport)

    async def push(self, metric: Metric, timeout: float | None = None) -> int:
        """Push a metric's pending samples and commit them. See RemoteWriteClient.push."""
        samples = metric.samples
        try:
            payload = self._encode(self._metric_labels(metric), samples)
            await self._transmitter.send(self.url, payload, self.headers, timeout)
        except PromRWError as e:
            logger.debug(
                "remote_write_failed",
                metric=metric.name,
                samples=len(samples),
                error_type=type(e).__name__,
                error=e.message,
            )
            raise

        # Only the sent prefix is dropped; samples added while awaiting stay.
        cleared = metric.clear_samples(len(samples))
        logger.debug(
            "remote_write_push",
            metric=metric.name,
            samples=cleared,
            payload_bytes=len(payload),
        )
        return cleared

    async def push_samples(
        self,
        name: str,
        samples: Iterable[Sample],
        labels: Iterable[Label] | None = None,
        timeout: float | None = None,
    ) -> int:
        samples = list(samples)
        try:
            payload = self._encode(self._series_labels(name, labels), samples)
            await self._transmitter.send(self.url, payload, self.headers, timeout)
        except PromRWError as e:
            logger.debug(
                "remote_write_failed",
                metric=name,
                samples=len(samples),
                error_type=type(e).__name__,
                error=e.message,
            )
            raise

        logger.debug(
            "remote_write_push", metric=name, samples=len(samples), payload_bytes=len(payload)
        )
        return len(samples)

    async def aclose(self) -> None:
        await self._transmitter.aclose()

    async def __aenter__(self) -> "AsyncRemoteWriteClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
