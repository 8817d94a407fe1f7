"""Prometheus remote write protocol handler.

This module builds Prometheus remote write requests: Protobuf encoding of
the WriteRequest envelope followed by gzip (or Snappy) compression. The
inverse path is provided for tests and debugging tooling.
"""

import gzip
import logging
import zlib
from typing import Any, Dict, Iterable, List, Literal

import snappy
from google.protobuf.message import DecodeError
from google.protobuf.message import EncodeError as ProtobufEncodeError

from promrw.exceptions import EncodeError
from promrw.labels import METRIC_NAME_LABEL, Label
from promrw.metric import Sample
from promrw.remote import prompb

logger = logging.getLogger(__name__)

Compression = Literal["gzip", "snappy"]

SUPPORTED_COMPRESSIONS = ("gzip", "snappy")
CONTENT_TYPE = "application/x-protobuf"
REMOTE_WRITE_VERSION = "0.1.0"


class PrometheusRemoteWrite:
    """Handler for the Prometheus remote write protocol.

    Requests are sent via HTTP POST with a compressed Protobuf body.

    Protocol details:
    - Content-Type: application/x-protobuf
    - Content-Encoding: gzip (default) or snappy
    - X-Prometheus-Remote-Write-Version: 0.1.0
    - Body: compressed Protobuf WriteRequest message

    Example:
        handler = PrometheusRemoteWrite()

        payload = handler.encode_write_request(
            labels=[Label("__name__", "up"), Label("job", "api")],
            samples=[Sample(timestamp=1698765432000, value=1.0)],
        )
    """

    @staticmethod
    def build_write_request(
        labels: Iterable[Label],
        samples: Iterable[Sample],
    ) -> prompb.WriteRequest:
        """Build a WriteRequest holding a single time series.

        Labels are written in the order given and are not deduplicated.

        Args:
            labels: Labels of the series, including __name__
            samples: Samples of the series, in insertion order

        Returns:
            WriteRequest: Envelope with exactly one time series

        Raises:
            EncodeError: If a label or sample cannot be represented
        """
        write_request = prompb.WriteRequest()
        try:
            ts = write_request.timeseries.add()
            for label in labels:
                ts.labels.add(name=label.name, value=label.value)
            for sample in samples:
                ts.samples.add(value=sample.value, timestamp=sample.timestamp)
        except (TypeError, ValueError, OverflowError) as e:
            raise EncodeError(f"error building timeseries data: {e}", stage="build") from e

        return write_request

    @staticmethod
    def compress(data: bytes, compression: Compression = "gzip") -> bytes:
        """Compress a serialized write request.

        Args:
            data: Serialized Protobuf bytes
            compression: "gzip" or "snappy"

        Returns:
            bytes: Compressed payload

        Raises:
            EncodeError: If the compression is unknown or fails
        """
        if compression not in SUPPORTED_COMPRESSIONS:
            raise EncodeError(
                f"Unsupported compression: {compression}",
                stage="compress",
                compression=compression,
            )

        try:
            if compression == "snappy":
                return snappy.compress(data)
            return gzip.compress(data)
        except (TypeError, ValueError, OSError, zlib.error) as e:
            raise EncodeError(
                f"error compressing timeseries data: {e}",
                stage="compress",
                compression=compression,
            ) from e

    def encode_write_request(
        self,
        labels: Iterable[Label],
        samples: Iterable[Sample],
        compression: Compression = "gzip",
    ) -> bytes:
        """Encode one time series into a compressed WriteRequest payload.

        The whole payload is built in memory: the envelope is serialized
        with Protobuf and then compressed.

        Args:
            labels: Labels of the series, including __name__
            samples: Samples to send
            compression: "gzip" (default) or "snappy"

        Returns:
            bytes: Request body ready to POST

        Raises:
            EncodeError: If serialization or compression fails

        Example:
            >>> handler = PrometheusRemoteWrite()
            >>> body = handler.encode_write_request(metric.labels, metric.samples)
        """
        write_request = self.build_write_request(labels, samples)

        try:
            data = write_request.SerializeToString()
        except ProtobufEncodeError as e:
            raise EncodeError(
                f"error marshalling timeseries data: {e}", stage="serialize"
            ) from e

        payload = self.compress(data, compression)

        if logger.isEnabledFor(logging.DEBUG):
            stats = self.get_statistics(write_request)
            logger.debug(
                f"Encoded WriteRequest with {stats['total_time_series']} time series, "
                f"{stats['total_samples']} samples: {len(data)} bytes serialized, "
                f"{len(payload)} bytes {compression}-compressed"
            )
        return payload

    @staticmethod
    def decode_write_request(
        compressed_data: bytes,
        compression: Compression = "gzip",
    ) -> prompb.WriteRequest:
        """Decode a compressed remote write request.

        Args:
            compressed_data: Compressed Protobuf data
            compression: Compression used for the body

        Returns:
            WriteRequest: Decoded write request

        Raises:
            ValueError: If decompression or decoding fails

        Example:
            >>> handler = PrometheusRemoteWrite()
            >>> write_request = handler.decode_write_request(request_body)
            >>> print(f"Received {len(write_request.timeseries)} time series")
        """
        try:
            if compression == "snappy":
                decompressed = snappy.decompress(compressed_data)
            elif compression == "gzip":
                decompressed = gzip.decompress(compressed_data)
            else:
                raise ValueError(f"Unsupported compression: {compression}")

            write_request = prompb.WriteRequest()
            write_request.ParseFromString(decompressed)
            return write_request

        except snappy.UncompressError as e:
            logger.error(f"Failed to decompress Snappy data: {e}")
            raise ValueError(f"Failed to decompress remote write request: {e}") from e
        except (OSError, EOFError, zlib.error) as e:
            logger.error(f"Failed to decompress gzip data: {e}")
            raise ValueError(f"Failed to decompress remote write request: {e}") from e
        except DecodeError as e:
            logger.error(f"Failed to decode remote write request: {e}")
            raise ValueError(f"Failed to decode remote write request: {e}") from e

    @staticmethod
    def extract_time_series(
        write_request: prompb.WriteRequest,
    ) -> List[Dict[str, Any]]:
        """Extract time series from a write request.

        Returns:
            List[dict]: One entry per series:
                {
                    'labels': [('__name__', 'up'), ('job', 'api')],
                    'samples': [(1698765432000, 1.0)],
                }
        """
        return [
            {
                "labels": [(label.name, label.value) for label in ts.labels],
                "samples": [(sample.timestamp, sample.value) for sample in ts.samples],
            }
            for ts in write_request.timeseries
        ]

    @staticmethod
    def get_statistics(
        write_request: prompb.WriteRequest,
    ) -> Dict[str, Any]:
        """Get summary statistics about a write request."""
        stats = {
            "total_time_series": len(write_request.timeseries),
            "total_samples": 0,
            "unique_metrics": set(),
            "min_timestamp": None,
            "max_timestamp": None,
        }

        for ts in write_request.timeseries:
            stats["total_samples"] += len(ts.samples)

            for label in ts.labels:
                if label.name == METRIC_NAME_LABEL:
                    stats["unique_metrics"].add(label.value)

            for sample in ts.samples:
                if stats["min_timestamp"] is None or sample.timestamp < stats["min_timestamp"]:
                    stats["min_timestamp"] = sample.timestamp
                if stats["max_timestamp"] is None or sample.timestamp > stats["max_timestamp"]:
                    stats["max_timestamp"] = sample.timestamp

        stats["unique_metrics"] = len(stats["unique_metrics"])

        return stats
