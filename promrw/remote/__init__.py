"""Prometheus remote write wire support for promrw.

This package provides the write request encoder (Protobuf serialization
plus gzip or Snappy compression) and the HTTP transmitters that deliver it.
"""

from promrw.remote.protocol import PrometheusRemoteWrite
from promrw.remote.transport import AsyncTransmitter, Transmitter, build_headers

__all__ = [
    "AsyncTransmitter",
    "PrometheusRemoteWrite",
    "Transmitter",
    "build_headers",
]
