"""promrw: push metrics to Prometheus-compatible remote write endpoints."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("promrw")
except PackageNotFoundError:
    # Package is not installed, use fallback
    __version__ = "0.0.0.dev"

from promrw.client import AsyncRemoteWriteClient, RemoteWriteClient
from promrw.exceptions import (
    ConfigurationError,
    EncodeError,
    LabelValidationError,
    PromRWError,
    TransmitConnectionError,
    TransmitError,
    TransmitStatusError,
    TransmitTimeoutError,
)
from promrw.labels import (
    LABEL_NAME_PATTERN,
    METRIC_NAME_LABEL,
    Label,
    labels_from_mapping,
    validate_labels,
)
from promrw.metric import Metric, Sample, now_ms

__all__ = [
    "__version__",
    "AsyncRemoteWriteClient",
    "ConfigurationError",
    "EncodeError",
    "LABEL_NAME_PATTERN",
    "Label",
    "LabelValidationError",
    "METRIC_NAME_LABEL",
    "Metric",
    "PromRWError",
    "RemoteWriteClient",
    "Sample",
    "TransmitConnectionError",
    "TransmitError",
    "TransmitStatusError",
    "TransmitTimeoutError",
    "labels_from_mapping",
    "now_ms",
    "validate_labels",
]
