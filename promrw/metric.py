"""In-memory time series: a label set plus a buffer of samples."""

import time
from dataclasses import dataclass
from typing import Iterable

from promrw.labels import METRIC_NAME_LABEL, Label, validate_labels


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class Sample:
    """A single timestamped value. Timestamp is in milliseconds."""

    timestamp: int
    value: float


class Metric:
    """A named time series that accumulates samples between pushes.

    The label set is the caller's labels followed by ``__name__=<name>``.
    Samples are appended with :meth:`add_sample` and cleared by the client
    after a successful push, so repeated pushes never resend old data.

    Example:
        metric = Metric("request_count", [Label("route", "/api")])
        metric.add_sample(1, 1000)
        metric.add_sample(2, 2000)
        client.push(metric)  # samples are empty afterwards
    """

    def __init__(self, name: str, labels: Iterable[Label] | None = None) -> None:
        """
        Create a metric.

        Args:
            name: Metric name, stored as the value of the __name__ label
            labels: Extra labels for this series

        Raises:
            LabelValidationError: If any label, or the name, is invalid
        """
        metric_labels = list(labels or [])
        metric_labels.append(Label(name=METRIC_NAME_LABEL, value=name))
        validate_labels(metric_labels)

        self._name = name
        self._labels = tuple(metric_labels)
        self._samples: list[Sample] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def labels(self) -> tuple[Label, ...]:
        return self._labels

    @property
    def samples(self) -> tuple[Sample, ...]:
        return tuple(self._samples)

    def add_sample(self, value: float, timestamp: int | None = None) -> Sample:
        """
        Append a sample.

        Args:
            value: Sample value
            timestamp: Milliseconds since the Unix epoch, defaults to now

        Returns:
            Sample: The appended sample
        """
        if timestamp is None:
            timestamp = now_ms()
        sample = Sample(timestamp=int(timestamp), value=float(value))
        self._samples.append(sample)
        return sample

    def clear_samples(self, count: int | None = None) -> int:
        """
        Drop samples from the front of the buffer, in place.

        Args:
            count: Number of oldest samples to drop; all of them when None

        Returns:
            int: How many samples were dropped

        Raises:
            ValueError: If count is negative
        """
        if count is not None and count < 0:
            raise ValueError(f"count must not be negative, got {count}")
        if count is None or count >= len(self._samples):
            count = len(self._samples)
        del self._samples[:count]
        return count

    def __len__(self) -> int:
        return len(self._samples)

    def __repr__(self) -> str:
        return f"Metric(name={self._name!r}, labels={len(self._labels)}, samples={len(self._samples)})"
