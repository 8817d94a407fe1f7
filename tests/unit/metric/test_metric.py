"""Tests for the Metric model."""

import time

import pytest

from promrw.exceptions import LabelValidationError
from promrw.labels import METRIC_NAME_LABEL, Label
from promrw.metric import Metric, Sample, now_ms


class TestMetricCreation:
    """Tests for Metric construction."""

    def test_name_label_appended_last(self):
        metric = Metric("request_count", [Label("route", "/api")])

        assert metric.name == "request_count"
        assert metric.labels == (
            Label("route", "/api"),
            Label(METRIC_NAME_LABEL, "request_count"),
        )
        assert metric.samples == ()
        assert len(metric) == 0

    def test_labels_optional(self):
        metric = Metric("up")

        assert metric.labels == (Label(METRIC_NAME_LABEL, "up"),)

    def test_invalid_name(self):
        with pytest.raises(LabelValidationError) as exc_info:
            Metric("request-count", [])

        assert exc_info.value.label == METRIC_NAME_LABEL

    def test_invalid_label(self):
        with pytest.raises(LabelValidationError) as exc_info:
            Metric("request_count", [Label("1bad", "x")])

        assert exc_info.value.label == "1bad"


class TestSamples:
    """Tests for sample buffering."""

    def test_samples_keep_insertion_order(self):
        metric = Metric("request_count", [])
        metric.add_sample(1, 1000)
        metric.add_sample(2, 2000)

        assert metric.samples == (Sample(1000, 1.0), Sample(2000, 2.0))

    def test_out_of_order_timestamps_accepted(self):
        metric = Metric("request_count")
        metric.add_sample(1, 2000)
        metric.add_sample(2, 1000)

        assert [s.timestamp for s in metric.samples] == [2000, 1000]

    def test_add_sample_returns_sample(self):
        metric = Metric("temperature")

        sample = metric.add_sample(21.5, 1698765432000)

        assert sample == Sample(timestamp=1698765432000, value=21.5)
        assert isinstance(sample.value, float)

    def test_default_timestamp_is_now(self):
        metric = Metric("temperature")

        before = now_ms()
        sample = metric.add_sample(1)
        after = now_ms()

        assert before <= sample.timestamp <= after

    def test_samples_view_is_a_copy(self):
        metric = Metric("temperature")
        metric.add_sample(1, 1000)

        view = metric.samples
        metric.add_sample(2, 2000)

        assert len(view) == 1
        assert len(metric) == 2

    def test_clear_samples(self):
        metric = Metric("temperature")
        metric.add_sample(1, 1000)
        metric.add_sample(2, 2000)

        assert metric.clear_samples() == 2
        assert metric.samples == ()

    def test_clear_samples_prefix(self):
        metric = Metric("temperature")
        for i in range(3):
            metric.add_sample(i, 1000 * (i + 1))

        assert metric.clear_samples(2) == 2
        assert metric.samples == (Sample(3000, 2.0),)

    def test_clear_more_than_buffered(self):
        metric = Metric("temperature")
        metric.add_sample(1, 1000)

        assert metric.clear_samples(5) == 1
        assert len(metric) == 0

    def test_clear_negative_count_rejected(self):
        metric = Metric("temperature")
        metric.add_sample(1, 1000)
        metric.add_sample(2, 2000)

        with pytest.raises(ValueError):
            metric.clear_samples(-1)

        assert len(metric) == 2


def test_now_ms_is_milliseconds():
    assert abs(now_ms() - int(time.time() * 1000)) < 5000
