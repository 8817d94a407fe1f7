"""Tests for the remote write encoder."""

import gzip

import pytest
import snappy

from promrw.exceptions import EncodeError
from promrw.labels import Label
from promrw.metric import Sample
from promrw.remote import PrometheusRemoteWrite, prompb


@pytest.fixture
def protocol():
    return PrometheusRemoteWrite()


@pytest.fixture
def labels():
    return [Label("__name__", "x"), Label("env", "prod")]


class TestEncodeWriteRequest:
    """Tests for encode_write_request."""

    def test_round_trip(self, protocol, labels):
        payload = protocol.encode_write_request(labels, [Sample(1000, 3.14)])

        write_request = protocol.decode_write_request(payload)
        series = protocol.extract_time_series(write_request)

        assert len(series) == 1
        assert set(series[0]["labels"]) == {("__name__", "x"), ("env", "prod")}
        assert series[0]["samples"] == [(1000, 3.14)]

    def test_payload_is_gzip(self, protocol, labels):
        payload = protocol.encode_write_request(labels, [Sample(1000, 1.0)])

        assert payload[:2] == b"\x1f\x8b"
        write_request = prompb.WriteRequest()
        write_request.ParseFromString(gzip.decompress(payload))
        assert write_request.timeseries[0].samples[0].timestamp == 1000

    def test_snappy_round_trip(self, protocol, labels):
        payload = protocol.encode_write_request(
            labels, [Sample(1000, 1.0), Sample(2000, 2.0)], compression="snappy"
        )

        write_request = prompb.WriteRequest()
        write_request.ParseFromString(snappy.decompress(payload))
        assert [s.value for s in write_request.timeseries[0].samples] == [1.0, 2.0]

    def test_sample_order_preserved(self, protocol, labels):
        samples = [Sample(3000, 3.0), Sample(1000, 1.0), Sample(2000, 2.0)]

        payload = protocol.encode_write_request(labels, samples)
        series = protocol.extract_time_series(protocol.decode_write_request(payload))

        assert series[0]["samples"] == [(3000, 3.0), (1000, 1.0), (2000, 2.0)]

    def test_duplicate_labels_kept(self, protocol):
        labels = [Label("__name__", "x"), Label("env", "prod"), Label("env", "dev")]

        payload = protocol.encode_write_request(labels, [Sample(1000, 1.0)])
        series = protocol.extract_time_series(protocol.decode_write_request(payload))

        assert series[0]["labels"] == [("__name__", "x"), ("env", "prod"), ("env", "dev")]

    def test_empty_samples(self, protocol, labels):
        payload = protocol.encode_write_request(labels, [])

        write_request = protocol.decode_write_request(payload)
        assert len(write_request.timeseries) == 1
        assert len(write_request.timeseries[0].samples) == 0

    def test_unsupported_compression(self, protocol, labels):
        with pytest.raises(EncodeError) as exc_info:
            protocol.encode_write_request(labels, [], compression="zstd")

        assert exc_info.value.context["stage"] == "compress"

    def test_timestamp_out_of_range(self, protocol, labels):
        with pytest.raises(EncodeError) as exc_info:
            protocol.encode_write_request(labels, [Sample(2**70, 1.0)])

        assert exc_info.value.context["stage"] == "build"

    def test_non_string_label_value(self, protocol):
        with pytest.raises(EncodeError):
            protocol.encode_write_request([Label("__name__", 5)], [])


class TestDecodeWriteRequest:
    """Tests for the inverse path."""

    def test_garbage_gzip(self, protocol):
        with pytest.raises(ValueError, match="decompress"):
            protocol.decode_write_request(b"not gzip at all")

    def test_unknown_compression(self, protocol):
        with pytest.raises(ValueError, match="Unsupported compression"):
            protocol.decode_write_request(b"", compression="lz4")


class TestStatistics:
    """Tests for get_statistics."""

    def test_statistics(self, protocol, labels):
        write_request = protocol.build_write_request(
            labels, [Sample(2000, 1.0), Sample(1000, 2.0), Sample(3000, 3.0)]
        )

        stats = protocol.get_statistics(write_request)

        assert stats == {
            "total_time_series": 1,
            "total_samples": 3,
            "unique_metrics": 1,
            "min_timestamp": 1000,
            "max_timestamp": 3000,
        }
