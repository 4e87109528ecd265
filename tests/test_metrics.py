"""Tests for the CloudWatch metrics client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from support_chat.services.metrics import MetricsClient


def _make_client(*, enabled: bool = False) -> MetricsClient:
    with patch.dict("os.environ", {"METRICS_ENABLED": str(enabled).lower()}), \
            patch.object(MetricsClient, "_start_flush_thread"):
        return MetricsClient()


def _dims(datum) -> dict[str, str]:
    return {d["Name"]: d["Value"] for d in datum["Dimensions"]}


class TestRecordCall:
    def test_success_buffers_count_and_latency(self):
        client = _make_client(enabled=True)
        client.record_call("anthropic", "generate_reply", latency_ms=420.0)

        names = [m["MetricName"] for m in client._buffer]
        assert names == ["Provider/RequestCount", "Provider/Latency"]
        assert _dims(client._buffer[0])["Status"] == "success"

    def test_failure_adds_error_count_with_kind(self):
        client = _make_client(enabled=True)
        client.record_call(
            "anthropic", "generate_reply", latency_ms=12.0, error_kind="RATE_LIMIT_ERROR",
        )

        by_name = {m["MetricName"]: m for m in client._buffer}
        assert set(by_name) == {
            "Provider/RequestCount",
            "Provider/Latency",
            "Provider/ErrorCount",
        }
        assert _dims(by_name["Provider/RequestCount"])["Status"] == "failure"
        assert _dims(by_name["Provider/ErrorCount"])["ErrorKind"] == "RATE_LIMIT_ERROR"

    def test_latency_unit_and_value(self):
        client = _make_client(enabled=True)
        client.record_call("anthropic", "generate_reply", latency_ms=99.5)
        latency = next(m for m in client._buffer if m["MetricName"] == "Provider/Latency")
        assert latency["Value"] == 99.5
        assert latency["Unit"] == "Milliseconds"


class TestFlush:
    def test_disabled_client_never_buffers(self):
        client = _make_client(enabled=False)
        for _ in range(1000):
            client.record_call("anthropic", "generate_reply", latency_ms=1.0)
        client.record_call("anthropic", "generate_reply", latency_ms=1.0, error_kind="TIMEOUT_ERROR")

        assert client._buffer == []
        assert client.flush() == 0

    def test_enabled_flush_calls_put_metric_data(self):
        client = _make_client(enabled=True)
        mock_cw = MagicMock()
        client._cw_client = mock_cw

        client.record_call("anthropic", "generate_reply", latency_ms=1.0)
        sent = client.flush()

        assert sent == 2
        mock_cw.put_metric_data.assert_called_once()
        kwargs = mock_cw.put_metric_data.call_args.kwargs
        assert kwargs["Namespace"] == "SupportChat"
        assert len(kwargs["MetricData"]) == 2

    def test_flush_failure_is_logged_not_raised(self):
        client = _make_client(enabled=True)
        client._cw_client = MagicMock()
        client._cw_client.put_metric_data.side_effect = RuntimeError("throttled")

        client.record_call("anthropic", "generate_reply", latency_ms=1.0)
        assert client.flush() == 0

    def test_empty_buffer_returns_zero(self):
        assert _make_client(enabled=True).flush() == 0
