"""Métricas Prometheus del stream MQTT."""

from __future__ import annotations

from prometheus_client import Counter

MQTT_EVENTS_POLLED = Counter(
    "mqtt2jsons_events_polled_total",
    "Events returned by the poll handle",
    ["kind"],  # publish, control
)
MQTT_POLL_TIMEOUTS = Counter(
    "mqtt2jsons_poll_timeouts_total",
    "Retry budgets exhausted without a publish event",
)
MQTT_PAYLOADS_DECODED = Counter(
    "mqtt2jsons_payloads_decoded_total",
    "Payloads decoded to text",
    ["status"],  # ok, invalid_utf8
)
MQTT_STREAM_ERRORS = Counter(
    "mqtt2jsons_stream_errors_total",
    "Terminal errors that ended a payload stream",
)


def record_event_polled(kind: str) -> None:
    MQTT_EVENTS_POLLED.labels(kind=kind).inc()


def record_poll_timeout() -> None:
    MQTT_POLL_TIMEOUTS.inc()


def record_payload_decoded(valid: bool) -> None:
    MQTT_PAYLOADS_DECODED.labels(status="ok" if valid else "invalid_utf8").inc()


def record_stream_error() -> None:
    MQTT_STREAM_ERRORS.inc()
