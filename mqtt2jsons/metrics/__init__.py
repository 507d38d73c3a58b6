"""Observabilidad del stream: contadores Prometheus y stats por stream."""

from .stream_metrics import (
    MQTT_EVENTS_POLLED,
    MQTT_PAYLOADS_DECODED,
    MQTT_POLL_TIMEOUTS,
    MQTT_STREAM_ERRORS,
    record_event_polled,
    record_payload_decoded,
    record_poll_timeout,
    record_stream_error,
)
from .stream_stats import StreamStats

__all__ = [
    "MQTT_EVENTS_POLLED",
    "MQTT_PAYLOADS_DECODED",
    "MQTT_POLL_TIMEOUTS",
    "MQTT_STREAM_ERRORS",
    "record_event_polled",
    "record_payload_decoded",
    "record_poll_timeout",
    "record_stream_error",
    "StreamStats",
]
