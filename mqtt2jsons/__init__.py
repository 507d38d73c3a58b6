"""mqtt2jsons: imprime en stdout los payloads de un topic MQTT, uno por línea."""

from .core.domain import ConnectionOptions, QoS, SubscriptionConfig
from .core.errors import (
    ConfigError,
    Mqtt2JsonsError,
    PollTimeout,
    SessionConsumedError,
    SubscribeError,
    TransportError,
)
from .mqtt import (
    PayloadStream,
    Session,
    decode_payload,
    get_payload,
    payloads_to_strings,
    print_strings,
)

__version__ = "0.1.0"

__all__ = [
    "ConnectionOptions",
    "QoS",
    "SubscriptionConfig",
    "ConfigError",
    "Mqtt2JsonsError",
    "PollTimeout",
    "SessionConsumedError",
    "SubscribeError",
    "TransportError",
    "PayloadStream",
    "Session",
    "decode_payload",
    "get_payload",
    "payloads_to_strings",
    "print_strings",
]
