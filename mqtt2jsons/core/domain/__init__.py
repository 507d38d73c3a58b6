from .events import ControlEvent, Event, PublishEvent
from .subscription_config import (
    CAP_DEFAULT,
    DEFAULT_CLIENT_ID,
    DEFAULT_HOST,
    DEFAULT_KEEPALIVE,
    DEFAULT_PORT,
    QOS_DEFAULT,
    RETRIES_DEFAULT,
    ConnectionOptions,
    QoS,
    SubscriptionConfig,
)

__all__ = [
    "ControlEvent",
    "Event",
    "PublishEvent",
    "CAP_DEFAULT",
    "DEFAULT_CLIENT_ID",
    "DEFAULT_HOST",
    "DEFAULT_KEEPALIVE",
    "DEFAULT_PORT",
    "QOS_DEFAULT",
    "RETRIES_DEFAULT",
    "ConnectionOptions",
    "QoS",
    "SubscriptionConfig",
]
