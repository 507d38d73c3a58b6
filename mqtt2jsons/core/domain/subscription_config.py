"""Configuración de la suscripción.

ConnectionOptions describe cómo llegar al broker; SubscriptionConfig agrega
topic, QoS, presupuesto de reintentos y capacidad del cliente. Ambas son
inmutables; las variantes se construyen con los helpers `with_*`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import TYPE_CHECKING, AsyncIterator, Callable, Optional

from ..errors import ConfigError

if TYPE_CHECKING:
    from ...mqtt.session import Session

logger = logging.getLogger(__name__)

# Defaults del proceso
DEFAULT_CLIENT_ID = "00000000-0000-0000-0000-000000000000"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 1883
DEFAULT_KEEPALIVE = 60

RETRIES_DEFAULT = 10
CAP_DEFAULT = 10


class QoS(IntEnum):
    """Nivel de garantía de entrega MQTT."""
    AT_MOST_ONCE = 0
    AT_LEAST_ONCE = 1
    EXACTLY_ONCE = 2


QOS_DEFAULT = QoS.AT_MOST_ONCE


@dataclass(frozen=True)
class ConnectionOptions:
    """Parámetros de conexión al broker."""
    client_id: str = DEFAULT_CLIENT_ID
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    keepalive: int = DEFAULT_KEEPALIVE
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        if not 0 <= self.port <= 65535:
            raise ConfigError(f"port out of range: {self.port}")
        if self.keepalive < 1:
            raise ConfigError(f"keepalive must be positive: {self.keepalive}")

    def with_client_id(self, client_id: str) -> "ConnectionOptions":
        return replace(self, client_id=client_id)

    def with_host(self, host: str) -> "ConnectionOptions":
        return replace(self, host=host)

    def with_port(self, port: int) -> "ConnectionOptions":
        return replace(self, port=port)

    @property
    def broker(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class SubscriptionConfig:
    """Todo lo necesario para abrir una sesión y suscribirse a un topic.

    `retries` es el número máximo de polls consecutivos sin PUBLISH antes de
    declarar timeout. `capacity` limita la cola de salida del cliente.
    """
    options: ConnectionOptions
    topic: str
    retries: int = RETRIES_DEFAULT
    qos: QoS = QOS_DEFAULT
    capacity: int = CAP_DEFAULT

    def __post_init__(self):
        if not self.topic:
            raise ConfigError("topic must not be empty")
        if self.retries < 1:
            raise ConfigError(f"retries must be positive: {self.retries}")
        if self.capacity < 1:
            raise ConfigError(f"capacity must be positive: {self.capacity}")
        # Acepta enteros crudos (p.ej. desde env) y los normaliza
        object.__setattr__(self, "qos", QoS(self.qos))

    @classmethod
    def with_defaults(cls, options: ConnectionOptions, topic: str) -> "SubscriptionConfig":
        return cls(options=options, topic=topic)

    def into_session(self, client_factory: Optional[Callable] = None) -> "Session":
        """Crea la sesión (command handle + poll handle).

        Debe llamarse con un event loop de asyncio corriendo.
        """
        # Import local para evitar import circular con mqtt.session
        from ...mqtt.session import Session

        return Session.open(self, client_factory=client_factory)

    async def into_strings(
        self,
        client_factory: Optional[Callable] = None,
    ) -> AsyncIterator[str]:
        """Abre la sesión, se suscribe y devuelve el stream de textos.

        La suscripción se confirma (SUBACK) una sola vez antes de devolver
        el stream. Si falla, la sesión se libera y el error se propaga.
        """
        from ...mqtt.decoder import payloads_to_strings

        session = self.into_session(client_factory=client_factory)
        try:
            await session.subscribe(self.topic, self.qos)
        except BaseException:
            session.close()
            raise

        logger.info("[MQTT] Subscribed to %s (qos=%d)", self.topic, int(self.qos))
        return payloads_to_strings(session.into_stream(self.retries))
