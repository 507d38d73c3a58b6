"""Excepciones del pipeline MQTT → texto.

Jerarquía:
- Mqtt2JsonsError
  - ConfigError: parámetros de conexión ausentes o inválidos
  - TransportError: fallo de I/O del broker (terminal)
    - SubscribeError: SUBSCRIBE rechazado o no enviado
  - PollTimeout: presupuesto de polls agotado (recuperable)
  - SessionConsumedError: la sesión ya se convirtió en stream
"""

from __future__ import annotations


class Mqtt2JsonsError(Exception):
    """Base de todos los errores del paquete."""


class ConfigError(Mqtt2JsonsError):
    """Configuración inválida. Se detecta antes de tocar la red."""


class TransportError(Mqtt2JsonsError):
    """Error de transporte reportado por el cliente MQTT."""


class SubscribeError(TransportError):
    """El broker rechazó la suscripción o el cliente no pudo enviarla."""


class PollTimeout(Mqtt2JsonsError):
    """No llegó ningún PUBLISH dentro del presupuesto de polls.

    Es un conteo de eventos, no tiempo transcurrido.
    """

    def __init__(self, retries: int):
        super().__init__(f"get_payload timed out after {retries} polls")
        self.retries = retries


class SessionConsumedError(Mqtt2JsonsError):
    """La sesión ya entregó su poll handle a un stream."""
