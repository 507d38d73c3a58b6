"""Eventos producidos por el poll handle.

Un evento es un PUBLISH entrante (con payload) o cualquier otro paquete de
control. Los errores de transporte no son eventos: el poll handle los lanza.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

CONNACK = "CONNACK"
SUBACK = "SUBACK"
UNSUBACK = "UNSUBACK"
PUBACK = "PUBACK"
PINGREQ = "PINGREQ"
PINGRESP = "PINGRESP"
DISCONNECT = "DISCONNECT"


@dataclass(frozen=True)
class PublishEvent:
    """Mensaje publicado en el topic suscrito."""
    topic: str
    payload: bytes
    qos: int = 0
    retain: bool = False


@dataclass(frozen=True)
class ControlEvent:
    """Paquete de control (ack, keepalive, desconexión limpia)."""
    kind: str
    detail: Optional[str] = None


Event = Union[PublishEvent, ControlEvent]
