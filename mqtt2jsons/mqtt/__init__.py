"""Suscriptor MQTT → líneas de texto.

Estructura modular:
- session.py: Session (command handle + poll handle) sobre paho-mqtt
- retry.py: poll acotado (get_payload)
- stream.py: PayloadStream, absorbe timeouts y termina en errores reales
- decoder.py: payload → texto, nunca falla
- sink.py: escritura de una línea por mensaje
"""

from .decoder import decode_payload, payloads_to_strings
from .retry import get_payload
from .session import CommandHandle, PollHandle, Session, create_client
from .sink import print_strings
from .stream import PayloadStream

__all__ = [
    "decode_payload",
    "payloads_to_strings",
    "get_payload",
    "CommandHandle",
    "PollHandle",
    "Session",
    "create_client",
    "print_strings",
    "PayloadStream",
]
