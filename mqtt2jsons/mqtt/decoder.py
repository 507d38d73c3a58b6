"""Decodificación de payloads a texto.

Política: la continuidad del stream pesa más que la validación estricta.
Un payload que no es UTF-8 válido se convierte en "".
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

from ..metrics import record_payload_decoded

logger = logging.getLogger(__name__)


def decode_payload(payload: bytes) -> str:
    """bytes → str. Nunca falla."""
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.debug("[DECODE] Invalid UTF-8 payload (%d bytes): %s", len(payload), e)
        record_payload_decoded(False)
        return ""
    record_payload_decoded(True)
    return text


async def payloads_to_strings(payloads: AsyncIterator[bytes]) -> AsyncIterator[str]:
    """Aplica decode_payload a cada payload; los errores del stream pasan tal cual."""
    try:
        async for payload in payloads:
            yield decode_payload(payload)
    finally:
        aclose = getattr(payloads, "aclose", None)
        if aclose is not None:
            await aclose()
