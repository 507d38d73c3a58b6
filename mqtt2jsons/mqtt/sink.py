"""Sink de líneas: una escritura por mensaje, en orden de llegada."""

from __future__ import annotations

import logging
import sys
from typing import AsyncIterator, Optional, TextIO

logger = logging.getLogger(__name__)


async def print_strings(strings: AsyncIterator[str], out: Optional[TextIO] = None) -> int:
    """Escribe cada string como una línea y devuelve cuántas escribió.

    Se detiene en el primer error del stream y lo propaga sin escribir nada más.
    """
    out = out if out is not None else sys.stdout
    written = 0
    async for text in strings:
        print(text, file=out, flush=True)
        written += 1
    logger.info("[SINK] Stream ended after %d lines", written)
    return written
