"""Stream perezoso de payloads sobre el poll acotado.

Cada pull ejecuta get_payload:
- payload → se entrega y el poll handle vuelve al estado del stream
- PollTimeout → se absorbe y se vuelve a intentar, sin emitir nada
- cualquier otro error → se lanza una sola vez; después el stream termina

El poll handle sale del estado durante el pull y vuelve al terminar, así
que un segundo pull concurrente no encuentra handle y falla en lugar de
hacer un poll paralelo.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from ..core.errors import ConfigError, PollTimeout
from ..metrics import StreamStats, record_poll_timeout, record_stream_error
from .retry import SupportsPoll, get_payload

logger = logging.getLogger(__name__)


class PayloadStream:
    """Async iterator de payloads (bytes), ilimitado hasta el primer error."""

    def __init__(
        self,
        poll: SupportsPoll,
        retries: int,
        on_close: Optional[Callable[[], None]] = None,
    ):
        # Con 0 polls cada intento es un timeout inmediato y el stream giraría sin ceder el loop
        if retries < 1:
            raise ConfigError(f"retries must be positive: {retries}")
        self._poll: Optional[SupportsPoll] = poll
        self._retries = retries
        self._on_close = on_close
        self._finished = False
        self.stats = StreamStats()

    def __aiter__(self) -> "PayloadStream":
        return self

    async def __anext__(self) -> bytes:
        if self._finished:
            raise StopAsyncIteration

        poll = self._poll
        if poll is None:
            raise RuntimeError("PayloadStream is already being polled")
        self._poll = None
        self.stats.pulls += 1

        try:
            payload = await self._next_payload(poll)
        except asyncio.CancelledError:
            logger.info("[STREAM] Cancelled while polling")
            self._finish()
            raise
        except Exception as e:
            self.stats.errors += 1
            record_stream_error()
            logger.error("[STREAM] Terminated by %s: %s", type(e).__name__, e)
            self._finish()
            raise

        self._poll = poll
        self.stats.payloads += 1
        return payload

    async def _next_payload(self, poll: SupportsPoll) -> bytes:
        while True:
            try:
                return await get_payload(poll, self._retries)
            except PollTimeout:
                self.stats.timeouts += 1
                record_poll_timeout()
                logger.debug("[STREAM] No publish within %d polls, retrying", self._retries)

    async def aclose(self) -> None:
        """Abandona el stream y libera la sesión."""
        self._finish()

    def _finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        self._poll = None
        logger.info("[STREAM] Finished. %s", self.stats)
        if self._on_close is not None:
            on_close, self._on_close = self._on_close, None
            on_close()

    @property
    def is_finished(self) -> bool:
        return self._finished
