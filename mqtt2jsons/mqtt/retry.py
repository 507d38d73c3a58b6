"""Poll acotado: busca el próximo PUBLISH dentro de un presupuesto de polls."""

from __future__ import annotations

import logging
from typing import Protocol

from ..core.domain.events import Event, PublishEvent
from ..core.errors import PollTimeout
from ..metrics import record_event_polled

logger = logging.getLogger(__name__)


class SupportsPoll(Protocol):
    async def poll(self) -> Event: ...


async def get_payload(poll: SupportsPoll, retries: int) -> bytes:
    """Devuelve el payload del primer PUBLISH entre como máximo `retries` polls.

    Los eventos de control consumen presupuesto. Los errores de poll no se
    reintentan: se propagan tal cual. Con retries <= 0 no hay ningún poll.
    """
    for _ in range(retries):
        event = await poll.poll()
        if isinstance(event, PublishEvent):
            record_event_polled("publish")
            return event.payload
        record_event_polled("control")
        logger.debug("[STREAM] Skipped control event %s", getattr(event, "kind", event))
    raise PollTimeout(retries)
