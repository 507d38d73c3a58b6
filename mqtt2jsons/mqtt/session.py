"""Sesión MQTT: command handle + poll handle sobre paho-mqtt.

paho corre su network loop en un thread propio (loop_start). Los callbacks
solo traducen paquetes a eventos y los entregan al event loop de asyncio con
call_soon_threadsafe; todo el consumo ocurre en el event loop.

- CommandHandle: espera el CONNACK y emite SUBSCRIBE (espera el SUBACK).
- PollHandle: entrega un evento por llamada a poll(); lanza los errores de
  transporte en lugar de devolverlos.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Union

import paho.mqtt.client as mqtt

from ..core.domain.events import (
    CONNACK,
    DISCONNECT,
    PINGREQ,
    PINGRESP,
    PUBACK,
    SUBACK,
    UNSUBACK,
    ControlEvent,
    Event,
    PublishEvent,
)
from ..core.domain.subscription_config import QoS, SubscriptionConfig
from ..core.errors import SessionConsumedError, SubscribeError, TransportError
from .stream import PayloadStream

logger = logging.getLogger(__name__)

# paho solo reporta el keepalive a través de on_log
_KEEPALIVE_LOG_LINES = {
    "Sending PINGREQ": PINGREQ,
    "Received PINGRESP": PINGRESP,
}


def create_client(config: SubscriptionConfig) -> mqtt.Client:
    """Cliente paho configurado con las opciones de la suscripción."""
    options = config.options
    client = mqtt.Client(
        callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
        client_id=options.client_id,
        protocol=mqtt.MQTTv311,
    )
    if options.username:
        client.username_pw_set(options.username, options.password)
    client.max_queued_messages_set(config.capacity)
    return client


class PollHandle:
    """Mitad de lectura de la sesión: un evento por poll()."""

    def __init__(self, queue: "asyncio.Queue[Union[Event, TransportError]]"):
        self._queue = queue

    async def poll(self) -> Event:
        item = await self._queue.get()
        if isinstance(item, TransportError):
            raise item
        return item


class CommandHandle:
    """Mitad de escritura de la sesión: peticiones al broker."""

    def __init__(self, client: Any, loop: asyncio.AbstractEventLoop):
        self._client = client
        self._loop = loop
        self._connack = asyncio.Event()
        self._connect_error: Optional[TransportError] = None
        self._pending_subacks: Dict[int, asyncio.Future] = {}

    async def subscribe(self, topic: str, qos: QoS) -> None:
        """Emite SUBSCRIBE y espera su SUBACK.

        Antes espera el CONNACK: paho no reenvía suscripciones hechas sin
        conexión.
        """
        await self._connack.wait()
        if self._connect_error is not None:
            raise self._connect_error

        result, mid = self._client.subscribe(topic, qos=int(qos))
        if result != mqtt.MQTT_ERR_SUCCESS:
            raise SubscribeError(
                f"subscribe to {topic!r} failed: {mqtt.error_string(result)}"
            )

        # Se registra antes de ceder el control: el SUBACK llega vía
        # call_soon_threadsafe y no puede adelantarse.
        ack = self._loop.create_future()
        self._pending_subacks[mid] = ack
        try:
            await ack
        finally:
            self._pending_subacks.pop(mid, None)

    def _on_connack(self, error: Optional[TransportError]) -> None:
        if self._connack.is_set():
            return
        self._connect_error = error
        self._connack.set()

    def _on_suback(self, mid: int, error: Optional[SubscribeError]) -> None:
        ack = self._pending_subacks.get(mid)
        if ack is None or ack.done():
            return
        if error is None:
            ack.set_result(None)
        else:
            ack.set_exception(error)

    def _fail_pending(self, error: TransportError) -> None:
        self._on_connack(error)
        for ack in self._pending_subacks.values():
            if not ack.done():
                ack.set_exception(error)


class Session:
    """Una conexión MQTT partida en command handle y poll handle.

    Se consume una sola vez: into_stream() se lleva el poll handle.
    """

    def __init__(self, client: Any, loop: asyncio.AbstractEventLoop, broker: str):
        self._client = client
        self._loop = loop
        self._broker = broker
        self._queue: "asyncio.Queue[Union[Event, TransportError]]" = asyncio.Queue()
        self._closed = False

        self.commands = CommandHandle(client, loop)
        self._poll: Optional[PollHandle] = PollHandle(self._queue)

    @classmethod
    def open(
        cls,
        config: SubscriptionConfig,
        client_factory: Optional[Callable[[SubscriptionConfig], Any]] = None,
    ) -> "Session":
        """Crea el cliente, registra callbacks y arranca la conexión."""
        loop = asyncio.get_running_loop()
        client = (client_factory or create_client)(config)
        options = config.options

        session = cls(client, loop, options.broker)
        client.on_connect = session._on_connect
        client.on_connect_fail = session._on_connect_fail
        client.on_disconnect = session._on_disconnect
        client.on_subscribe = session._on_subscribe
        client.on_unsubscribe = session._on_unsubscribe
        client.on_publish = session._on_publish
        client.on_message = session._on_message
        client.on_log = session._on_log

        logger.info(
            "[MQTT] Connecting to %s (client_id=%s)", options.broker, options.client_id
        )
        client.connect_async(options.host, options.port, keepalive=options.keepalive)
        client.loop_start()
        return session

    async def subscribe(self, topic: str, qos: QoS) -> None:
        await self.commands.subscribe(topic, qos)

    def into_stream(self, retries: int) -> PayloadStream:
        """Convierte la sesión en un PayloadStream dueño del poll handle."""
        if self._poll is None:
            raise SessionConsumedError("session already converted into a stream")
        # Se construye antes de soltar el handle: un retries inválido no consume la sesión
        stream = PayloadStream(self._poll, retries, on_close=self.close)
        self._poll = None
        return stream

    def close(self) -> None:
        """Desconecta y detiene el network loop. Idempotente."""
        if self._closed:
            return
        self._closed = True
        try:
            self._client.disconnect()
            self._client.loop_stop()
        except Exception as e:
            logger.warning("[MQTT] Error stopping client: %s", e)
        logger.info("[MQTT] Session to %s closed", self._broker)

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> "Session":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Callbacks de paho (network thread). Solo reenvían al event loop.
    # ------------------------------------------------------------------

    def _post(self, fn: Callable, *args) -> None:
        try:
            self._loop.call_soon_threadsafe(fn, *args)
        except RuntimeError:
            # Event loop cerrado: ya no hay consumidor
            logger.debug("[MQTT] Dropped callback after loop shutdown: %s", fn.__name__)

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code.is_failure:
            error = TransportError(f"connection to {self._broker} refused: {reason_code}")
            self._post(self._deliver_error, error)
        else:
            self._post(self.commands._on_connack, None)
            self._post(self._deliver, ControlEvent(CONNACK, str(reason_code)))

    def _on_connect_fail(self, client, userdata):
        error = TransportError(f"connection to {self._broker} failed")
        self._post(self._deliver_error, error)

    def _on_disconnect(self, client, userdata, disconnect_flags, reason_code, properties=None):
        if reason_code.is_failure:
            error = TransportError(f"disconnected from {self._broker}: {reason_code}")
            self._post(self._deliver_error, error)
        else:
            self._post(self._deliver, ControlEvent(DISCONNECT, str(reason_code)))

    def _on_subscribe(self, client, userdata, mid, reason_code_list, properties=None):
        failed = [str(rc) for rc in reason_code_list if rc.is_failure]
        error = SubscribeError(f"subscription rejected: {', '.join(failed)}") if failed else None
        self._post(self.commands._on_suback, mid, error)
        self._post(self._deliver, ControlEvent(SUBACK, str(mid)))

    def _on_unsubscribe(self, client, userdata, mid, reason_code_list, properties=None):
        self._post(self._deliver, ControlEvent(UNSUBACK, str(mid)))

    def _on_publish(self, client, userdata, mid, reason_code, properties=None):
        self._post(self._deliver, ControlEvent(PUBACK, str(mid)))

    def _on_message(self, client, userdata, message):
        event = PublishEvent(
            topic=message.topic,
            payload=bytes(message.payload),
            qos=message.qos,
            retain=bool(message.retain),
        )
        self._post(self._deliver, event)

    def _on_log(self, client, userdata, level, buf):
        logger.debug("[MQTT] paho: %s", buf)
        kind = _KEEPALIVE_LOG_LINES.get(buf)
        if kind is not None:
            self._post(self._deliver, ControlEvent(kind))

    # ------------------------------------------------------------------
    # Event loop
    # ------------------------------------------------------------------

    def _deliver(self, event: Event) -> None:
        self._queue.put_nowait(event)

    def _deliver_error(self, error: TransportError) -> None:
        logger.error("[MQTT] %s", error)
        self.commands._fail_pending(error)
        self._queue.put_nowait(error)
