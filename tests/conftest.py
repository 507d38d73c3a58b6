"""Fixtures compartidos: poll handles guionados y un cliente paho falso."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any, Iterable, List
from unittest.mock import MagicMock

import paho.mqtt.client as mqtt
import pytest

from mqtt2jsons.core.domain.events import ControlEvent, PublishEvent
from mqtt2jsons.core.domain.subscription_config import ConnectionOptions, SubscriptionConfig


class ScriptedPollHandle:
    """Devuelve eventos de una lista; las excepciones de la lista se lanzan."""

    def __init__(self, script: Iterable[Any]):
        self._script: List[Any] = list(script)
        self.polls = 0

    async def poll(self):
        self.polls += 1
        if not self._script:
            raise AssertionError("poll() called past the end of the script")
        item = self._script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


class QueuePollHandle:
    """Poll handle que bloquea hasta que el test entrega un evento."""

    def __init__(self):
        self.queue: asyncio.Queue = asyncio.Queue()

    async def poll(self):
        return await self.queue.get()


class FakeReasonCode:
    def __init__(self, name: str = "Success", is_failure: bool = False):
        self.name = name
        self.is_failure = is_failure

    def __str__(self) -> str:
        return self.name


def control(kind: str = "PINGRESP") -> ControlEvent:
    return ControlEvent(kind)


def publish(text: str, topic: str = "sensors/1") -> PublishEvent:
    return PublishEvent(topic=topic, payload=text.encode("utf-8"))


def mqtt_message(payload: bytes, topic: str = "sensors/1", qos: int = 1):
    return SimpleNamespace(topic=topic, payload=payload, qos=qos, retain=0)


async def drain_loop(rounds: int = 10) -> None:
    """Deja correr los callbacks encolados con call_soon_threadsafe."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def options() -> ConnectionOptions:
    return ConnectionOptions(client_id="test-client", host="broker.local", port=1884)


@pytest.fixture
def subscription(options) -> SubscriptionConfig:
    return SubscriptionConfig(options=options, topic="sensors/+/readings", retries=3)


@pytest.fixture
def fake_client() -> MagicMock:
    """Cliente paho falso: subscribe() acepta y devuelve mid=7."""
    client = MagicMock(name="paho_client")
    client.subscribe.return_value = (mqtt.MQTT_ERR_SUCCESS, 7)
    return client
