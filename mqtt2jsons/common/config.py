from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mqtt2jsons.core.domain.subscription_config import (
    CAP_DEFAULT,
    DEFAULT_CLIENT_ID,
    DEFAULT_HOST,
    DEFAULT_KEEPALIVE,
    DEFAULT_PORT,
    RETRIES_DEFAULT,
    ConnectionOptions,
    QoS,
    SubscriptionConfig,
)
from mqtt2jsons.core.errors import ConfigError

logger = logging.getLogger(__name__)

# campo del modelo -> variable de entorno
ENV_VARS: Dict[str, str] = {
    "client_id": "MQTT_CLIENT_ID",
    "topic": "MQTT_TOPIC",
    "host_ip": "MQTT_HOST_IP",
    "host_port": "MQTT_HOST_PORT",
    "username": "MQTT_USERNAME",
    "password": "MQTT_PASSWORD",
    "qos": "MQTT_QOS",
    "retries": "MQTT_RETRIES",
    "capacity": "MQTT_CAPACITY",
    "keepalive": "MQTT_KEEPALIVE",
}


def _default_env_file() -> str:
    return os.getenv("MQTT2JSONS_ENV_FILE", ".env")


class MqttSettings(BaseModel):
    """Parámetros de conexión tal como llegan del entorno."""

    model_config = ConfigDict(frozen=True)

    client_id: str = Field(default=DEFAULT_CLIENT_ID, min_length=1)
    topic: str = Field(min_length=1)
    host_ip: str = Field(default=DEFAULT_HOST, min_length=1)
    host_port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)
    username: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)
    # El CLI suscribe con at-least-once por defecto
    qos: int = Field(default=int(QoS.AT_LEAST_ONCE), ge=0, le=2)
    retries: int = Field(default=RETRIES_DEFAULT, ge=1)
    capacity: int = Field(default=CAP_DEFAULT, ge=1)
    keepalive: int = Field(default=DEFAULT_KEEPALIVE, ge=1)

    def to_options(self) -> ConnectionOptions:
        return (
            ConnectionOptions(
                keepalive=self.keepalive,
                username=self.username,
                password=self.password,
            )
            .with_client_id(self.client_id)
            .with_host(self.host_ip)
            .with_port(self.host_port)
        )

    def to_subscription(self) -> SubscriptionConfig:
        return SubscriptionConfig(
            options=self.to_options(),
            topic=self.topic,
            retries=self.retries,
            qos=QoS(self.qos),
            capacity=self.capacity,
        )


def _describe(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        field = item["loc"][0] if item["loc"] else ""
        var = ENV_VARS.get(str(field), str(field))
        problems.append(f"{var} not set or invalid: {item['msg']}")
    return "; ".join(problems)


def get_settings(
    env_file: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> MqttSettings:
    """Lee y valida los parámetros MQTT.

    El archivo .env (si existe) aporta valores por defecto; las variables de
    entorno reales tienen prioridad. Las variables vacías cuentan como no
    definidas.
    """
    if environ is None:
        environ = os.environ

    values: Dict[str, Optional[str]] = {}
    env_file = env_file or _default_env_file()
    if env_file and Path(env_file).exists():
        logger.info("[CONFIG] Loading %s", env_file)
        values.update(dotenv_values(env_file))
    values.update(environ)

    raw = {}
    for field, var in ENV_VARS.items():
        value = values.get(var)
        if value:
            raw[field] = value

    try:
        return MqttSettings.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(_describe(e)) from e
