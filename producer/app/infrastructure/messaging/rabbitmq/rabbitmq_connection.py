"""
RabbitMQ connection: the single long-lived broker connection shared by all requests.

Lifecycle:
  DISCONNECTED -> CONNECTING (backoff) -> READY.
  On broker disconnect: READY -> RECONNECTING; aio_pika's robust connection
  reconnects on its own and the reconnect callback moves us back to READY.
  On shutdown: CLOSING -> close connection -> CLOSED.

Channels are never cached here. Each call to channel() opens a fresh one that
the caller owns and must close.
"""
from __future__ import annotations

from typing import Any
from urllib.parse import quote

import aio_pika
from aio_pika.abc import AbstractRobustConnection
from loguru import logger

from producer.app.config.settings import Settings
from producer.app.core import SERVICE_NAME
from producer.app.core.backoff import exponential_backoff
from producer.app.core.errors import ConnectionUnavailable
from producer.app.infrastructure.messaging.rabbitmq.aio_pika_channel_adapter import AioPikaChannelAdapter
from producer.app.infrastructure.messaging.rabbitmq.constants import ConnectionState


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class RabbitMQConnection:
    """BrokerConnection implementation"""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._state = ConnectionState.DISCONNECTED
        self._connection: AbstractRobustConnection | None = None
        self._closing = False

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def ready(self) -> bool:
        if self._state != ConnectionState.READY or self._connection is None:
            return False
        return not self._connection.is_closed

    def _set_state(self, state: ConnectionState) -> None:
        self._state = state

    def _build_amqp_url(self) -> str:
        vhost = self._settings.broker_vhost
        path = "" if vhost in ("", "/") else quote(vhost, safe="")
        return (
            f"amqp://{quote(self._settings.broker_user, safe='')}:{quote(self._settings.broker_password, safe='')}"
            f"@{self._settings.broker_host}:{self._settings.broker_port}/{path}"
        )

    def _register_callbacks(self, connection: AbstractRobustConnection) -> None:
        connection.close_callbacks.add(self._on_connection_closed)
        connection.reconnect_callbacks.add(self._on_reconnected)

    def _on_connection_closed(self, *args: Any, **kwargs: Any) -> None:
        if self._closing:
            return
        self._set_state(ConnectionState.RECONNECTING)
        _log("broker_disconnect_detected")

    def _on_reconnected(self, *args: Any, **kwargs: Any) -> None:
        if self._closing:
            return
        self._set_state(ConnectionState.READY)
        _log("rmq_reconnected")

    async def connect(self) -> None:
        self._set_state(ConnectionState.CONNECTING)
        max_attempts = self._settings.max_connection_attempts
        async for attempt, delay in exponential_backoff(
            self._settings.initial_backoff_seconds,
            self._settings.max_backoff_seconds,
            self._settings.backoff_multiplier,
            max_attempts,
        ):
            _log("rmq_connect_attempt", attempt=attempt, delay=delay)
            try:
                self._connection = await aio_pika.connect_robust(self._build_amqp_url())
            except Exception as e:
                logger.warning("rmq connect failed: {}", e)
                if attempt >= max_attempts:
                    _log("rmq_connect_failed", attempt=attempt)
                    self._set_state(ConnectionState.DISCONNECTED)
                    raise
                continue
            self._register_callbacks(self._connection)
            self._set_state(ConnectionState.READY)
            _log("rmq_connected", host=self._settings.broker_host, port=self._settings.broker_port)
            return
        self._set_state(ConnectionState.DISCONNECTED)
        raise ConnectionUnavailable("no connection attempts configured", reason="rmq_connect_failed")

    async def channel(self) -> AioPikaChannelAdapter:
        connection = self._connection
        if connection is None or not self.ready:
            raise ConnectionUnavailable(f"broker connection is {self._state.value.lower()}")
        try:
            channel = await connection.channel(publisher_confirms=False)
        except Exception as e:
            raise ConnectionUnavailable(str(e) or "channel_open_failed") from e
        return AioPikaChannelAdapter(channel)

    async def close(self) -> None:
        self._closing = True
        self._set_state(ConnectionState.CLOSING)
        _log("connection_shutdown")
        if self._connection is not None:
            try:
                await self._connection.close()
            except Exception as e:
                logger.warning("connection close failed: {}", e)
            self._connection = None
        self._set_state(ConnectionState.CLOSED)
