"""Adapter: wrap an aio_pika channel to implement ports.broker.BrokerChannel."""
from __future__ import annotations

import aio_pika
from aio_pika.abc import AbstractChannel

from producer.app.core.errors import DeclarationConflict, PublishTransportError
from producer.app.domain.models import OutgoingMessage, QueueDeclaration


class AioPikaChannelAdapter:
    """Translates aio_pika / aiormq exceptions into the publish error taxonomy."""

    def __init__(self, channel: AbstractChannel) -> None:
        self._channel = channel

    @property
    def is_closed(self) -> bool:
        return self._channel.is_closed

    async def declare_queue(self, declaration: QueueDeclaration) -> None:
        try:
            await self._channel.declare_queue(
                declaration.name,
                durable=declaration.durable,
                exclusive=declaration.exclusive,
                auto_delete=declaration.auto_delete,
                arguments=declaration.arguments,
            )
        except aio_pika.exceptions.ChannelPreconditionFailed as e:
            raise DeclarationConflict(str(e)) from e
        except Exception as e:
            raise PublishTransportError(str(e), reason="declare_failed") from e

    async def publish(self, message: OutgoingMessage) -> None:
        try:
            await self._channel.default_exchange.publish(
                aio_pika.Message(message.body),
                routing_key=message.routing_key,
                mandatory=False,
            )
        except Exception as e:
            raise PublishTransportError(str(e)) from e

    async def close(self) -> None:
        await self._channel.close()
