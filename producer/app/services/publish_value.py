"""
Accepts a plain string and the BrokerConnection abstraction; returns an outcome.
Router translates outcome to HTTP status codes and content.

Per call: open a channel, declare the queue, publish the UTF-8 body, close the
channel. The channel is released on every exit path. Nothing is retried.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator

from loguru import logger

from producer.app.core import SERVICE_NAME
from producer.app.core.errors import ConnectionUnavailable, PublishError
from producer.app.domain.models import OutgoingMessage, QueueDeclaration
from producer.app.ports.broker import BrokerChannel, BrokerConnection


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).warning("")


@dataclass(frozen=True)
class PublishValueOutcome:
    """Result of publish_value.
    success=True => body_size set.
    success=False => error set; nothing was enqueued.
    """
    success: bool
    queue: str
    body_size: int | None = None
    error: PublishError | None = None

    @property
    def reason(self) -> str | None:
        return self.error.reason if self.error is not None else None


async def _release(channel: BrokerChannel) -> None:
    if channel.is_closed:
        return
    try:
        await channel.close()
    except Exception as e:
        # A failed close does not replace the publish result.
        _log("channel_release_failed", reason=str(e))


@asynccontextmanager
async def scoped_channel(connection: BrokerConnection) -> AsyncIterator[BrokerChannel]:
    """Open a channel for the duration of the block and close it on exit, however the block ends."""
    if not connection.ready:
        raise ConnectionUnavailable("broker connection is not ready")
    channel = await connection.channel()
    try:
        yield channel
    finally:
        await _release(channel)


async def publish_value(
    value: str,
    connection: BrokerConnection,
    *,
    declaration: QueueDeclaration,
) -> PublishValueOutcome:
    """
    Publish ``value`` to ``declaration.name`` through the default exchange.
    Declaration and routing key come from the same object so they cannot diverge.
    Raises UnicodeEncodeError before touching the broker if ``value`` has no UTF-8 form.
    """
    message = OutgoingMessage.for_queue(value, declaration)
    try:
        async with scoped_channel(connection) as channel:
            await channel.declare_queue(declaration)
            await channel.publish(message)
    except PublishError as e:
        return PublishValueOutcome(success=False, queue=declaration.name, error=e)
    return PublishValueOutcome(success=True, queue=declaration.name, body_size=len(message.body))
