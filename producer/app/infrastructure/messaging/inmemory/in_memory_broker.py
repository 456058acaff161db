"""In-memory broker for tests and local mode.

Mimics the parts of AMQP 0-9-1 the producer relies on: idempotent queue
declaration with conflict detection, default-exchange routing by queue name,
channel-closing on a declaration conflict. Messages are only held in memory;
no consumer is provided.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from producer.app.core.errors import ConnectionUnavailable, DeclarationConflict, PublishTransportError
from producer.app.domain.models import OutgoingMessage, QueueDeclaration


@dataclass
class InMemoryQueue:
    declaration: QueueDeclaration
    messages: list[bytes] = field(default_factory=list)


class InMemoryBroker:
    def __init__(self) -> None:
        self.queues: dict[str, InMemoryQueue] = {}

    def declare(self, declaration: QueueDeclaration) -> InMemoryQueue:
        existing = self.queues.get(declaration.name)
        if existing is None:
            existing = self.queues[declaration.name] = InMemoryQueue(declaration)
            return existing
        if not existing.declaration.matches(declaration):
            raise DeclarationConflict(
                f"PRECONDITION_FAILED - inequivalent arg for queue '{declaration.name}'"
            )
        return existing

    def route(self, message: OutgoingMessage) -> None:
        queue = self.queues.get(message.routing_key)
        # Default exchange drops unroutable messages when mandatory is not set.
        if queue is not None:
            queue.messages.append(message.body)

    def messages(self, queue_name: str) -> list[bytes]:
        queue = self.queues.get(queue_name)
        return list(queue.messages) if queue else []


class InMemoryChannel:
    def __init__(self, broker: InMemoryBroker, on_close: Callable[[InMemoryChannel], None] | None = None) -> None:
        self._broker = broker
        self._on_close = on_close
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise PublishTransportError("channel is closed", reason="channel_closed")

    def _mark_closed(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            self._on_close(self)

    async def declare_queue(self, declaration: QueueDeclaration) -> None:
        self._ensure_open()
        try:
            self._broker.declare(declaration)
        except DeclarationConflict:
            # A channel-level protocol error closes the channel on a real broker too.
            self._mark_closed()
            raise

    async def publish(self, message: OutgoingMessage) -> None:
        self._ensure_open()
        self._broker.route(message)

    async def close(self) -> None:
        self._mark_closed()


class InMemoryConnection:
    """BrokerConnection over an InMemoryBroker.

    ``channels`` holds only the channels still open; a closed channel drops
    out. ``channels_opened`` counts every channel handed out.
    """

    def __init__(self, broker: InMemoryBroker | None = None) -> None:
        self.broker = broker or InMemoryBroker()
        self.channels: list[InMemoryChannel] = []
        self.channels_opened = 0
        self._open = False

    @property
    def ready(self) -> bool:
        return self._open

    async def connect(self) -> None:
        self._open = True

    async def channel(self) -> InMemoryChannel:
        if not self._open:
            raise ConnectionUnavailable("in-memory connection is closed")
        channel = InMemoryChannel(self.broker, on_close=self._forget)
        self.channels.append(channel)
        self.channels_opened += 1
        return channel

    def _forget(self, channel: InMemoryChannel) -> None:
        self.channels.remove(channel)

    async def close(self) -> None:
        self._open = False
        for channel in list(self.channels):
            await channel.close()
