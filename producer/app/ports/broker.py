"""Port: broker connection and channel contract. Implementations live in infrastructure.

Implementations raise the types in ``producer.app.core.errors`` rather than
broker client exceptions.
"""
from __future__ import annotations

from typing import Protocol

from producer.app.domain.models import OutgoingMessage, QueueDeclaration


class BrokerChannel(Protocol):
    """Single-use session on a connection."""

    @property
    def is_closed(self) -> bool: ...

    async def declare_queue(self, declaration: QueueDeclaration) -> None: ...

    async def publish(self, message: OutgoingMessage) -> None: ...

    async def close(self) -> None: ...


class BrokerConnection(Protocol):
    """Long-lived, shared connection. Owned by the composition root."""

    @property
    def ready(self) -> bool: ...

    async def connect(self) -> None: ...

    async def channel(self) -> BrokerChannel:
        """Open a new channel. Raises ConnectionUnavailable when the connection cannot provide one."""
        ...

    async def close(self) -> None: ...
