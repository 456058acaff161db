"""Domain models."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Messages are always published to the broker's default (nameless) exchange,
# which routes directly to the queue named by the routing key.
DEFAULT_EXCHANGE = ""


@dataclass(frozen=True)
class QueueDeclaration:
    """Parameters sent with queue.declare. The name doubles as the publish routing key."""

    name: str
    durable: bool = False
    exclusive: bool = False
    auto_delete: bool = False
    arguments: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("queue name must be a non-empty str")

    def matches(self, other: "QueueDeclaration") -> bool:
        """True when re-declaring ``other`` against this queue would be accepted by the broker."""
        return (
            self.durable == other.durable
            and self.exclusive == other.exclusive
            and self.auto_delete == other.auto_delete
            and (self.arguments or {}) == (other.arguments or {})
        )


@dataclass(frozen=True)
class OutgoingMessage:
    """Raw message body plus routing key. Carries no properties."""

    body: bytes
    routing_key: str

    @staticmethod
    def for_queue(value: str, declaration: QueueDeclaration) -> "OutgoingMessage":
        return OutgoingMessage(body=value.encode("utf-8"), routing_key=declaration.name)
