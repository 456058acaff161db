"""Broker connection factory: selects implementation from config. Only place that imports concrete connections."""
from __future__ import annotations

from producer.app.config.settings import Settings
from producer.app.ports.broker import BrokerConnection
from producer.app.infrastructure.messaging.inmemory.in_memory_broker import InMemoryConnection
from producer.app.infrastructure.messaging.rabbitmq.rabbitmq_connection import RabbitMQConnection


def create_broker_connection(settings: Settings) -> BrokerConnection:
    backend = settings.broker_backend.strip().lower()

    if backend == "rabbitmq":
        return RabbitMQConnection(settings)

    if backend == "inmemory":
        return InMemoryConnection()

    raise ValueError(f"Unsupported broker backend: {backend}")
