"""
Composition root: single place where concrete implementations are wired.

Builds settings, the shared broker connection and the queue declaration from
config; provides connect/close lifecycle. Used by lifespan to populate
app.state. Explicit wiring only, no DI container library.
"""

from producer.app.config.settings import Settings
from producer.app.domain.models import QueueDeclaration
from producer.app.infrastructure.messaging.factory import create_broker_connection
from producer.app.ports.broker import BrokerConnection


class AppDependencies:
    """Holds wired dependencies and their lifecycle. Built only in composition root."""

    def __init__(
        self,
        *,
        settings: Settings,
        connection: BrokerConnection,
        declaration: QueueDeclaration,
    ) -> None:
        self._settings = settings
        self._connection = connection
        self._declaration = declaration
        self._connected = False

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def connection(self) -> BrokerConnection:
        return self._connection

    @property
    def declaration(self) -> QueueDeclaration:
        return self._declaration

    async def connect(self) -> None:
        await self._connection.connect()
        self._connected = True

    async def close(self) -> None:
        if self._connected:
            await self._connection.close()
            self._connected = False


def create_app_dependencies(settings: Settings | None = None) -> AppDependencies:
    """
    Build all app dependencies in one place.
    Caller owns lifecycle (connect/close). The broker backend is selected from
    settings (broker_backend).
    """
    _settings = settings or Settings()
    return AppDependencies(
        settings=_settings,
        connection=create_broker_connection(_settings),
        declaration=QueueDeclaration(name=_settings.queue_name),
    )
