from __future__ import annotations

import asyncio
from typing import Any

import pytest
from fastapi import FastAPI

from producer.app.domain.models import OutgoingMessage, QueueDeclaration
from producer.app.routers.health import health_router
from producer.app.routers.values import values_router


class FakeChannel:
    """Implements BrokerChannel for tests; records every call in order."""

    def __init__(
        self,
        *,
        declare_raises: Exception | None = None,
        publish_raises: Exception | None = None,
        close_raises: Exception | None = None,
        closed_by_broker_on_error: bool = False,
    ) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.close_calls = 0
        self._closed = False
        self._declare_raises = declare_raises
        self._publish_raises = publish_raises
        self._close_raises = close_raises
        self._closed_by_broker_on_error = closed_by_broker_on_error

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def declared(self) -> list[QueueDeclaration]:
        return [arg for name, arg in self.calls if name == "declare"]

    @property
    def published(self) -> list[OutgoingMessage]:
        return [arg for name, arg in self.calls if name == "publish"]

    async def declare_queue(self, declaration: QueueDeclaration) -> None:
        self.calls.append(("declare", declaration))
        if self._declare_raises is not None:
            if self._closed_by_broker_on_error:
                self._closed = True
            raise self._declare_raises

    async def publish(self, message: OutgoingMessage) -> None:
        self.calls.append(("publish", message))
        if self._publish_raises is not None:
            raise self._publish_raises

    async def close(self) -> None:
        self.close_calls += 1
        if self._close_raises is not None:
            raise self._close_raises
        self._closed = True


class FakeConnection:
    """Implements BrokerConnection for tests. Each channel() call builds a FakeChannel from channel_kwargs."""

    def __init__(
        self,
        *,
        ready: bool = True,
        channel_raises: Exception | None = None,
        channel_delay: float = 0.0,
        **channel_kwargs: Any,
    ) -> None:
        self._ready = ready
        self._channel_raises = channel_raises
        self._channel_delay = channel_delay
        self._channel_kwargs = channel_kwargs
        self.channel_requests = 0
        self.channels: list[FakeChannel] = []

    @property
    def ready(self) -> bool:
        return self._ready

    async def connect(self) -> None:
        self._ready = True

    async def channel(self) -> FakeChannel:
        self.channel_requests += 1
        if self._channel_delay:
            await asyncio.sleep(self._channel_delay)
        if self._channel_raises is not None:
            raise self._channel_raises
        channel = FakeChannel(**self._channel_kwargs)
        self.channels.append(channel)
        return channel

    async def close(self) -> None:
        self._ready = False


@pytest.fixture()
def test_app() -> FastAPI:
    app = FastAPI()
    app.state.connection = FakeConnection()
    app.state.declaration = QueueDeclaration(name="hello")
    app.include_router(health_router)
    app.include_router(values_router)
    return app
