"""Unit tests for publish_value: ordering, scoped channel release, fault isolation, error reporting."""
from __future__ import annotations

import pytest

from producer.app.core.errors import (
    ConnectionUnavailable,
    DeclarationConflict,
    PublishError,
    PublishTransportError,
)
from producer.app.domain.models import QueueDeclaration
from producer.app.services.publish_value import publish_value, scoped_channel
from tests.conftest import FakeConnection

HELLO = QueueDeclaration(name="hello")


@pytest.mark.asyncio
async def test_declare_precedes_publish_on_same_queue_name():
    connection = FakeConnection()

    outcome = await publish_value("hello world", connection, declaration=HELLO)

    assert outcome.success is True
    assert outcome.queue == "hello"
    assert outcome.body_size == len(b"hello world")
    channel = connection.channels[0]
    (declare_name, declared), (publish_name, published) = channel.calls
    assert (declare_name, publish_name) == ("declare", "publish")
    assert declared is HELLO
    assert published.routing_key == declared.name
    assert channel.close_calls == 1


@pytest.mark.asyncio
async def test_empty_value_is_published_as_zero_length_body():
    connection = FakeConnection()
    outcome = await publish_value("", connection, declaration=HELLO)
    assert outcome.success is True
    assert outcome.body_size == 0
    assert connection.channels[0].published[0].body == b""


@pytest.mark.asyncio
async def test_not_ready_connection_creates_no_channel():
    connection = FakeConnection(ready=False)

    outcome = await publish_value("x", connection, declaration=HELLO)

    assert outcome.success is False
    assert isinstance(outcome.error, ConnectionUnavailable)
    assert outcome.reason == "connection_unavailable"
    assert connection.channel_requests == 0


@pytest.mark.asyncio
async def test_channel_open_failure_reports_connection_unavailable():
    connection = FakeConnection(channel_raises=ConnectionUnavailable("connection reset"))

    outcome = await publish_value("x", connection, declaration=HELLO)

    assert outcome.success is False
    assert isinstance(outcome.error, ConnectionUnavailable)
    assert connection.channels == []


@pytest.mark.asyncio
async def test_declaration_conflict_skips_publish_and_releases_channel():
    connection = FakeConnection(declare_raises=DeclarationConflict("inequivalent arg 'durable'"))

    outcome = await publish_value("x", connection, declaration=HELLO)

    assert outcome.success is False
    assert isinstance(outcome.error, DeclarationConflict)
    channel = connection.channels[0]
    assert channel.published == []
    assert channel.close_calls == 1


@pytest.mark.asyncio
async def test_channel_closed_by_broker_is_not_closed_again():
    connection = FakeConnection(
        declare_raises=DeclarationConflict("PRECONDITION_FAILED"),
        closed_by_broker_on_error=True,
    )

    outcome = await publish_value("x", connection, declaration=HELLO)

    assert isinstance(outcome.error, DeclarationConflict)
    assert connection.channels[0].close_calls == 0


@pytest.mark.asyncio
async def test_publish_failure_releases_channel():
    connection = FakeConnection(publish_raises=PublishTransportError("channel closed mid-publish"))

    outcome = await publish_value("x", connection, declaration=HELLO)

    assert outcome.success is False
    assert isinstance(outcome.error, PublishTransportError)
    assert connection.channels[0].close_calls == 1


@pytest.mark.asyncio
async def test_release_failure_does_not_replace_success():
    connection = FakeConnection(close_raises=RuntimeError("close frame lost"))

    outcome = await publish_value("x", connection, declaration=HELLO)

    assert outcome.success is True
    assert connection.channels[0].close_calls == 1


@pytest.mark.asyncio
async def test_release_failure_does_not_replace_publish_error():
    connection = FakeConnection(
        publish_raises=PublishTransportError("boom"),
        close_raises=RuntimeError("close frame lost"),
    )

    outcome = await publish_value("x", connection, declaration=HELLO)

    assert isinstance(outcome.error, PublishTransportError)
    assert str(outcome.error) == "boom"


@pytest.mark.asyncio
async def test_unexpected_error_propagates_after_release():
    connection = FakeConnection(publish_raises=KeyError("not a publish error"))

    with pytest.raises(KeyError):
        await publish_value("x", connection, declaration=HELLO)

    assert connection.channels[0].close_calls == 1


@pytest.mark.asyncio
async def test_value_without_utf8_form_fails_before_touching_broker():
    connection = FakeConnection()

    with pytest.raises(UnicodeEncodeError):
        await publish_value("\ud800", connection, declaration=HELLO)

    assert connection.channel_requests == 0


@pytest.mark.asyncio
async def test_scoped_channel_releases_on_exception_inside_block():
    connection = FakeConnection()

    with pytest.raises(ValueError):
        async with scoped_channel(connection):
            raise ValueError("caller bug")

    assert connection.channels[0].close_calls == 1


def test_publish_error_reason_override():
    err = PublishTransportError("x", reason="declare_failed")
    assert err.reason == "declare_failed"
    assert PublishTransportError("y").reason == "publish_transport_error"
    assert isinstance(err, PublishError)
    assert str(ConnectionUnavailable()) == "connection_unavailable"
