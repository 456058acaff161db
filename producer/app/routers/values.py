from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request, Response
from loguru import logger

from producer.app.constants import DEFAULT_QUEUE_NAME
from producer.app.core import SERVICE_NAME
from producer.app.domain.models import QueueDeclaration
from producer.app.routers.utils import InvalidValueBody, publish_failure_response, read_value
from producer.app.services.publish_value import publish_value


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


values_router = APIRouter(prefix="/values", tags=["Values"])

_VALUE_REQUEST_BODY = {
    "requestBody": {
        "required": False,
        "content": {
            "application/json": {"schema": {"type": "string"}, "example": "hello world"},
            "text/plain": {"schema": {"type": "string"}, "example": "hello world"},
        },
    }
}


@values_router.post(
    "",
    summary="Publish a value to the queue",
    description="Sends the body string, UTF-8 encoded, as one message to the configured queue via the default exchange. The queue is declared (non-durable, non-exclusive, not auto-deleted) before every publish. Fire-and-forget: no consumer acknowledgement is awaited.",
    openapi_extra=_VALUE_REQUEST_BODY,
    responses={
        200: {"description": "Message published. Empty body."},
        422: {"description": "Body is not a single UTF-8 string."},
        500: {"description": "Queue exists with incompatible parameters."},
        503: {"description": "Broker connection unavailable or publish failed."},
    },
)
async def post_value(request: Request) -> Response:
    connection = getattr(request.app.state, "connection", None)
    if connection is None:
        _log("publish_rejected", reason="connection_not_initialized")
        return Response(status_code=503, content="Broker connection unavailable")

    try:
        value = await read_value(request)
    except InvalidValueBody as e:
        return Response(status_code=422, content=str(e))

    declaration = getattr(request.app.state, "declaration", None) or QueueDeclaration(DEFAULT_QUEUE_NAME)
    outcome = await publish_value(value, connection, declaration=declaration)
    if outcome.success:
        _log("value_published", queue=outcome.queue, body_size=outcome.body_size)
        return Response(status_code=200)

    logger.bind(
        service_name=SERVICE_NAME,
        event="publish_failed",
        queue=outcome.queue,
        reason=outcome.reason,
        error=str(outcome.error),
    ).warning("")
    return publish_failure_response(outcome.error)
