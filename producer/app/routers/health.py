import asyncio

from typing import Any
from fastapi import APIRouter, Request, Response
from loguru import logger

from producer.app.core import SERVICE_NAME
from producer.app.core.errors import PublishError
from producer.app.ports.broker import BrokerConnection
from producer.app.routers.utils import readiness_timeout_seconds
from producer.app.services.publish_value import scoped_channel

health_router = APIRouter(tags=["Health"])

def _log_not_ready(reason: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event="readiness_failed", reason=reason, **kwargs).warning("")


async def _probe_channel(connection: BrokerConnection) -> None:
    async with scoped_channel(connection):
        pass


@health_router.get(
    "/health/live",
    summary="Liveness probe",
    description="Returns 200 if the producer process is running.",
    responses={200: {"description": "Service is alive."}},
)
async def live() -> dict:
    return {"status": "ok"}


@health_router.get(
    "/health/ready",
    summary="Readiness probe",
    description="Returns 200 only when the broker connection is open and can hand out a channel within the readiness timeout.",
    responses={
        200: {"description": "Broker connection is ready."},
        503: {"description": "Broker connection not ready."},
    },
)
async def ready(request: Request) -> Response:
    connection = getattr(request.app.state, "connection", None)
    if connection is None:
        _log_not_ready("components_not_initialized")
        return Response(status_code=503, content="Not ready")
    if not connection.ready:
        _log_not_ready("connection_not_ready")
        return Response(status_code=503, content="Broker connection not ready")

    try:
        await asyncio.wait_for(_probe_channel(connection), timeout=readiness_timeout_seconds(request))
    except asyncio.TimeoutError:
        _log_not_ready("channel_probe_timeout")
        return Response(status_code=503, content="Broker connection not ready")
    except PublishError as e:
        _log_not_ready("channel_probe_failed", error=str(e))
        return Response(status_code=503, content="Broker connection not ready")
    return Response(status_code=200, content="OK")
