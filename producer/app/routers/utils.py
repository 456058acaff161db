from __future__ import annotations

from fastapi import Request, Response
from pydantic import TypeAdapter, ValidationError

from producer.app.core.errors import ConnectionUnavailable, DeclarationConflict, PublishError

READINESS_TIMEOUT_DEFAULT = 5.0

_STRING_BODY = TypeAdapter(str)


class InvalidValueBody(ValueError):
    """Request body is not a single UTF-8 string."""


def readiness_timeout_seconds(request: Request) -> float:
    """Read readiness probe timeout from app.state.settings or default."""
    settings = getattr(request.app.state, "settings", None)
    if settings is not None:
        return getattr(settings, "readiness_timeout_seconds", READINESS_TIMEOUT_DEFAULT)
    return READINESS_TIMEOUT_DEFAULT


def _is_json(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


async def read_value(request: Request) -> str:
    """
    Extract the single string value from the request body.

    JSON bodies must be a string literal (``"hello"``); any other body is taken
    as raw UTF-8 text, so an empty text body is the empty string.
    """
    raw = await request.body()
    if _is_json(request.headers.get("content-type", "")):
        try:
            value = _STRING_BODY.validate_json(raw)
        except ValidationError as e:
            raise InvalidValueBody("Body must be a JSON string") from e
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise InvalidValueBody("Body is not valid UTF-8 text") from e
        return value
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidValueBody("Body is not valid UTF-8 text") from e


def publish_failure_response(error: PublishError | None) -> Response:
    """Map a publish failure to a server error. Nothing was enqueued in any of these cases."""
    if isinstance(error, ConnectionUnavailable):
        return Response(status_code=503, content="Broker connection unavailable")
    if isinstance(error, DeclarationConflict):
        return Response(status_code=500, content="Queue declaration conflict")
    return Response(status_code=503, content="Publish failed")


__all__ = [
    "InvalidValueBody",
    "readiness_timeout_seconds",
    "read_value",
    "publish_failure_response",
]
