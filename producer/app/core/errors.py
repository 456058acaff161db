"""Publish failure taxonomy.

Infrastructure adapters translate broker client exceptions into these types
(chaining the original as ``__cause__``); the service reports them as an
outcome and routers map them to HTTP status codes.
"""
from __future__ import annotations


class PublishError(Exception):
    """Base error for a failed publish. ``reason`` is a short machine-readable tag."""

    reason = "publish_error"

    def __init__(self, message: str = "", *, reason: str | None = None) -> None:
        super().__init__(message or self.reason)
        if reason is not None:
            self.reason = reason


class ConnectionUnavailable(PublishError):
    """The shared broker connection cannot produce a channel."""

    reason = "connection_unavailable"


class DeclarationConflict(PublishError):
    """The queue already exists with incompatible parameters."""

    reason = "declaration_conflict"


class PublishTransportError(PublishError):
    """Channel-level failure while declaring or publishing."""

    reason = "publish_transport_error"
