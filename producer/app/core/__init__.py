"""Shared core: service identity used in structured log records."""

SERVICE_NAME = "producer"
