"""Producer-level constants shared across modules."""
from __future__ import annotations

DEFAULT_QUEUE_NAME = "hello"
