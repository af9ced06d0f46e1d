"""Helpers shared across ORM models."""
from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp with microsecond precision."""

    return datetime.now(timezone.utc)


__all__ = ["utcnow"]
