"""Normalization for incoming plan requests."""

from __future__ import annotations

from datetime import date
from typing import Any


def normalize_request(payload: dict[str, Any], *, today: date | None = None) -> dict[str, Any]:
    """Return a normalized copy of the request.

    Fills ``schema_version`` and, when absent, ``current_date`` with today.
    """

    normalized = dict(payload)
    normalized.setdefault("schema_version", "1.0")
    if not normalized.get("current_date"):
        normalized["current_date"] = (today or date.today()).isoformat()
    return normalized
