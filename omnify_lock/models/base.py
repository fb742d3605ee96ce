"""Shared base model and timestamp helper for persisted lock artifacts.

Every persisted document (lock file, version chain) uses camelCase keys on
disk.  Python attributes stay snake_case; pydantic maps between the two via
an alias generator, and ``populate_by_name`` lets callers construct models
with either spelling.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class LockModel(BaseModel):
    """Base class for all camelCase-serialised models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_document(self, *, exclude_none: bool = True) -> dict[str, Any]:
        """Return the JSON-ready, camelCase dictionary form of this model."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=exclude_none)


def utc_now_iso() -> str:
    """Return the current UTC time as ISO-8601 with millisecond precision and a ``Z`` suffix."""
    now = datetime.now(UTC)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
