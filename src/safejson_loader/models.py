"""Pydantic records returned to callers and passed to hooks.

Contains ``LoadedFile`` (one per successfully loaded document) and
``SkippedFile`` (handed to ``on_file_skipped`` when a size policy excludes a
file).  Both are frozen: assigning to a field raises.
"""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, ConfigDict

JsonValue = Union[None, bool, int, float, str, list[Any], dict[str, Any]]
"""A parsed JSON value.  Containers hold further ``JsonValue`` items."""


class LoadedFile(BaseModel):
    """A sanitized JSON document and where it came from."""

    model_config = ConfigDict(frozen=True)

    name: str
    data: Any
    source: str


class SkippedFile(BaseModel):
    """A file excluded by a size limit before any content was read."""

    model_config = ConfigDict(frozen=True)

    source: str
    reason: str
