"""Notification events emitted by state-changing registry operations.

Event names, field names and field order are fixed: indexers consume the
payloads produced by :meth:`Event.to_payload` verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from modreg.registry.models import ContentStatus


@dataclass(frozen=True)
class Event:
    """Base class for registry notifications."""

    name: ClassVar[str] = ""
    # (python attribute, wire field) in wire order
    wire_fields: ClassVar[tuple[tuple[str, str], ...]] = ()

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for attr, wire in self.wire_fields:
            value = getattr(self, attr)
            payload[wire] = value.value if isinstance(value, ContentStatus) else value
        return payload


@dataclass(frozen=True)
class ContentSubmitted(Event):
    name: ClassVar[str] = "ContentSubmitted"
    wire_fields: ClassVar[tuple[tuple[str, str], ...]] = (
        ("content_id", "contentId"),
        ("author", "author"),
        ("content_hash", "contentHash"),
    )

    content_id: int
    author: str
    content_hash: str


@dataclass(frozen=True)
class ContentReported(Event):
    name: ClassVar[str] = "ContentReported"
    wire_fields: ClassVar[tuple[tuple[str, str], ...]] = (
        ("content_id", "contentId"),
        ("reporter", "reporter"),
        ("reason", "reason"),
    )

    content_id: int
    reporter: str
    reason: str


@dataclass(frozen=True)
class ContentModerated(Event):
    name: ClassVar[str] = "ContentModerated"
    wire_fields: ClassVar[tuple[tuple[str, str], ...]] = (
        ("content_id", "contentId"),
        ("new_status", "newStatus"),
        ("moderator", "moderator"),
    )

    content_id: int
    new_status: ContentStatus
    moderator: str


@dataclass(frozen=True)
class ModeratorAdded(Event):
    name: ClassVar[str] = "ModeratorAdded"
    wire_fields: ClassVar[tuple[tuple[str, str], ...]] = (("moderator", "moderator"),)

    moderator: str


@dataclass(frozen=True)
class ModeratorRemoved(Event):
    name: ClassVar[str] = "ModeratorRemoved"
    wire_fields: ClassVar[tuple[tuple[str, str], ...]] = (("moderator", "moderator"),)

    moderator: str


EVENT_NAMES = [
    ContentSubmitted.name,
    ContentReported.name,
    ContentModerated.name,
    ModeratorAdded.name,
    ModeratorRemoved.name,
]
