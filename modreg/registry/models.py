"""Registry data models — content records and reports."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

# Distinct reports that move Active content to UnderReview
REPORT_THRESHOLD = 3


class ContentStatus(str, Enum):
    """Moderation status of a content record."""

    Active = "Active"
    UnderReview = "UnderReview"
    Flagged = "Flagged"
    Removed = "Removed"

    @property
    def ordinal(self) -> int:
        """Return the numeric enum code (declaration order) used by indexers."""
        return {
            ContentStatus.Active: 0,
            ContentStatus.UnderReview: 1,
            ContentStatus.Flagged: 2,
            ContentStatus.Removed: 3,
        }[self]

    @classmethod
    def parse(cls, value: str | int | ContentStatus) -> ContentStatus:
        """Accept a member, its name, or its ordinal."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            for member in cls:
                if member.ordinal == value:
                    return member
            raise ValueError(f"Unknown content status code: {value}")
        return cls(value)

    @property
    def needs_moderation(self) -> bool:
        return self in (ContentStatus.UnderReview, ContentStatus.Flagged)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Content:
    """A registered reference to off-system data."""

    id: int
    author: str
    content_hash: str
    timestamp: str = ""
    is_active: bool = True
    report_count: int = 0
    status: ContentStatus = ContentStatus.Active

    def __post_init__(self) -> None:
        if not self.timestamp:
            self.timestamp = utc_now()
        if not isinstance(self.status, ContentStatus):
            self.status = ContentStatus.parse(self.status)


@dataclass
class Report:
    """A complaint filed by one identity against one content record."""

    id: int
    content_id: int
    reporter: str
    reason: str
    timestamp: str = ""
    is_processed: bool = False  # never transitioned

    def __post_init__(self) -> None:
        if not self.timestamp:
            self.timestamp = utc_now()
