"""Tests for registry data models and events."""

import pytest

from modreg.registry.events import (
    EVENT_NAMES,
    ContentModerated,
    ContentReported,
    ContentSubmitted,
    ModeratorAdded,
    ModeratorRemoved,
)
from modreg.registry.models import REPORT_THRESHOLD, Content, ContentStatus, Report


def test_report_threshold():
    assert REPORT_THRESHOLD == 3


def test_content_status_ordinals():
    assert [s.ordinal for s in ContentStatus] == [0, 1, 2, 3]
    assert [s.value for s in ContentStatus] == ["Active", "UnderReview", "Flagged", "Removed"]


def test_content_status_parse():
    assert ContentStatus.parse("Flagged") == ContentStatus.Flagged
    assert ContentStatus.parse(3) == ContentStatus.Removed
    assert ContentStatus.parse(ContentStatus.Active) == ContentStatus.Active
    with pytest.raises(ValueError):
        ContentStatus.parse("Hidden")
    with pytest.raises(ValueError):
        ContentStatus.parse(4)


def test_needs_moderation_statuses():
    assert not ContentStatus.Active.needs_moderation
    assert ContentStatus.UnderReview.needs_moderation
    assert ContentStatus.Flagged.needs_moderation
    assert not ContentStatus.Removed.needs_moderation


def test_content_defaults():
    c = Content(id=1, author="0xA", content_hash="QmAbc")
    assert c.is_active is True
    assert c.report_count == 0
    assert c.status == ContentStatus.Active
    assert c.timestamp  # filled in


def test_content_status_from_string():
    c = Content(id=1, author="0xA", content_hash="QmAbc", status="UnderReview")
    assert c.status == ContentStatus.UnderReview


def test_report_defaults():
    r = Report(id=1, content_id=1, reporter="0xB", reason="spam")
    assert r.is_processed is False
    assert r.timestamp


def test_event_payload_field_order():
    assert list(ContentSubmitted(1, "0xA", "QmAbc").to_payload().items()) == [
        ("contentId", 1),
        ("author", "0xA"),
        ("contentHash", "QmAbc"),
    ]
    assert list(ContentReported(1, "0xB", "spam").to_payload()) == [
        "contentId",
        "reporter",
        "reason",
    ]
    payload = ContentModerated(1, ContentStatus.Removed, "0xM").to_payload()
    assert list(payload) == ["contentId", "newStatus", "moderator"]
    assert payload["newStatus"] == "Removed"
    assert ModeratorAdded("0xM").to_payload() == {"moderator": "0xM"}
    assert ModeratorRemoved("0xM").to_payload() == {"moderator": "0xM"}


def test_event_names():
    assert EVENT_NAMES == [
        "ContentSubmitted",
        "ContentReported",
        "ContentModerated",
        "ModeratorAdded",
        "ModeratorRemoved",
    ]
