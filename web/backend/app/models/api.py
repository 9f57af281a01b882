"""Pydantic models for API request/response serialization.

These models mirror the registry dataclasses and provide proper JSON
serialization for the FastAPI endpoints.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from modreg.registry.models import ContentStatus


# ---------------------------------------------------------------------------
# Content models
# ---------------------------------------------------------------------------


class SubmitContentRequest(BaseModel):
    """Request body for submitting content."""

    content_hash: str


class ContentResponse(BaseModel):
    """Mirrors modreg.registry.models.Content."""

    id: int
    author: str
    content_hash: str
    timestamp: str
    is_active: bool
    report_count: int
    status: ContentStatus
    needs_moderation: bool = False


class NeedsModerationResponse(BaseModel):
    content_id: int
    needs_moderation: bool


class ModerateContentRequest(BaseModel):
    """Request body for a moderator decision."""

    status: ContentStatus


# ---------------------------------------------------------------------------
# Report models
# ---------------------------------------------------------------------------


class ReportContentRequest(BaseModel):
    """Request body for reporting content."""

    reason: str


class ReportResponse(BaseModel):
    """Mirrors modreg.registry.models.Report."""

    id: int
    content_id: int
    reporter: str
    reason: str
    timestamp: str
    is_processed: bool = False


# ---------------------------------------------------------------------------
# Moderator models
# ---------------------------------------------------------------------------


class AddModeratorRequest(BaseModel):
    address: str


class ModeratorListResponse(BaseModel):
    owner: str
    moderators: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Event / webhook models
# ---------------------------------------------------------------------------


class JournalEntryResponse(BaseModel):
    """Mirrors modreg.events.journal.JournalEntry."""

    id: str
    sequence: int
    timestamp: str
    event: str
    actor: str = ""
    content_id: Optional[int] = None
    payload: dict[str, Any] = Field(default_factory=dict)


class EventExportResponse(BaseModel):
    format: str
    data: str
    count: int


class CreateWebhookRequest(BaseModel):
    url: str
    events: list[str] = Field(default_factory=list)
    secret: str = ""
    name: str = ""


class ToggleWebhookRequest(BaseModel):
    active: bool


class WebhookResponse(BaseModel):
    """Mirrors modreg.events.webhooks.Webhook (secret omitted)."""

    id: str
    name: str
    url: str
    events: list[str] = Field(default_factory=list)
    active: bool = True
    has_secret: bool = False
    created_at: str = ""
    updated_at: str = ""


class WebhookDeliveryResponse(BaseModel):
    """Mirrors modreg.events.webhooks.WebhookDelivery."""

    id: str
    webhook_id: str
    event: str
    payload: dict[str, Any] = Field(default_factory=dict)
    response_status: int = 0
    response_body: str = ""
    success: bool = False
    delivered_at: str = ""
    duration_ms: int = 0
