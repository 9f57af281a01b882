"""Moderation router -- content submission, reports, decisions, and moderators.

Prefix: ``/api``

Routes are plain functions; FastAPI runs them in its threadpool, so
registry locking and webhook delivery never stall the event loop.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, status

from modreg.bootstrap import Services
from modreg.registry.models import Content, ContentStatus, Report
from web.backend.app.middleware.auth import get_caller
from web.backend.app.models.api import (
    AddModeratorRequest,
    ContentResponse,
    ModerateContentRequest,
    ModeratorListResponse,
    NeedsModerationResponse,
    ReportContentRequest,
    ReportResponse,
    SubmitContentRequest,
)
from web.backend.app.state import get_services

router = APIRouter(prefix="/api", tags=["moderation"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _content_response(c: Content) -> ContentResponse:
    return ContentResponse(**asdict(c), needs_moderation=c.status.needs_moderation)


def _report_response(r: Report) -> ReportResponse:
    return ReportResponse(**asdict(r))


# ---------------------------------------------------------------------------
# Content endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/contents",
    response_model=ContentResponse,
    summary="Submit content",
    status_code=status.HTTP_201_CREATED,
)
def submit_content(
    body: SubmitContentRequest,
    caller: str = Depends(get_caller),
    services: Services = Depends(get_services),
):
    """Register a content reference authored by the caller."""
    registry = services.registry
    content_id = registry.submit_content(caller, body.content_hash)
    return _content_response(registry.get_content(content_id))


@router.get(
    "/contents",
    response_model=list[ContentResponse],
    summary="List content",
)
def list_contents(
    status_filter: Optional[ContentStatus] = None,
    services: Services = Depends(get_services),
):
    """Return all content records, optionally filtered by status."""
    return [_content_response(c) for c in services.registry.list_contents(status_filter)]


@router.get(
    "/contents/{content_id}",
    response_model=ContentResponse,
    summary="Get a content record",
)
def get_content(content_id: int, services: Services = Depends(get_services)):
    return _content_response(services.registry.get_content(content_id))


@router.get(
    "/contents/{content_id}/needs-moderation",
    response_model=NeedsModerationResponse,
    summary="Check whether content awaits a moderator",
)
def needs_moderation(content_id: int, services: Services = Depends(get_services)):
    return NeedsModerationResponse(
        content_id=content_id,
        needs_moderation=services.registry.needs_moderation(content_id),
    )


@router.post(
    "/contents/{content_id}/reports",
    response_model=ReportResponse,
    summary="Report content",
    status_code=status.HTTP_201_CREATED,
)
def report_content(
    content_id: int,
    body: ReportContentRequest,
    caller: str = Depends(get_caller),
    services: Services = Depends(get_services),
):
    """File a report against content as the caller."""
    report = services.registry.report_content(caller, content_id, body.reason)
    return _report_response(report)


@router.get(
    "/contents/{content_id}/reports",
    response_model=list[ReportResponse],
    summary="List reports for content",
)
def list_reports(content_id: int, services: Services = Depends(get_services)):
    return [_report_response(r) for r in services.registry.reports_for_content(content_id)]


@router.post(
    "/contents/{content_id}/moderate",
    response_model=ContentResponse,
    summary="Set the status of content (moderators only)",
)
def moderate_content(
    content_id: int,
    body: ModerateContentRequest,
    caller: str = Depends(get_caller),
    services: Services = Depends(get_services),
):
    content = services.registry.moderate_content(caller, content_id, body.status)
    return _content_response(content)


@router.get(
    "/reports/{report_id}",
    response_model=ReportResponse,
    summary="Get a report",
)
def get_report(report_id: int, services: Services = Depends(get_services)):
    return _report_response(services.registry.get_report(report_id))


@router.get(
    "/moderation/queue",
    response_model=list[ContentResponse],
    summary="Content awaiting a moderator decision",
)
def moderation_queue(services: Services = Depends(get_services)):
    return [_content_response(c) for c in services.registry.moderation_queue()]


# ---------------------------------------------------------------------------
# Moderator endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/moderators",
    response_model=ModeratorListResponse,
    summary="List moderators",
)
def list_moderators(services: Services = Depends(get_services)):
    registry = services.registry
    return ModeratorListResponse(owner=registry.owner, moderators=registry.list_moderators())


@router.post(
    "/moderators",
    response_model=ModeratorListResponse,
    summary="Add a moderator (owner only)",
    status_code=status.HTTP_201_CREATED,
)
def add_moderator(
    body: AddModeratorRequest,
    caller: str = Depends(get_caller),
    services: Services = Depends(get_services),
):
    registry = services.registry
    registry.add_moderator(caller, body.address)
    return ModeratorListResponse(owner=registry.owner, moderators=registry.list_moderators())


@router.delete(
    "/moderators/{address}",
    response_model=ModeratorListResponse,
    summary="Remove a moderator (owner only)",
)
def remove_moderator(
    address: str,
    caller: str = Depends(get_caller),
    services: Services = Depends(get_services),
):
    registry = services.registry
    registry.remove_moderator(caller, address)
    return ModeratorListResponse(owner=registry.owner, moderators=registry.list_moderators())
