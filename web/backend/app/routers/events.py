"""Events & Webhooks API router.

Prefix: ``/api``
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from modreg.bootstrap import Services
from modreg.events.webhooks import Webhook
from web.backend.app.models.api import (
    CreateWebhookRequest,
    EventExportResponse,
    JournalEntryResponse,
    ToggleWebhookRequest,
    WebhookDeliveryResponse,
    WebhookResponse,
)
from web.backend.app.state import get_services

router = APIRouter(prefix="/api", tags=["events"])


def _webhook_response(w: Webhook) -> WebhookResponse:
    return WebhookResponse(
        id=w.id,
        name=w.name,
        url=w.url,
        events=w.events,
        active=w.active,
        has_secret=bool(w.secret),
        created_at=w.created_at,
        updated_at=w.updated_at,
    )


# ---------------------------------------------------------------------------
# Event journal
# ---------------------------------------------------------------------------


@router.get(
    "/events",
    response_model=list[JournalEntryResponse],
    summary="Query the event journal",
)
def list_events(
    event: Optional[str] = None,
    content_id: Optional[int] = None,
    actor: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    limit: int = Query(200, ge=1, le=10000),
    services: Services = Depends(get_services),
):
    """Return journal entries, newest first."""
    entries = services.journal.get_entries(
        event=event,
        content_id=content_id,
        actor=actor,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
    )
    return [JournalEntryResponse(**asdict(e)) for e in entries]


@router.get(
    "/events/export",
    response_model=EventExportResponse,
    summary="Export the event journal",
)
def export_events(
    fmt: str = Query("json", pattern="^(json|csv)$"),
    event: Optional[str] = None,
    content_id: Optional[int] = None,
    services: Services = Depends(get_services),
):
    journal = services.journal
    data = journal.export_entries(fmt, event=event, content_id=content_id)
    count = len(journal.get_entries(event=event, content_id=content_id, limit=10000))
    return EventExportResponse(format=fmt, data=data, count=count)


# ---------------------------------------------------------------------------
# Webhooks
# ---------------------------------------------------------------------------


@router.get("/webhooks", response_model=list[WebhookResponse], summary="List webhooks")
def list_webhooks(services: Services = Depends(get_services)):
    return [_webhook_response(w) for w in services.webhooks.list_webhooks()]


@router.post(
    "/webhooks",
    response_model=WebhookResponse,
    summary="Register a webhook",
    status_code=status.HTTP_201_CREATED,
)
def create_webhook(body: CreateWebhookRequest, services: Services = Depends(get_services)):
    try:
        wh = services.webhooks.register_webhook(
            url=body.url, events=body.events, secret=body.secret, name=body.name
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return _webhook_response(wh)


@router.put(
    "/webhooks/{webhook_id}/toggle",
    response_model=WebhookResponse,
    summary="Enable or disable a webhook",
)
def toggle_webhook(
    webhook_id: str, body: ToggleWebhookRequest, services: Services = Depends(get_services)
):
    try:
        wh = services.webhooks.toggle_webhook(webhook_id, body.active)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return _webhook_response(wh)


@router.delete("/webhooks/{webhook_id}", summary="Delete a webhook")
def delete_webhook(webhook_id: str, services: Services = Depends(get_services)):
    if not services.webhooks.delete_webhook(webhook_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Webhook '{webhook_id}' not found",
        )
    return {"ok": True}


@router.get(
    "/webhooks/{webhook_id}/deliveries",
    response_model=list[WebhookDeliveryResponse],
    summary="Delivery history for a webhook",
)
def list_deliveries(
    webhook_id: str,
    limit: int = Query(100, ge=1, le=1000),
    services: Services = Depends(get_services),
):
    deliveries = services.webhooks.get_deliveries(webhook_id, limit=limit)
    return [WebhookDeliveryResponse(**asdict(d)) for d in deliveries]


@router.post(
    "/webhooks/deliveries/{delivery_id}/retry",
    response_model=WebhookDeliveryResponse,
    summary="Retry a delivery",
)
def retry_delivery(delivery_id: str, services: Services = Depends(get_services)):
    try:
        delivery = services.webhooks.retry_delivery(delivery_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return WebhookDeliveryResponse(**asdict(delivery))
