"""Webhook delivery of registry events.

Indexers register an endpoint and the event names they care about; each
matching event is POSTed as its verbatim payload. Payloads are signed with
HMAC-SHA256 when the webhook has a secret and delivered via
``urllib.request``.

Storage is file-based JSON in ``<data_dir>/webhooks/``.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
import urllib.request
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from modreg.core.logging import get_logger
from modreg.registry.events import EVENT_NAMES, Event

logger = get_logger("webhooks")


@dataclass
class Webhook:
    """A registered outbound webhook."""

    id: str
    name: str
    url: str
    events: list[str] = field(default_factory=list)
    secret: str = ""
    active: bool = True
    created_at: str = ""
    updated_at: str = ""


@dataclass
class WebhookDelivery:
    """Record of a single delivery attempt."""

    id: str
    webhook_id: str
    event: str
    payload: dict[str, Any] = field(default_factory=dict)
    response_status: int = 0
    response_body: str = ""
    success: bool = False
    delivered_at: str = ""
    duration_ms: int = 0


class WebhookDispatcher:
    """Registers webhooks and forwards registry events to them.

    Can be passed directly to ``ModerationRegistry(listeners=[...])``.
    """

    def __init__(self, base_dir: Optional[Path] = None, timeout: float = 5.0) -> None:
        self._base_dir = Path(base_dir) if base_dir else Path.home() / ".modreg" / "webhooks"
        self._base_dir.mkdir(parents=True, exist_ok=True)
        self._hooks_file = self._base_dir / "webhooks.json"
        self._deliveries_file = self._base_dir / "deliveries.json"
        self._timeout = timeout

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------

    def _load(self, path: Path) -> list[dict[str, Any]]:
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return data if isinstance(data, list) else []
        except (json.JSONDecodeError, OSError):
            return []

    def _save(self, path: Path, data: list[dict[str, Any]]) -> None:
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    @staticmethod
    def _webhook_from_dict(d: dict[str, Any]) -> Webhook:
        return Webhook(**{k: v for k, v in d.items() if k in Webhook.__dataclass_fields__})

    @staticmethod
    def _delivery_from_dict(d: dict[str, Any]) -> WebhookDelivery:
        return WebhookDelivery(
            **{k: v for k, v in d.items() if k in WebhookDelivery.__dataclass_fields__}
        )

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def register_webhook(
        self,
        url: str,
        events: Optional[list[str]] = None,
        secret: str = "",
        name: str = "",
    ) -> Webhook:
        """Register a webhook. ``events`` defaults to every registry event."""
        events = list(events) if events else list(EVENT_NAMES)
        unknown = [e for e in events if e not in EVENT_NAMES]
        if unknown:
            raise ValueError(f"Unknown event names: {', '.join(unknown)}")
        if not url.startswith(("http://", "https://")):
            raise ValueError(f"Webhook URL must be http(s): {url}")

        now = datetime.now(timezone.utc).isoformat()
        wh = Webhook(
            id=uuid.uuid4().hex[:16],
            name=name or url,
            url=url,
            events=events,
            secret=secret,
            created_at=now,
            updated_at=now,
        )
        hooks = self._load(self._hooks_file)
        hooks.append(asdict(wh))
        self._save(self._hooks_file, hooks)
        logger.info("webhook_registered", webhook_id=wh.id, url=url)
        return wh

    def get_webhook(self, webhook_id: str) -> Optional[Webhook]:
        for d in self._load(self._hooks_file):
            if d.get("id") == webhook_id:
                return self._webhook_from_dict(d)
        return None

    def list_webhooks(self) -> list[Webhook]:
        return [self._webhook_from_dict(d) for d in self._load(self._hooks_file)]

    def toggle_webhook(self, webhook_id: str, active: bool) -> Webhook:
        hooks = self._load(self._hooks_file)
        for d in hooks:
            if d.get("id") == webhook_id:
                d["active"] = active
                d["updated_at"] = datetime.now(timezone.utc).isoformat()
                self._save(self._hooks_file, hooks)
                return self._webhook_from_dict(d)
        raise ValueError(f"Webhook {webhook_id} not found")

    def delete_webhook(self, webhook_id: str) -> bool:
        hooks = self._load(self._hooks_file)
        remaining = [d for d in hooks if d.get("id") != webhook_id]
        if len(remaining) == len(hooks):
            return False
        self._save(self._hooks_file, remaining)
        return True

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def __call__(self, event: Event, actor: str) -> None:
        self.dispatch(event)

    @staticmethod
    def compute_signature(payload_bytes: bytes, secret: str) -> str:
        """Compute the HMAC-SHA256 signature header value for a payload."""
        mac = hmac.new(secret.encode("utf-8"), payload_bytes, hashlib.sha256)
        return f"sha256={mac.hexdigest()}"

    def dispatch(self, event: Event) -> list[WebhookDelivery]:
        """Deliver an event to every active webhook subscribed to it."""
        return self.fire(event.name, event.to_payload())

    def fire(self, event_name: str, payload: dict[str, Any]) -> list[WebhookDelivery]:
        hooks = [w for w in self.list_webhooks() if w.active and event_name in w.events]
        if not hooks:
            return []

        deliveries = self._load(self._deliveries_file)
        results: list[WebhookDelivery] = []
        for wh in hooks:
            delivery = self._deliver(wh, event_name, payload)
            deliveries.append(asdict(delivery))
            results.append(delivery)
        self._save(self._deliveries_file, deliveries)
        return results

    def _deliver(self, wh: Webhook, event_name: str, payload: dict[str, Any]) -> WebhookDelivery:
        """Attempt a single delivery and return the result."""
        body = json.dumps(payload).encode("utf-8")
        headers: dict[str, str] = {
            "Content-Type": "application/json",
            "X-Modreg-Event": event_name,
        }
        if wh.secret:
            headers["X-Modreg-Signature"] = self.compute_signature(body, wh.secret)

        start = time.monotonic()
        status = 0
        resp_body = ""
        success = False

        try:
            req = urllib.request.Request(wh.url, data=body, headers=headers, method="POST")
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:
                status = resp.status
                resp_body = resp.read().decode("utf-8", errors="replace")[:2000]
                success = 200 <= status < 300
        except Exception as exc:
            resp_body = str(exc)[:2000]
            logger.warning("webhook_delivery_failed", webhook_id=wh.id, error=resp_body)

        return WebhookDelivery(
            id=uuid.uuid4().hex[:16],
            webhook_id=wh.id,
            event=event_name,
            payload=payload,
            response_status=status,
            response_body=resp_body,
            success=success,
            delivered_at=datetime.now(timezone.utc).isoformat(),
            duration_ms=int((time.monotonic() - start) * 1000),
        )

    # ------------------------------------------------------------------
    # Delivery history
    # ------------------------------------------------------------------

    def get_deliveries(
        self, webhook_id: Optional[str] = None, limit: int = 100
    ) -> list[WebhookDelivery]:
        """Return delivery records, optionally filtered by webhook, newest first."""
        deliveries = [self._delivery_from_dict(d) for d in self._load(self._deliveries_file)]
        if webhook_id:
            deliveries = [d for d in deliveries if d.webhook_id == webhook_id]
        deliveries.sort(key=lambda d: d.delivered_at, reverse=True)
        return deliveries[:limit]

    def retry_delivery(self, delivery_id: str) -> WebhookDelivery:
        """Replay a previous delivery's event and payload."""
        for d in self._load(self._deliveries_file):
            if d.get("id") == delivery_id:
                original = self._delivery_from_dict(d)
                wh = self.get_webhook(original.webhook_id)
                if wh is None:
                    raise ValueError(f"Webhook {original.webhook_id} not found")
                delivery = self._deliver(wh, original.event, original.payload)
                deliveries = self._load(self._deliveries_file)
                deliveries.append(asdict(delivery))
                self._save(self._deliveries_file, deliveries)
                return delivery
        raise ValueError(f"Delivery {delivery_id} not found")
