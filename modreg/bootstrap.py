"""Wire a registry to its snapshot, journal, and webhooks from settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from modreg.core.config import Settings
from modreg.core.logging import get_logger
from modreg.events.journal import EventJournal
from modreg.events.webhooks import WebhookDispatcher
from modreg.registry.registry import Listener, ModerationRegistry

logger = get_logger("bootstrap")


@dataclass
class Services:
    """A registry together with the consumers of its events."""

    settings: Settings
    registry: ModerationRegistry
    journal: EventJournal
    webhooks: WebhookDispatcher


def build_services(settings: Optional[Settings] = None) -> Services:
    settings = settings or Settings.from_env()
    settings.data_dir.mkdir(parents=True, exist_ok=True)

    journal = EventJournal(settings.events_dir)
    webhooks = WebhookDispatcher(settings.webhooks_dir)
    listeners: list[Listener] = [journal]
    if settings.webhooks_enabled:
        listeners.append(webhooks)

    registry = ModerationRegistry(
        owner=settings.owner,
        state_path=settings.state_path,
        listeners=listeners,
    )
    logger.debug("registry_opened", data_dir=str(settings.data_dir), owner=registry.owner)
    return Services(settings=settings, registry=registry, journal=journal, webhooks=webhooks)
