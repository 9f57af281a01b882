"""Shared registry services for the running process."""

from __future__ import annotations

from typing import Optional

from modreg.bootstrap import Services, build_services

_services: Optional[Services] = None


def get_services() -> Services:
    """Return the singleton services, built from ``MODREG_*`` settings."""
    global _services
    if _services is None:
        _services = build_services()
    return _services
