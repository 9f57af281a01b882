"""Environment-driven settings.

Every value falls back to a default so the CLI and the web portal run with
no configuration at all.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_TRUE = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE


@dataclass
class Settings:
    """Runtime settings for the registry and its consumers."""

    data_dir: Path
    owner: str = "owner"
    log_level: str = "INFO"
    json_logs: bool = False
    webhooks_enabled: bool = True

    @property
    def state_path(self) -> Path:
        return self.data_dir / "state.json"

    @property
    def events_dir(self) -> Path:
        return self.data_dir / "events"

    @property
    def webhooks_dir(self) -> Path:
        return self.data_dir / "webhooks"

    @classmethod
    def from_env(cls, data_dir: str | Path | None = None) -> Settings:
        """Build settings from ``MODREG_*`` environment variables.

        An explicit ``data_dir`` overrides ``MODREG_DATA_DIR``.
        """
        if data_dir is None:
            data_dir = os.environ.get("MODREG_DATA_DIR") or Path.home() / ".modreg"
        return cls(
            data_dir=Path(data_dir),
            owner=os.environ.get("MODREG_OWNER", "owner"),
            log_level=os.environ.get("MODREG_LOG_LEVEL", "INFO").upper(),
            json_logs=_env_flag("MODREG_JSON_LOGS", False),
            webhooks_enabled=_env_flag("MODREG_WEBHOOKS", True),
        )
