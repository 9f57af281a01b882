"""Event journal for the moderation registry.

Every notification the registry emits is appended as one JSON line to a
daily file under ``<data_dir>/events/``. The journal is the durable audit
trail that indexers and operators query and export.
"""

from __future__ import annotations

import csv
import io
import json
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from modreg.core.logging import get_logger
from modreg.registry.events import Event

logger = get_logger("journal")


@dataclass
class JournalEntry:
    """A single recorded event."""

    id: str
    sequence: int
    timestamp: str
    event: str
    actor: str
    content_id: Optional[int] = None
    payload: dict[str, Any] = field(default_factory=dict)


class EventJournal:
    """File-based JSONL journal of registry events.

    Can be passed directly to ``ModerationRegistry(listeners=[...])``.
    """

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = Path(base_dir) if base_dir else Path.home() / ".modreg" / "events"
        self._base_dir.mkdir(parents=True, exist_ok=True)
        entries = self._read_all_entries()
        self._sequence = entries[-1].sequence if entries else 0

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _log_file_for_date(self, dt: datetime) -> Path:
        return self._base_dir / f"{dt.strftime('%Y-%m-%d')}.jsonl"

    def _read_all_entries(self) -> list[JournalEntry]:
        """Read every entry from all journal files, in write order."""
        entries: list[JournalEntry] = []
        for path in sorted(self._base_dir.glob("*.jsonl")):
            text = path.read_text(encoding="utf-8")
            for lineno, line in enumerate(text.splitlines(), start=1):
                if not line.strip():
                    continue
                try:
                    entries.append(JournalEntry(**json.loads(line)))
                except (json.JSONDecodeError, TypeError):
                    logger.warning("journal_line_skipped", file=path.name, line=lineno)
        entries.sort(key=lambda e: e.sequence)
        return entries

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def __call__(self, event: Event, actor: str) -> None:
        self.record(event, actor)

    def record(self, event: Event, actor: str = "") -> JournalEntry:
        """Append an event and return the created entry."""
        now = datetime.now(timezone.utc)
        self._sequence += 1
        entry = JournalEntry(
            id=uuid.uuid4().hex[:16],
            sequence=self._sequence,
            timestamp=now.isoformat(),
            event=event.name,
            actor=actor,
            content_id=getattr(event, "content_id", None),
            payload=event.to_payload(),
        )
        with self._log_file_for_date(now).open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(asdict(entry)) + "\n")
        return entry

    def get_entries(
        self,
        *,
        event: Optional[str] = None,
        content_id: Optional[int] = None,
        actor: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: int = 200,
    ) -> list[JournalEntry]:
        """Return filtered entries, newest first."""
        entries = self._read_all_entries()

        if event:
            entries = [e for e in entries if e.event == event]
        if content_id is not None:
            entries = [e for e in entries if e.content_id == content_id]
        if actor:
            entries = [e for e in entries if e.actor == actor]
        if start_date:
            entries = [e for e in entries if e.timestamp >= start_date]
        if end_date:
            entries = [e for e in entries if e.timestamp <= end_date]

        entries.reverse()
        return entries[:limit]

    def export_entries(self, fmt: str = "json", **filters: Any) -> str:
        """Export entries as ``json`` or ``csv``, oldest first."""
        filters.setdefault("limit", 10000)
        entries = list(reversed(self.get_entries(**filters)))

        if fmt == "csv":
            buf = io.StringIO()
            writer = csv.writer(buf, lineterminator="\n")
            writer.writerow(["sequence", "timestamp", "event", "actor", "content_id", "payload"])
            for e in entries:
                content_id = "" if e.content_id is None else e.content_id
                writer.writerow(
                    [e.sequence, e.timestamp, e.event, e.actor, content_id, json.dumps(e.payload)]
                )
            return buf.getvalue().rstrip("\n")

        return json.dumps([asdict(e) for e in entries], indent=2)
