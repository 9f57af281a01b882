"""Moderation registry — the content, report and moderator state machine.

All state lives in one ``ModerationRegistry`` instance: content records,
reports, the moderator set, the has-reported index, and two id counters.
Every operation runs under a single lock and checks all of its
preconditions before mutating anything, so a rejected call leaves no trace
and emits no event.

When a ``state_path`` is given the registry keeps a JSON snapshot of its
state there, reloaded on start and rewritten after every accepted change.
A change whose snapshot cannot be written is undone before the error
propagates. Listeners run after the lock is released, in commit order.
"""

from __future__ import annotations

import json
import threading
from collections import deque
from contextlib import contextmanager
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any, Callable, Optional, Union

from modreg.core.logging import get_logger
from modreg.registry.errors import Conflict, InvalidInput, ModerationError, NotFound
from modreg.registry.events import (
    ContentModerated,
    ContentReported,
    ContentSubmitted,
    Event,
    ModeratorAdded,
    ModeratorRemoved,
)
from modreg.registry.models import (
    REPORT_THRESHOLD,
    Content,
    ContentStatus,
    Report,
    utc_now,
)
from modreg.registry.permissions import (
    is_moderator,
    is_zero_identity,
    require_moderator,
    require_owner,
)

# listener(event, actor)
Listener = Callable[[Event, str], None]

logger = get_logger("registry")


class ModerationRegistry:
    """Content moderation registry with owner/moderator roles.

    Parameters
    ----------
    owner:
        The deploying identity. Ignored when a snapshot already exists at
        ``state_path``; the stored owner wins.
    state_path:
        Optional JSON snapshot file.
    listeners:
        Callables invoked with ``(event, actor)`` after each accepted change.
    clock:
        Returns the timestamp stored on new content and reports.
    """

    def __init__(
        self,
        owner: str,
        state_path: Optional[Union[str, Path]] = None,
        listeners: Optional[list[Listener]] = None,
        clock: Optional[Callable[[], str]] = None,
    ) -> None:
        self._lock = threading.RLock()
        self._dispatch_lock = threading.RLock()
        self._pending: deque[tuple[Event, str]] = deque()
        self._state_path = Path(state_path) if state_path else None
        self._listeners: list[Listener] = list(listeners or [])
        self._clock = clock or utc_now
        self._events: list[Event] = []

        self._contents: dict[int, Content] = {}
        self._reports: dict[int, Report] = {}
        self._moderators: set[str] = set()
        self._has_reported: set[tuple[int, str]] = set()
        self._content_counter = 0
        self._report_counter = 0

        snapshot = self._read_snapshot()
        if snapshot is not None:
            self._restore(snapshot)
            if owner and owner != self._owner:
                logger.warning(
                    "snapshot_owner_kept", configured=owner, stored=self._owner
                )
            return

        if is_zero_identity(owner):
            raise InvalidInput("Owner identity must not be empty")
        self._owner = owner
        self._moderators.add(owner)
        self._write_snapshot()

    # ------------------------------------------------------------------
    # Snapshot persistence
    # ------------------------------------------------------------------

    def _read_snapshot(self) -> Optional[dict[str, Any]]:
        if self._state_path is None or not self._state_path.exists():
            return None
        try:
            data = json.loads(self._state_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            # never start fresh over an unreadable snapshot
            logger.error("snapshot_unreadable", path=str(self._state_path), error=str(exc))
            raise
        return data if isinstance(data, dict) and data.get("owner") else None

    def _restore(self, data: dict[str, Any]) -> None:
        self._owner = data["owner"]
        self._content_counter = int(data.get("content_counter", 0))
        self._report_counter = int(data.get("report_counter", 0))
        for d in data.get("contents", []):
            content = Content(**d)
            self._contents[content.id] = content
        for d in data.get("reports", []):
            report = Report(**d)
            self._reports[report.id] = report
        self._moderators = set(data.get("moderators", []))
        self._moderators.add(self._owner)
        self._has_reported = {
            (int(cid), reporter) for cid, reporter in data.get("has_reported", [])
        }

    def _snapshot(self) -> dict[str, Any]:
        contents = []
        for c in self._contents.values():
            d = asdict(c)
            d["status"] = c.status.value
            contents.append(d)
        return {
            "owner": self._owner,
            "content_counter": self._content_counter,
            "report_counter": self._report_counter,
            "contents": contents,
            "reports": [asdict(r) for r in self._reports.values()],
            "moderators": sorted(self._moderators),
            "has_reported": sorted([cid, reporter] for cid, reporter in self._has_reported),
        }

    def _write_snapshot(self) -> None:
        if self._state_path is None:
            return
        self._state_path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._state_path.with_suffix(".tmp")
        tmp.write_text(json.dumps(self._snapshot(), indent=2), encoding="utf-8")
        tmp.replace(self._state_path)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _reject(self, operation: str, error: ModerationError, **context: Any) -> ModerationError:
        logger.info(
            "operation_rejected",
            operation=operation,
            kind=error.kind,
            reason=error.message,
            **context,
        )
        return error

    def _lookup_content(self, content_id: int) -> Optional[Content]:
        if not isinstance(content_id, int) or isinstance(content_id, bool):
            return None
        if content_id < 1 or content_id > self._content_counter:
            return None
        return self._contents.get(content_id)

    def _capture(self) -> tuple:
        return (
            self._content_counter,
            self._report_counter,
            {cid: replace(c) for cid, c in self._contents.items()},
            dict(self._reports),
            set(self._moderators),
            set(self._has_reported),
        )

    def _rollback(self, saved: tuple) -> None:
        (
            self._content_counter,
            self._report_counter,
            self._contents,
            self._reports,
            self._moderators,
            self._has_reported,
        ) = saved

    @contextmanager
    def _mutation(self, operation: str):
        """Apply in-memory changes and persist them, or undo them all.

        Must be entered with the lock held and after every precondition
        has passed.
        """
        saved = self._capture()
        try:
            yield
            self._write_snapshot()
        except Exception:
            self._rollback(saved)
            logger.exception("operation_aborted", operation=operation)
            raise

    def _commit(self, event: Event, actor: str) -> None:
        """Record an accepted event and queue it for the listeners."""
        self._events.append(event)
        self._pending.append((event, actor))

    def _dispatch_pending(self) -> None:
        """Deliver queued events to listeners in commit order.

        Called without the state lock held, so slow listeners never block
        reads or other operations.
        """
        with self._dispatch_lock:
            while True:
                with self._lock:
                    if not self._pending:
                        return
                    event, actor = self._pending.popleft()
                    listeners = list(self._listeners)
                for listener in listeners:
                    try:
                        listener(event, actor)
                    except Exception:
                        logger.exception("listener_failed", event_name=event.name)

    def add_listener(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)

    # ------------------------------------------------------------------
    # State-changing operations
    # ------------------------------------------------------------------

    def submit_content(self, author: str, content_hash: str) -> int:
        """Register a content reference and return its id."""
        with self._lock:
            if not content_hash:
                raise self._reject(
                    "submit_content", InvalidInput("Content hash cannot be empty"), author=author
                )

            with self._mutation("submit_content"):
                self._content_counter += 1
                content = Content(
                    id=self._content_counter,
                    author=author,
                    content_hash=content_hash,
                    timestamp=self._clock(),
                )
                self._contents[content.id] = content
            logger.info("content_submitted", content_id=content.id, author=author)
            self._commit(
                ContentSubmitted(content_id=content.id, author=author, content_hash=content_hash),
                author,
            )
        self._dispatch_pending()
        return content.id

    def report_content(self, reporter: str, content_id: int, reason: str) -> Report:
        """File a report against active content.

        The report that brings ``report_count`` to ``REPORT_THRESHOLD`` while
        the content is still ``Active`` moves it to ``UnderReview``.
        """
        with self._lock:
            content = self._lookup_content(content_id)
            if content is None:
                raise self._reject(
                    "report_content", NotFound(f"Content {content_id} does not exist")
                )
            if not content.is_active:
                raise self._reject(
                    "report_content",
                    Conflict(f"Content {content_id} is no longer active"),
                    content_id=content_id,
                )
            if (content_id, reporter) in self._has_reported:
                raise self._reject(
                    "report_content",
                    Conflict(f"'{reporter}' already reported content {content_id}"),
                    content_id=content_id,
                )
            if reporter == content.author:
                raise self._reject(
                    "report_content",
                    Conflict("Authors cannot report their own content"),
                    content_id=content_id,
                )
            if not reason:
                raise self._reject(
                    "report_content",
                    InvalidInput("Report reason cannot be empty"),
                    content_id=content_id,
                )

            with self._mutation("report_content"):
                self._report_counter += 1
                report = Report(
                    id=self._report_counter,
                    content_id=content_id,
                    reporter=reporter,
                    reason=reason,
                    timestamp=self._clock(),
                )
                self._reports[report.id] = report
                self._has_reported.add((content_id, reporter))
                content.report_count += 1
                escalated = (
                    content.report_count == REPORT_THRESHOLD
                    and content.status == ContentStatus.Active
                )
                if escalated:
                    content.status = ContentStatus.UnderReview

            if escalated:
                logger.info(
                    "content_escalated", content_id=content_id, report_count=content.report_count
                )
            logger.info("content_reported", content_id=content_id, report_id=report.id)
            self._commit(
                ContentReported(content_id=content_id, reporter=reporter, reason=reason),
                reporter,
            )
            filed = replace(report)
        self._dispatch_pending()
        return filed

    def moderate_content(
        self, moderator: str, content_id: int, new_status: Union[ContentStatus, str, int]
    ) -> Content:
        """Set the status of active content. ``Removed`` is terminal."""
        with self._lock:
            try:
                require_moderator(moderator, self._owner, self._moderators)
            except ModerationError as exc:
                raise self._reject("moderate_content", exc, content_id=content_id)
            try:
                status = ContentStatus.parse(new_status)
            except ValueError:
                raise self._reject(
                    "moderate_content",
                    InvalidInput(f"Unknown content status: {new_status!r}"),
                    content_id=content_id,
                ) from None
            content = self._lookup_content(content_id)
            if content is None:
                raise self._reject(
                    "moderate_content", NotFound(f"Content {content_id} does not exist")
                )
            if not content.is_active:
                raise self._reject(
                    "moderate_content",
                    Conflict(f"Content {content_id} is no longer active"),
                    content_id=content_id,
                )

            with self._mutation("moderate_content"):
                content.status = status
                if status == ContentStatus.Removed:
                    content.is_active = False

            logger.info(
                "content_moderated",
                content_id=content_id,
                status=status.value,
                moderator=moderator,
            )
            self._commit(
                ContentModerated(content_id=content_id, new_status=status, moderator=moderator),
                moderator,
            )
            moderated = replace(content)
        self._dispatch_pending()
        return moderated

    def add_moderator(self, caller: str, address: str) -> None:
        with self._lock:
            try:
                require_owner(caller, self._owner)
            except ModerationError as exc:
                raise self._reject("add_moderator", exc)
            if is_zero_identity(address):
                raise self._reject("add_moderator", InvalidInput("Invalid moderator address"))
            if address in self._moderators:
                raise self._reject(
                    "add_moderator", Conflict(f"'{address}' is already a moderator")
                )

            with self._mutation("add_moderator"):
                self._moderators.add(address)
            logger.info("moderator_added", moderator=address)
            self._commit(ModeratorAdded(moderator=address), caller)
        self._dispatch_pending()

    def remove_moderator(self, caller: str, address: str) -> None:
        with self._lock:
            try:
                require_owner(caller, self._owner)
            except ModerationError as exc:
                raise self._reject("remove_moderator", exc)
            if address == self._owner:
                raise self._reject(
                    "remove_moderator", Conflict("The owner cannot be removed as moderator")
                )
            if address not in self._moderators:
                raise self._reject(
                    "remove_moderator", Conflict(f"'{address}' is not a moderator")
                )

            with self._mutation("remove_moderator"):
                self._moderators.discard(address)
            logger.info("moderator_removed", moderator=address)
            self._commit(ModeratorRemoved(moderator=address), caller)
        self._dispatch_pending()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def content_count(self) -> int:
        with self._lock:
            return self._content_counter

    @property
    def report_count(self) -> int:
        with self._lock:
            return self._report_counter

    @property
    def events(self) -> list[Event]:
        """Emitted events in order, oldest first."""
        with self._lock:
            return list(self._events)

    def get_content(self, content_id: int) -> Content:
        with self._lock:
            content = self._lookup_content(content_id)
            if content is None:
                raise NotFound(f"Content {content_id} does not exist")
            return replace(content)

    def get_report(self, report_id: int) -> Report:
        with self._lock:
            valid = isinstance(report_id, int) and not isinstance(report_id, bool)
            if not valid or report_id < 1 or report_id > self._report_counter:
                raise NotFound(f"Report {report_id} does not exist")
            return replace(self._reports[report_id])

    def needs_moderation(self, content_id: int) -> bool:
        """Return True if the content is UnderReview or Flagged."""
        return self.get_content(content_id).status.needs_moderation

    def is_moderator(self, address: str) -> bool:
        with self._lock:
            return is_moderator(address, self._owner, self._moderators)

    def list_moderators(self) -> list[str]:
        with self._lock:
            return sorted(self._moderators)

    def has_reported(self, content_id: int, reporter: str) -> bool:
        with self._lock:
            return (content_id, reporter) in self._has_reported

    def list_contents(self, status: Optional[ContentStatus] = None) -> list[Content]:
        """Return all content records in id order, optionally filtered by status."""
        with self._lock:
            contents = [replace(c) for c in self._contents.values()]
        if status is not None:
            contents = [c for c in contents if c.status == status]
        return sorted(contents, key=lambda c: c.id)

    def reports_for_content(self, content_id: int) -> list[Report]:
        with self._lock:
            if self._lookup_content(content_id) is None:
                raise NotFound(f"Content {content_id} does not exist")
            reports = [replace(r) for r in self._reports.values() if r.content_id == content_id]
        return sorted(reports, key=lambda r: r.id)

    def moderation_queue(self) -> list[Content]:
        """Return content awaiting a moderator decision, oldest first."""
        return [c for c in self.list_contents() if c.status.needs_moderation]
