"""Tests for the registry under concurrent callers."""

import threading

from modreg.registry.errors import Conflict
from modreg.registry.models import ContentStatus
from modreg.registry.registry import ModerationRegistry


def _run_all(targets):
    threads = [threading.Thread(target=t) for t in targets]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)
    assert not any(t.is_alive() for t in threads)


def test_concurrent_submissions_get_unique_sequential_ids():
    reg = ModerationRegistry("0xOwner")
    n = 40
    barrier = threading.Barrier(n)
    ids = []
    ids_lock = threading.Lock()

    def submit(i):
        def run():
            barrier.wait()
            cid = reg.submit_content(f"0xAuthor{i}", f"Qm{i}")
            with ids_lock:
                ids.append(cid)
        return run

    _run_all([submit(i) for i in range(n)])

    assert sorted(ids) == list(range(1, n + 1))
    assert reg.content_count == n
    submitted = [e.content_id for e in reg.events]
    assert submitted == list(range(1, n + 1))


def test_concurrent_reports_are_counted_once_per_reporter():
    reg = ModerationRegistry("0xOwner")
    cid = reg.submit_content("0xAuthor", "QmAbc")
    reporters = [f"0xReporter{i}" for i in range(20)]
    # every reporter tries twice; only the first attempt may land
    attempts = reporters * 2
    barrier = threading.Barrier(len(attempts))
    accepted = []
    conflicts = []
    results_lock = threading.Lock()

    def report(reporter):
        def run():
            barrier.wait()
            try:
                filed = reg.report_content(reporter, cid, "spam")
            except Conflict:
                with results_lock:
                    conflicts.append(reporter)
                return
            with results_lock:
                accepted.append(filed)
        return run

    _run_all([report(r) for r in attempts])

    assert len(accepted) == len(reporters)
    assert len(conflicts) == len(reporters)
    assert sorted(r.reporter for r in accepted) == sorted(reporters)
    assert sorted(r.id for r in accepted) == list(range(1, len(reporters) + 1))

    content = reg.get_content(cid)
    assert content.report_count == len(accepted)
    assert reg.report_count == len(accepted)
    assert content.status == ContentStatus.UnderReview
    assert all(reg.has_reported(cid, r) for r in reporters)


def test_slow_listener_does_not_block_reads():
    entered = threading.Event()
    release = threading.Event()
    seen = []

    def slow_listener(event, actor):
        seen.append(event.name)
        entered.set()
        release.wait(timeout=10)

    reg = ModerationRegistry("0xOwner", listeners=[slow_listener])
    writer = threading.Thread(target=reg.submit_content, args=("0xAuthor", "QmAbc"))
    writer.start()
    assert entered.wait(timeout=5)

    reads = {}

    def read():
        reads["moderators"] = reg.list_moderators()
        reads["content"] = reg.get_content(1)

    reader = threading.Thread(target=read)
    reader.start()
    reader.join(timeout=2)
    blocked = reader.is_alive()

    release.set()
    writer.join(timeout=5)
    reader.join(timeout=5)

    assert not blocked
    assert reads["moderators"] == ["0xOwner"]
    assert reads["content"].content_hash == "QmAbc"
    assert seen == ["ContentSubmitted"]


def test_listeners_see_events_in_commit_order():
    seen = []
    reg = ModerationRegistry("0xOwner", listeners=[lambda event, actor: seen.append(event)])
    barrier = threading.Barrier(10)

    def submit(i):
        def run():
            barrier.wait()
            reg.submit_content("0xAuthor", f"Qm{i}")
        return run

    _run_all([submit(i) for i in range(10)])

    assert [e.content_id for e in seen] == list(range(1, 11))
    assert seen == reg.events


def test_listener_may_call_back_into_registry():
    reg = ModerationRegistry("0xOwner")
    seen = []

    def auto_flag(event, actor):
        seen.append(event.name)
        if event.name == "ContentSubmitted":
            reg.moderate_content("0xOwner", event.content_id, ContentStatus.Flagged)

    reg.add_listener(auto_flag)
    cid = reg.submit_content("0xAuthor", "QmAbc")

    assert reg.get_content(cid).status == ContentStatus.Flagged
    assert seen == ["ContentSubmitted", "ContentModerated"]
