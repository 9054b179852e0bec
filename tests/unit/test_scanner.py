from __future__ import annotations

import threading
import time
from datetime import datetime, timezone
from pathlib import Path

import pytest

from ccs import scanner
from ccs.exceptions import CcsError, ProjectsDirNotFoundError
from ccs.scanner import ScanStats, find_transcripts, scan_conversations
from tests.helpers import assistant_entry, set_mtime, user_entry, write_jsonl


def _session(root: Path, rel: str, text: str, ts: str) -> Path:
    return write_jsonl(root / rel, [user_entry(text, ts=ts), assistant_entry("ok", ts=ts)])


def test_scan_skips_agent_transcripts(projects_dir: Path) -> None:
    _session(projects_dir, "proj/session1.jsonl", "Hello", "2024-01-15T10:00:00Z")
    _session(projects_dir, "proj/agent-abc.jsonl", "Agent", "2024-01-15T11:00:00Z")

    conversations = scan_conversations(projects_dir)

    assert [c.session_id for c in conversations] == ["session1"]


def test_scan_sorts_newest_first(projects_dir: Path) -> None:
    _session(projects_dir, "a/old.jsonl", "old", "2024-01-01T00:00:00Z")
    _session(projects_dir, "b/new.jsonl", "new", "2024-03-01T00:00:00Z")
    _session(projects_dir, "c/mid.jsonl", "mid", "2024-02-01T00:00:00Z")

    conversations = scan_conversations(projects_dir)

    assert [c.session_id for c in conversations] == ["new", "mid", "old"]


def test_scan_recurses_into_nested_dirs(projects_dir: Path) -> None:
    _session(projects_dir, "deep/er/still/s.jsonl", "nested", "2024-01-01T00:00:00Z")
    (projects_dir / "notes.txt").write_text("not a transcript")

    assert [c.session_id for c in scan_conversations(projects_dir)] == ["s"]
    assert find_transcripts(projects_dir) == [projects_dir / "deep/er/still/s.jsonl"]


def test_scan_missing_root_raises(tmp_path: Path) -> None:
    missing = tmp_path / "nope"
    with pytest.raises(ProjectsDirNotFoundError) as excinfo:
        scan_conversations(missing)
    assert isinstance(excinfo.value, CcsError)
    assert excinfo.value.path == missing
    assert str(missing) in str(excinfo.value)


def test_scan_empty_root_returns_empty(projects_dir: Path) -> None:
    assert scan_conversations(projects_dir) == []


def test_scan_applies_age_cutoff(projects_dir: Path) -> None:
    recent = _session(projects_dir, "p/recent.jsonl", "recent", "2024-01-02T00:00:00Z")
    stale = _session(projects_dir, "p/stale.jsonl", "stale", "2024-01-01T00:00:00Z")
    set_mtime(recent, 1_700_000_100)
    set_mtime(stale, 1_699_000_000)
    cutoff = datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)

    stats = ScanStats()
    conversations = scan_conversations(projects_dir, cutoff, stats=stats)

    assert [c.session_id for c in conversations] == ["recent"]
    assert stats == ScanStats(candidates=2, parsed=1, skipped=1, failed=0)


def test_scan_isolates_read_failures(projects_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """A file that cannot be read does not affect its siblings."""
    _session(projects_dir, "p/good.jsonl", "good", "2024-01-02T00:00:00Z")
    _session(projects_dir, "p/bad.jsonl", "bad", "2024-01-01T00:00:00Z")
    real_parse = scanner.parse_conversation_file

    def flaky_parse(path, age_cutoff=None, max_size=0):
        if Path(path).name == "bad.jsonl":
            raise PermissionError(13, "Permission denied", str(path))
        return real_parse(path, age_cutoff, max_size)

    monkeypatch.setattr(scanner, "parse_conversation_file", flaky_parse)

    stats = ScanStats()
    conversations = scan_conversations(projects_dir, stats=stats)

    assert [c.session_id for c in conversations] == ["good"]
    assert stats.failed == 1
    assert stats.parsed == 1


def test_scan_with_single_worker_matches_pool(projects_dir: Path) -> None:
    for i in range(30):
        _session(projects_dir, f"p{i % 3}/s{i:02d}.jsonl", f"msg {i}", f"2024-01-{i % 28 + 1:02d}T00:00:00Z")

    pooled = scan_conversations(projects_dir)
    serial = scan_conversations(projects_dir, max_workers=1)

    assert len(pooled) == 30
    assert [c.last_timestamp for c in pooled] == [c.last_timestamp for c in serial]
    assert {c.session_id for c in pooled} == {c.session_id for c in serial}


def test_scan_counts_user_and_summary_files(projects_dir: Path) -> None:
    _session(projects_dir, "proj/one.jsonl", "first", "2024-01-01T00:00:00Z")
    _session(projects_dir, "proj/two.jsonl", "second", "2024-01-02T00:00:00Z")
    write_jsonl(projects_dir / "proj" / "summary.jsonl", [
        {"type": "summary", "summary": "A chat"},
        {"type": "summary", "summary": "Another"},
    ])

    stats = ScanStats()
    conversations = scan_conversations(projects_dir, stats=stats)

    assert len(conversations) == 2
    assert {c.session_id for c in conversations} == {"one", "two"}
    assert stats == ScanStats(candidates=3, parsed=2, skipped=1, failed=0)


def test_scan_survives_hostile_lines(projects_dir: Path) -> None:
    _session(projects_dir, "p/good.jsonl", "good", "2024-01-02T00:00:00Z")
    write_jsonl(projects_dir / "p" / "bad.jsonl", [
        '{"type": "user", "n": ' + "1" * 5000 + "}",
        "[" * 200_000,
    ])

    stats = ScanStats()
    conversations = scan_conversations(projects_dir, stats=stats)

    assert [c.session_id for c in conversations] == ["good"]
    assert stats.skipped == 1
    assert stats.failed == 0


def test_scan_isolates_unexpected_errors(projects_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _session(projects_dir, "p/good.jsonl", "good", "2024-01-02T00:00:00Z")
    _session(projects_dir, "p/bad.jsonl", "bad", "2024-01-01T00:00:00Z")
    real_parse = scanner.parse_conversation_file

    def exploding_parse(path, age_cutoff=None, max_size=0):
        if Path(path).name == "bad.jsonl":
            raise RecursionError("maximum recursion depth exceeded")
        return real_parse(path, age_cutoff, max_size)

    monkeypatch.setattr(scanner, "parse_conversation_file", exploding_parse)

    stats = ScanStats()
    conversations = scan_conversations(projects_dir, stats=stats)

    assert [c.session_id for c in conversations] == ["good"]
    assert stats.failed == 1


@pytest.mark.parametrize(
    ("kwargs", "limit"),
    [
        ({"max_workers": 4}, 4),
        ({}, scanner.MAX_CONCURRENT_PARSES),
    ],
)
def test_scan_bounds_concurrent_parses(
    projects_dir: Path, monkeypatch: pytest.MonkeyPatch, kwargs: dict, limit: int,
) -> None:
    for i in range(limit * 3):
        _session(projects_dir, f"p/s{i:03d}.jsonl", f"msg {i}", "2024-01-01T00:00:00Z")

    lock = threading.Lock()
    active = 0
    peak = 0
    real_parse = scanner.parse_conversation_file

    def tracking_parse(path, age_cutoff=None, max_size=0):
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        try:
            time.sleep(0.02)
            return real_parse(path, age_cutoff, max_size)
        finally:
            with lock:
                active -= 1

    monkeypatch.setattr(scanner, "parse_conversation_file", tracking_parse)

    conversations = scan_conversations(projects_dir, **kwargs)

    assert len(conversations) == limit * 3
    assert 1 < peak <= limit


def test_default_pool_size() -> None:
    assert scanner.MAX_CONCURRENT_PARSES == 20
