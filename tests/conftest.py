"""Shared fixtures and fakes for thread switcher tests."""

import json
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from thread_switcher.index import SessionIndex
from thread_switcher.models import SessionSummary
from thread_switcher.preview import PreviewCache, PreviewExtractor
from thread_switcher.sources.base import SessionActions, SessionSource

NOW = datetime(2026, 1, 15, 12, 0, 0)


def make_session(path: str, minutes_ago: int = 0, first_message: str = "", **kwargs) -> SessionSummary:
    return SessionSummary(
        path=path,
        first_message=first_message or f"Prompt for {path}",
        message_count=kwargs.pop("message_count", 4),
        modified=NOW - timedelta(minutes=minutes_ago),
        **kwargs,
    )


def message(role: str, content) -> str:
    return json.dumps({"type": "message", "message": {"role": role, "content": content}})


def write_session(path: Path, cwd: str, records: list[str]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    header = json.dumps({"type": "session", "id": path.stem, "cwd": cwd})
    path.write_text("\n".join([header, *records]) + "\n")
    return path


class FakeSource(SessionSource):
    """In-memory session source that counts log reads."""

    def __init__(self, current=None, all_sessions=None, logs=None, fail_current=False, fail_all=False):
        self.current = current or []
        self.all_sessions = all_sessions if all_sessions is not None else list(self.current)
        self.logs = logs or {}
        self.fail_current = fail_current
        self.fail_all = fail_all
        self.reads: list[str] = []

    def list_current_scope(self):
        if self.fail_current:
            raise OSError("sessions directory unreadable")
        return list(self.current)

    def list_all_scope(self, on_progress):
        if self.fail_all:
            raise OSError("scan failed")
        total = len(self.all_sessions)
        for i in range(total):
            on_progress(i + 1, total)
        return list(self.all_sessions)

    def read_raw_log(self, path):
        self.reads.append(path)
        if path not in self.logs:
            raise FileNotFoundError(path)
        return self.logs[path]


class FakeActions(SessionActions):
    """Records every action; can be told to fail."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[tuple] = []

    def _record(self, *call):
        if self.fail:
            raise OSError("permission denied")
        self.calls.append(call)

    def rename_active(self, name):
        self._record("rename_active", name)

    def rename_file(self, path, name):
        self._record("rename_file", path, name)

    def delete(self, path):
        self._record("delete", path)

    def insert_into_editor(self, text):
        self._record("insert_into_editor", text)


class FakeTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.stopped = False

    def stop(self):
        self.stopped = True

    def fire(self):
        if not self.stopped:
            self.callback()


class FakeHost:
    """Host surface with a fixed terminal size."""

    def __init__(self, width: int = 100, height: int = 40):
        self.width = width
        self.height = height
        self.invalidations = 0
        self.timers: list[FakeTimer] = []
        self.results: list = []

    def size(self):
        return self.width, self.height

    def invalidate(self):
        self.invalidations += 1

    def set_timer(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    def done(self, result):
        self.results.append(result)


@pytest.fixture
def three_sessions():
    """Three sessions, deliberately not in recency order."""
    return [
        make_session("/s/b.jsonl", minutes_ago=30, first_message="Fix login bug"),
        make_session("/s/a.jsonl", minutes_ago=5, first_message="Add dark mode"),
        make_session("/s/c.jsonl", minutes_ago=90, first_message="Write release notes"),
    ]


@pytest.fixture
def source(three_sessions):
    logs = {
        s.path: "\n".join([
            message("user", s.first_message),
            message("assistant", [{"type": "text", "text": f"Working on: {s.first_message}"}]),
        ])
        for s in three_sessions
    }
    return FakeSource(current=three_sessions, logs=logs)


@pytest.fixture
def index(source):
    idx = SessionIndex(source, active_key="/s/a.jsonl", preview_cache=PreviewCache())
    idx.load_current()
    return idx


@pytest.fixture
def previews(source, index):
    return PreviewExtractor(source.read_raw_log, index.preview_cache)
