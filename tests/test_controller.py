"""Tests for the switcher controller."""

from dataclasses import replace

import pytest

from thread_switcher.controller import NOTICE_SECONDS, SwitcherController
from thread_switcher.index import SessionIndex
from thread_switcher.models import Scope
from thread_switcher.preview import PreviewCache, PreviewExtractor
from thread_switcher.render import OverlayLayout, StackedLayout

from .conftest import FakeActions, FakeHost, FakeSource, make_session


@pytest.fixture
def host():
    return FakeHost(width=100, height=40)


@pytest.fixture
def actions():
    return FakeActions()


@pytest.fixture
def controller(index, previews, actions, host):
    return SwitcherController(index, previews, actions, host, clock=lambda: 0.0)


def press(controller, *keys):
    for key in keys:
        controller.handle_key(key)


def type_text(controller, text):
    for ch in text:
        controller.handle_key(ch, ch)


class TestRender:
    """Tests for what the controller hands the host."""

    @pytest.mark.parametrize("layout", [OverlayLayout(), StackedLayout()])
    @pytest.mark.parametrize("width", [30, 80, 150])
    def test_lines_fit_width(self, index, previews, actions, host, layout, width):
        ctl = SwitcherController(index, previews, actions, host, layout=layout)
        lines = ctl.render(width)
        assert all(line.cell_len == width for line in lines)

    def test_overlay_fills_host_height(self, controller):
        assert len(controller.render(100)) == 40

    def test_no_matches(self, controller):
        type_text(controller, "zzz")
        text = "\n".join(line.plain for line in controller.render(100))
        assert "No matching sessions" in text

    def test_input_invalidates(self, controller, host):
        press(controller, "down")
        assert host.invalidations == 1


class TestSwitching:
    def test_down_enter_switches(self, controller, host):
        press(controller, "down", "enter")
        assert host.results == ["/s/b.jsonl"]
        assert controller.result == "/s/b.jsonl"

    def test_enter_on_active_session_does_nothing(self, controller, host):
        press(controller, "enter")
        assert host.results == []
        assert controller.alive
        assert controller.state.notice.text == "Already on this session"

    def test_escape_closes_without_result(self, controller, host):
        press(controller, "escape")
        assert host.results == [None]
        assert not controller.alive

    def test_finish_only_once(self, controller, host):
        controller.finish("/s/b.jsonl")
        controller.finish(None)
        assert host.results == ["/s/b.jsonl"]

    def test_input_after_finish_ignored(self, controller, host):
        press(controller, "escape")
        invalidations = host.invalidations
        press(controller, "down", "enter")
        assert host.results == [None]
        assert host.invalidations == invalidations

    def test_raw_input(self, controller, host):
        assert controller.handle_input(b"\x1b[B")
        assert controller.handle_input(b"\r")
        assert host.results == ["/s/b.jsonl"]

    def test_unbound_input_reported(self, controller):
        assert not controller.handle_input(b"\x01")
        assert not controller.handle_key("f12")


class TestDelete:
    """Tests for deleting sessions from the list."""

    def test_delete_other_session(self, controller, actions, index):
        press(controller, "down", "ctrl+d")

        assert actions.calls == [("delete", "/s/b.jsonl")]
        assert index.find("/s/b.jsonl") == []
        assert [s.path for s in controller.state.filtered] == ["/s/a.jsonl", "/s/c.jsonl"]
        assert controller.state.current.path == "/s/c.jsonl"
        assert controller.state.notice.text == "Session deleted"

    def test_delete_last_entry_moves_selection_up(self, controller):
        press(controller, "down", "down", "ctrl+d")
        assert controller.state.selected == 1
        assert controller.state.current.path == "/s/b.jsonl"

    def test_delete_active_refused(self, controller, actions, host):
        press(controller, "ctrl+d")
        assert actions.calls == []
        assert controller.state.notice.text == "Can't delete the active session"
        assert len(host.timers) == 1

    def test_delete_failure_keeps_session(self, index, previews, host):
        ctl = SwitcherController(index, previews, FakeActions(fail=True), host, clock=lambda: 0.0)
        press(ctl, "down", "ctrl+d")
        assert ctl.state.notice.text == "Delete failed: permission denied"
        assert ctl.state.notice.level == "error"
        assert len(index.find("/s/b.jsonl")) == 1
        assert ctl.alive


class TestRename:
    def test_rename_active_session(self, controller, actions, index):
        press(controller, "ctrl+r")
        type_text(controller, "Dark")
        press(controller, "enter")

        assert actions.calls == [("rename_active", "Dark")]
        assert index.find("/s/a.jsonl")[0].label == "Dark"
        assert controller.state.notice.text == "Renamed to Dark"
        assert controller.alive

    def test_rename_other_session(self, controller, actions):
        press(controller, "down", "ctrl+r")
        type_text(controller, "Login")
        press(controller, "enter")
        assert actions.calls == [("rename_file", "/s/b.jsonl", "Login")]

    def test_clearing_name(self, controller, actions, index):
        index.rename("/s/b.jsonl", "ab")
        press(controller, "down", "ctrl+r", "backspace", "backspace", "enter")
        assert actions.calls == [("rename_file", "/s/b.jsonl", "")]
        assert index.find("/s/b.jsonl")[0].name is None
        assert controller.state.notice.text == "Name cleared"

    def test_escape_leaves_rename_not_picker(self, controller, host):
        press(controller, "ctrl+r", "escape")
        assert controller.state.rename is None
        assert host.results == []

    def test_rename_failure(self, index, previews, host):
        ctl = SwitcherController(index, previews, FakeActions(fail=True), host, clock=lambda: 0.0)
        press(ctl, "ctrl+r")
        type_text(ctl, "X")
        press(ctl, "enter")
        assert ctl.state.notice.text.startswith("Rename failed")
        assert index.find("/s/a.jsonl")[0].name is None


class TestPaste:
    def test_paste_closes_picker(self, controller, actions, host):
        press(controller, "down", "ctrl+y")
        assert actions.calls == [("insert_into_editor", "Fix login bug")]
        assert host.results == [None]

    def test_paste_failure_keeps_picker_open(self, index, previews, host):
        ctl = SwitcherController(index, previews, FakeActions(fail=True), host, clock=lambda: 0.0)
        press(ctl, "ctrl+y")
        assert host.results == []
        assert ctl.state.notice.text.startswith("Paste failed")


class TestNotices:
    """Tests for notice expiry."""

    def test_notice_expires_when_timer_fires(self, controller, host):
        controller.show_notice("hello")
        assert host.timers[-1].delay == NOTICE_SECONDS
        host.timers[-1].fire()
        assert controller.state.notice is None

    def test_new_notice_stops_old_timer(self, controller, host):
        controller.show_notice("first")
        controller.show_notice("second")
        assert host.timers[0].stopped
        host.timers[1].fire()
        assert controller.state.notice is None

    def test_stale_expiry_keeps_newer_notice(self, controller, host):
        controller.show_notice("first")
        first_timer = host.timers[0]
        controller.show_notice("second")
        first_timer.callback()
        assert controller.state.notice.text == "second"

    def test_expiry_after_dispose_is_ignored(self, controller, host):
        controller.show_notice("hello")
        timer = host.timers[-1]
        controller.dispose()
        assert timer.stopped
        invalidations = host.invalidations
        timer.callback()
        assert host.invalidations == invalidations


class TestBackgroundLoad:
    """Tests for the all-scope loader hooked to the controller."""

    @pytest.fixture
    def wide_index(self, three_sessions):
        elsewhere = make_session("/other/z.jsonl", minutes_ago=1, first_message="Elsewhere", cwd="/other")
        source = FakeSource(current=three_sessions, all_sessions=three_sessions + [elsewhere])
        idx = SessionIndex(source, active_key="/s/a.jsonl", preview_cache=PreviewCache())
        idx.load_current()
        return idx

    def make(self, idx, host):
        previews = PreviewExtractor(idx.source.read_raw_log, idx.preview_cache)
        return SwitcherController(idx, previews, FakeActions(), host, clock=lambda: 0.0)

    def test_progress_then_ready(self, wide_index, host):
        ctl = self.make(wide_index, host)
        posted = []

        def dispatch(fn, *args):
            posted.append(fn.__name__)
            fn(*args)

        ctl.start_background_load(dispatch).run()

        assert posted == ["on_progress"] * 4 + ["on_all_loaded"]
        assert wide_index.all_loaded
        assert wide_index.progress is None

    def test_all_scope_refreshed_when_ready(self, wide_index, host):
        ctl = self.make(wide_index, host)
        press(ctl, "tab")
        assert ctl.state.scope is Scope.ALL
        assert len(ctl.state.filtered) == 3

        ctl.start_background_load().run()

        assert [s.path for s in ctl.state.filtered][0] == "/other/z.jsonl"
        assert len(ctl.state.filtered) == 4

    def test_loading_line_until_ready(self, wide_index, host):
        ctl = self.make(wide_index, host)
        press(ctl, "tab")
        wide_index.progress = (2, 4)
        assert "Loading all sessions… 2/4" in "\n".join(line.plain for line in ctl.render(100))

    @pytest.fixture
    def rescanned_index(self, three_sessions):
        """All-scope scan returns its own copies, as a fresh read from disk does."""
        copies = [replace(s) for s in three_sessions]
        elsewhere = make_session("/other/z.jsonl", minutes_ago=1, first_message="Elsewhere", cwd="/other")
        source = FakeSource(current=three_sessions, all_sessions=copies + [elsewhere])
        idx = SessionIndex(source, active_key="/s/a.jsonl", preview_cache=PreviewCache())
        idx.load_current()
        return idx

    def test_session_deleted_during_scan_stays_gone(self, rescanned_index, host):
        ctl = self.make(rescanned_index, host)
        loader = ctl.start_background_load()
        press(ctl, "down", "ctrl+d")

        loader.run()
        press(ctl, "tab")

        assert [s.path for s in ctl.state.filtered] == ["/other/z.jsonl", "/s/a.jsonl", "/s/c.jsonl"]

    def test_rename_during_scan_survives(self, rescanned_index, host):
        ctl = self.make(rescanned_index, host)
        loader = ctl.start_background_load()
        press(ctl, "down", "ctrl+r")
        type_text(ctl, "Login")
        press(ctl, "enter")

        loader.run()
        press(ctl, "tab")

        renamed = [s for s in ctl.state.filtered if s.path == "/s/b.jsonl"]
        assert [s.label for s in renamed] == ["Login"]

    def test_late_results_after_close_ignored(self, wide_index, host):
        ctl = self.make(wide_index, host)
        loader = ctl.start_background_load()
        press(ctl, "escape")
        invalidations = host.invalidations

        loader.run()

        assert loader.cancelled
        assert not wide_index.all_loaded
        assert host.invalidations == invalidations

    def test_direct_callbacks_after_dispose_ignored(self, wide_index, host):
        ctl = self.make(wide_index, host)
        ctl.dispose()
        ctl.on_progress(1, 4)
        ctl.on_all_loaded([])
        ctl.on_load_failed(OSError("x"))
        assert wide_index.progress is None
        assert not wide_index.all_loaded
        assert ctl.state.notice is None

    def test_failure_shows_notice(self, three_sessions, host):
        source = FakeSource(current=three_sessions, fail_all=True)
        idx = SessionIndex(source, active_key="/s/a.jsonl", preview_cache=PreviewCache())
        idx.load_current()
        ctl = self.make(idx, host)
        ctl.start_background_load().run()
        assert ctl.state.notice.text == "Could not load all sessions"
        assert not idx.all_loaded

        host.timers[-1].fire()
        press(ctl, "tab")
        text = "\n".join(line.plain for line in ctl.render(100))
        assert ctl.state.notice is None
        assert "Loading all sessions" not in text
        assert [s.path for s in ctl.state.filtered] == ["/s/a.jsonl", "/s/b.jsonl", "/s/c.jsonl"]


class TestDispose:
    def test_dispose_clears_preview_cache(self, controller, previews):
        controller.render(100)
        assert len(previews.cache) > 0
        controller.dispose()
        assert len(previews.cache) == 0

    def test_dispose_twice(self, controller):
        controller.start_background_load()
        controller.dispose()
        controller.dispose()
        assert controller.loader.cancelled

    def test_no_invalidate_after_dispose(self, controller, host):
        controller.dispose()
        controller.invalidate()
        assert host.invalidations == 0
