"""Switcher controller: input in, effects out, lines to draw."""

import logging
import time
from datetime import datetime
from typing import Any, Callable, Optional, Protocol, Union

from rich.text import Text

from .index import SessionIndex
from .keys import decode_input, event_for_key
from .loader import AllScopeLoader, Dispatch, LoadListener
from .models import Notice, PickerState, Scope, SessionSummary
from .preview import PreviewExtractor
from .render import Frame, OverlayLayout, view_context
from .sources.base import SessionActions
from .state import (
    Close,
    CommitRename,
    DeleteSession,
    Effect,
    Event,
    PasteText,
    SwitchTo,
    ViewContext,
    apply_event,
    ensure_visible,
    refilter,
)

logger = logging.getLogger(__name__)

NOTICE_SECONDS = 2.0


class Host(Protocol):
    """What the controller needs from the surface it is drawn on."""

    def size(self) -> tuple[int, int]:
        """Current (width, height); asked on every render."""
        ...

    def invalidate(self) -> None:
        """Request a repaint."""
        ...

    def set_timer(self, delay: float, callback: Callable[[], Any]) -> Any:
        """Call back once after delay seconds; return an object with stop()."""
        ...

    def done(self, result: Optional[str]) -> None:
        """The picker finished with a session path, or None."""
        ...


class SwitcherController(LoadListener):
    """Owns the picker state for one invocation of the switcher."""

    def __init__(
        self,
        index: SessionIndex,
        previews: PreviewExtractor,
        actions: SessionActions,
        host: Host,
        layout=None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.index = index
        self.previews = previews
        self.actions = actions
        self.host = host
        self.layout = layout or OverlayLayout()
        self.clock = clock

        self.state = PickerState()
        self.focused = True
        self.alive = True
        self.finished = False
        self.result: Optional[str] = None
        self.loader: Optional[AllScopeLoader] = None
        self._notice_timer = None

        refilter(self.state, self.index)

    # -- frame --

    def _frame(self, width: Optional[int] = None) -> Frame:
        host_width, height = self.host.size()
        return Frame(
            state=self.state,
            previews=self.previews,
            width=host_width if width is None else width,
            height=height,
            progress=self.index.progress,
            all_loaded=self.index.all_loaded,
            load_failed=self.index.load_failed,
            focused=self.focused,
            now=datetime.now(),
            clock=self.clock(),
        )

    def view_context(self) -> ViewContext:
        return view_context(self.layout, self._frame())

    def render(self, width: int) -> list[Text]:
        frame = self._frame(width)
        ensure_visible(self.state, self.layout.list_capacity(self.state, frame.height))
        return self.layout.render(frame)

    def invalidate(self):
        if self.alive:
            self.host.invalidate()

    # -- input --

    def handle_input(self, data: Union[bytes, str]) -> bool:
        """Feed raw terminal input. Returns True if it was understood."""
        event = decode_input(data)
        if event is None:
            return False
        self.handle_event(event)
        return True

    def handle_key(self, key: str, character: Optional[str] = None) -> bool:
        """Feed a named key from the host. Returns True if it was understood."""
        event = event_for_key(key, character)
        if event is None:
            return False
        self.handle_event(event)
        return True

    def handle_event(self, event: Event):
        if not self.alive:
            return
        before = self.state.notice
        effect = apply_event(self.state, event, self.index, self.view_context())
        if self.state.notice is not None and self.state.notice is not before and not self.state.notice.expires_at:
            self.show_notice(self.state.notice.text, self.state.notice.level)
        if effect is not None:
            self._perform(effect)
        self.invalidate()

    # -- effects --

    def _perform(self, effect: Effect):
        if isinstance(effect, SwitchTo):
            self.finish(effect.path)
        elif isinstance(effect, Close):
            self.finish(None)
        elif isinstance(effect, PasteText):
            self._paste(effect.text)
        elif isinstance(effect, CommitRename):
            self._rename(effect.session, effect.name)
        elif isinstance(effect, DeleteSession):
            self._delete(effect.session)
        else:
            raise TypeError(f"Unknown effect: {effect!r}")

    def _paste(self, text: str):
        try:
            self.actions.insert_into_editor(text)
        except Exception as e:
            logger.exception("Paste into editor failed")
            self.show_notice(f"Paste failed: {e}", "error")
            return
        self.finish(None)

    def _rename(self, session: SessionSummary, name: str):
        try:
            if session.path == self.index.active_key:
                self.actions.rename_active(name)
            else:
                self.actions.rename_file(session.path, name)
        except Exception as e:
            logger.exception(f"Rename failed for {session.path}")
            self.show_notice(f"Rename failed: {e}", "error")
            return
        self.index.rename(session.path, name)
        self.show_notice(f"Renamed to {name}" if name else "Name cleared")

    def _delete(self, session: SessionSummary):
        try:
            self.actions.delete(session.path)
        except Exception as e:
            logger.exception(f"Delete failed for {session.path}")
            self.show_notice(f"Delete failed: {e}", "error")
            return
        self.index.remove(session.path)
        refilter(self.state, self.index)
        ensure_visible(self.state, self.view_context().visible_count)
        self.show_notice("Session deleted")

    # -- notices --

    def show_notice(self, text: str, level: str = "info"):
        notice = Notice(text, level, expires_at=self.clock() + NOTICE_SECONDS)
        self.state.notice = notice
        self._stop_notice_timer()
        self._notice_timer = self.host.set_timer(NOTICE_SECONDS, lambda: self._expire_notice(notice))

    def _expire_notice(self, notice: Notice):
        if not self.alive:
            return
        if self.state.notice is not notice:
            return
        self.state.notice = None
        self._notice_timer = None
        self.invalidate()

    def _stop_notice_timer(self):
        if self._notice_timer is not None:
            self._notice_timer.stop()
            self._notice_timer = None

    # -- background load --

    def start_background_load(self, dispatch: Optional[Dispatch] = None) -> AllScopeLoader:
        """Create the all-scope loader; the host decides where run() happens."""
        self.loader = AllScopeLoader(self.index, self, dispatch)
        return self.loader

    def on_progress(self, loaded: int, total: int) -> None:
        if not self.alive:
            return
        self.index.progress = (loaded, total)
        self.invalidate()

    def on_all_loaded(self, sessions: list[SessionSummary]) -> None:
        if not self.alive:
            return
        self.index.set_all_pool(sessions)
        if self.state.scope is Scope.ALL:
            refilter(self.state, self.index)
            ensure_visible(self.state, self.view_context().visible_count)
            self.invalidate()

    def on_load_failed(self, error: Exception) -> None:
        if not self.alive:
            return
        self.index.mark_load_failed()
        self.show_notice("Could not load all sessions", "error")
        self.invalidate()

    # -- lifecycle --

    def finish(self, result: Optional[str]):
        if self.finished:
            return
        self.finished = True
        self.result = result
        self.dispose()
        self.host.done(result)

    def dispose(self):
        """Drop everything tied to this invocation. Safe to call twice."""
        self.alive = False
        if self.loader is not None:
            self.loader.cancel()
        self._stop_notice_timer()
        self.previews.cache.clear()
