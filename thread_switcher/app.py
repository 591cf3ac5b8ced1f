"""Thread Switcher TUI application."""

import logging
from typing import Any, Callable, Optional

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.css.query import NoMatches
from textual.worker import Worker, WorkerState

from .controller import SwitcherController
from .index import SessionIndex
from .preview import PreviewExtractor
from .render import OverlayLayout
from .sources.base import SessionActions
from .ui import APP_CSS, SwitcherView

logger = logging.getLogger(__name__)


class TextualHost:
    """Adapts a running Textual app to the controller's host interface."""

    def __init__(self, app: "ThreadSwitcherApp"):
        self.app = app

    def size(self) -> tuple[int, int]:
        size = self.app.size
        return size.width, size.height

    def invalidate(self) -> None:
        self.app.refresh_view()

    def set_timer(self, delay: float, callback: Callable[[], Any]) -> Any:
        return self.app.set_timer(delay, callback)

    def done(self, result: Optional[str]) -> None:
        self.app.exit(result)


class ThreadSwitcherApp(App[Optional[str]]):
    """Full-screen session picker with a live preview.

    Exits with the chosen session path, or None.
    """

    CSS = APP_CSS
    ENABLE_COMMAND_PALETTE = False

    BINDINGS = [
        Binding("tab", "toggle_scope", "Scope", show=False, priority=True),
        Binding("ctrl+t", "toggle_scope", "Scope", show=False, priority=True),
    ]

    def __init__(
        self,
        index: SessionIndex,
        previews: PreviewExtractor,
        actions: SessionActions,
        layout=None,
    ):
        super().__init__()
        self.controller = SwitcherController(
            index,
            previews,
            actions,
            host=TextualHost(self),
            layout=layout or OverlayLayout(),
        )

    def compose(self) -> ComposeResult:
        yield SwitcherView(self.controller, id="switcher")

    def on_mount(self):
        self.title = "Threads"
        self.query_one(SwitcherView).focus()
        self.controller.start_background_load(self.call_from_thread)
        self._load_all_sessions()

    def on_unmount(self):
        self.controller.dispose()

    def refresh_view(self):
        if not self.is_running:
            return
        try:
            view = self.query_one(SwitcherView)
        except NoMatches:
            return
        view.refresh()

    @work(thread=True, exit_on_error=False)
    def _load_all_sessions(self):
        """Enumerate every session in the background."""
        loader = self.controller.loader
        if loader is not None:
            loader.run()

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if event.state is WorkerState.ERROR:
            logger.error(f"Worker {event.worker.name} failed: {event.worker.error}")
            self.notify(f"Background task failed: {event.worker.error}", severity="error", timeout=3)

    def action_toggle_scope(self):
        self.controller.handle_key("tab")
