"""Background loading of the all-sessions pool."""

import logging
import threading
from typing import Callable, Optional

from .index import SessionIndex
from .models import SessionSummary

logger = logging.getLogger(__name__)

Dispatch = Callable[..., None]


class LoadListener:
    """Receives loader updates on the UI thread."""

    def on_progress(self, loaded: int, total: int) -> None:
        pass

    def on_all_loaded(self, sessions: list[SessionSummary]) -> None:
        pass

    def on_load_failed(self, error: Exception) -> None:
        pass


class AllScopeLoader:
    """Runs SessionIndex.load_all() and posts the results back.

    ``dispatch(fn, *args)`` must run ``fn`` on the UI thread; Textual's
    ``App.call_from_thread`` fits. Nothing is posted once cancel() has been
    called.
    """

    def __init__(self, index: SessionIndex, listener: LoadListener, dispatch: Optional[Dispatch] = None):
        self.index = index
        self.listener = listener
        self.dispatch = dispatch or (lambda fn, *args: fn(*args))
        self._cancelled = threading.Event()
        self.finished = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self):
        self._cancelled.set()

    def _post(self, fn: Callable, *args):
        if self.cancelled:
            return
        self.dispatch(fn, *args)

    def _progress(self, loaded: int, total: int):
        self._post(self.listener.on_progress, loaded, total)

    def run(self):
        """Blocking load; call from a worker thread."""
        try:
            sessions = self.index.load_all(self._progress)
        except Exception as e:
            logger.warning(f"Loading all sessions failed: {e}")
            self._post(self.listener.on_load_failed, e)
        else:
            logger.debug(f"Loaded {len(sessions)} sessions in all scope")
            self._post(self.listener.on_all_loaded, sessions)
        finally:
            self.finished = True

    def start(self) -> threading.Thread:
        """Run in a daemon thread (for hosts without their own workers)."""
        thread = threading.Thread(target=self.run, name="thread-switcher-load-all", daemon=True)
        thread.start()
        return thread
