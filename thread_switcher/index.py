"""Session pools for the current and all scopes."""

import logging
from typing import Optional

from .fuzzy import fuzzy_filter
from .models import Scope, SessionSummary
from .preview import PreviewCache
from .sources.base import ProgressCallback, SessionLoadError, SessionSource

logger = logging.getLogger(__name__)


def sort_by_recency(sessions: list[SessionSummary]) -> list[SessionSummary]:
    """Most recently modified first."""
    return sorted(sessions, key=lambda s: s.modified, reverse=True)


class SessionIndex:
    """Holds the two session pools and derives filtered views from them.

    The current pool is available from the start; the all pool arrives
    later from a background load. Until it does, the all scope shows the
    current pool.

    Renames and removals are remembered so a pool that arrives after them
    (scanned before they happened) is brought up to date on install.
    """

    def __init__(
        self,
        source: SessionSource,
        active_key: Optional[str] = None,
        preview_cache: Optional[PreviewCache] = None,
    ):
        self.source = source
        self.active_key = active_key
        self.preview_cache = preview_cache
        self.current_pool: list[SessionSummary] = []
        self.all_pool: Optional[list[SessionSummary]] = None
        self.progress: Optional[tuple[int, int]] = None
        self.load_failed = False
        self._removed: set[str] = set()
        self._renamed: dict[str, Optional[str]] = {}

    def _prepare(self, sessions: list[SessionSummary]) -> list[SessionSummary]:
        for session in sessions:
            session.is_current = session.path == self.active_key
        return sort_by_recency(sessions)

    def load_current(self) -> list[SessionSummary]:
        """Load the current-scope pool synchronously."""
        try:
            sessions = self.source.list_current_scope()
        except SessionLoadError:
            raise
        except Exception as e:
            raise SessionLoadError(str(e)) from e
        self.current_pool = self._prepare(sessions)
        return self.current_pool

    def load_all(self, on_progress: ProgressCallback) -> list[SessionSummary]:
        """Enumerate every session. Safe to call off the UI thread.

        The result is not installed; hand it to set_all_pool() from the UI
        thread.
        """
        return self._prepare(self.source.list_all_scope(on_progress))

    def set_all_pool(self, sessions: list[SessionSummary]):
        pool = [s for s in sessions if s.path not in self._removed]
        for session in pool:
            if session.path in self._renamed:
                session.name = self._renamed[session.path]
        self.all_pool = pool
        self.progress = None
        self.load_failed = False

    def mark_load_failed(self):
        """The all pool will not arrive; the all scope keeps the current pool."""
        self.load_failed = True
        self.progress = None

    @property
    def all_loaded(self) -> bool:
        return self.all_pool is not None

    def pool(self, scope: Scope) -> list[SessionSummary]:
        if scope is Scope.ALL and self.all_pool is not None:
            return self.all_pool
        return self.current_pool

    def filter(self, scope: Scope, query: str) -> list[SessionSummary]:
        """Sessions of scope matching query. The pool itself is untouched."""
        return fuzzy_filter(self.pool(scope), query, lambda s: s.label)

    def find(self, key: str) -> list[SessionSummary]:
        """Every pooled summary for key (one per pool at most)."""
        pools = [self.current_pool] + ([self.all_pool] if self.all_pool is not None else [])
        return [s for pool in pools for s in pool if s.path == key]

    def rename(self, key: str, name: str):
        self._renamed[key] = name or None
        for session in self.find(key):
            session.name = name or None

    def remove(self, key: str):
        self._removed.add(key)
        self.current_pool = [s for s in self.current_pool if s.path != key]
        if self.all_pool is not None:
            self.all_pool = [s for s in self.all_pool if s.path != key]
        if self.preview_cache is not None:
            self.preview_cache.invalidate(key)
