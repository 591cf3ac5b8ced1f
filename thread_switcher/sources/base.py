"""Collaborator interfaces the switcher talks to."""

from abc import ABC, abstractmethod
from typing import Callable

from ..models import SessionSummary, SwitchResult

ProgressCallback = Callable[[int, int], None]


class SessionLoadError(Exception):
    """Sessions could not be enumerated at all."""


class SessionSource(ABC):
    """Where session summaries and raw logs come from."""

    @abstractmethod
    def list_current_scope(self) -> list[SessionSummary]:
        """Sessions of the current working context. Must be quick."""
        ...

    @abstractmethod
    def list_all_scope(self, on_progress: ProgressCallback) -> list[SessionSummary]:
        """Every known session, reporting (loaded, total) as it goes."""
        ...

    @abstractmethod
    def read_raw_log(self, path: str) -> str:
        """Raw log content of one session. May raise."""
        ...


class SessionActions(ABC):
    """Session management actions available from inside the picker."""

    @abstractmethod
    def rename_active(self, name: str) -> None:
        """Set the display name of the session the host is running."""
        ...

    @abstractmethod
    def rename_file(self, path: str, name: str) -> None:
        """Set the display name of some other session file."""
        ...

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove the underlying session."""
        ...

    @abstractmethod
    def insert_into_editor(self, text: str) -> None:
        """Hand text to the host's input editor."""
        ...


class SwitchAction(ABC):
    """Makes a chosen session the active one."""

    @abstractmethod
    def switch_to(self, path: str) -> SwitchResult:
        ...
