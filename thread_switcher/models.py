"""Session and picker models shared by the switcher."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


_WHITESPACE = re.compile(r"\s+")


class Role(Enum):
    """Kind of a preview line. ``GAP`` separates user turns and has no text."""

    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"
    GAP = "gap"


class Scope(Enum):
    """Which pool of sessions feeds the list."""

    CURRENT = "current"
    ALL = "all"

    @property
    def other(self) -> "Scope":
        return Scope.ALL if self is Scope.CURRENT else Scope.CURRENT


@dataclass
class SessionSummary:
    """One session as listed by the switcher."""

    # Identity
    path: str  # session file, also the key used by every collaborator

    # Content
    first_message: str = ""
    message_count: int = 0
    name: Optional[str] = None  # user-set display name

    # Context
    modified: datetime = field(default_factory=datetime.now)
    cwd: str = ""

    # Derived when the pool is built
    is_current: bool = False

    @property
    def label(self) -> str:
        """Name, else first message on one line, else ``(empty)``."""
        if self.name:
            return self.name
        first = self.first_message.strip()
        if not first:
            return "(empty)"
        return _WHITESPACE.sub(" ", first)


@dataclass(frozen=True)
class PreviewLine:
    """A single line of the session preview."""

    role: Role
    text: str = ""


@dataclass
class RenameDraft:
    """In-progress rename of ``target``."""

    target: SessionSummary
    text: str = ""


@dataclass
class Notice:
    """Transient status message shown inside the picker."""

    text: str
    level: str = "info"  # "info", "warning" or "error"
    expires_at: float = 0.0  # time.monotonic() deadline, 0 = until replaced


@dataclass
class PickerState:
    """Everything the picker needs to draw itself and react to input."""

    scope: Scope = Scope.CURRENT
    query: str = ""
    selected: int = 0
    list_scroll: int = 0
    preview_scroll: int = 0  # lines scrolled back from the tail
    filtered: list[SessionSummary] = field(default_factory=list)
    rename: Optional[RenameDraft] = None
    notice: Optional[Notice] = None

    @property
    def current(self) -> Optional[SessionSummary]:
        """The highlighted session, if any."""
        if 0 <= self.selected < len(self.filtered):
            return self.filtered[self.selected]
        return None


@dataclass(frozen=True)
class SwitchResult:
    """Outcome of handing a session to the host for switching."""

    cancelled: bool = False
    message: str = ""
