"""Picker state transitions.

Every input the picker understands is an event; ``apply_event`` is the one
place where PickerState changes in response to input. Anything that needs
the outside world (switching, renaming, deleting, pasting) comes back as an
effect for the controller to carry out.
"""

from dataclasses import dataclass
from typing import Optional, Union

from .index import SessionIndex
from .models import Notice, PickerState, RenameDraft, Scope, SessionSummary


# -- events --

@dataclass(frozen=True)
class MoveSelection:
    delta: int


@dataclass(frozen=True)
class ScrollPreview:
    delta: int  # positive scrolls back towards the start of the session


@dataclass(frozen=True)
class ToggleScope:
    pass


@dataclass(frozen=True)
class InsertText:
    text: str


@dataclass(frozen=True)
class DeleteChar:
    pass


@dataclass(frozen=True)
class BeginRename:
    pass


@dataclass(frozen=True)
class Confirm:
    pass


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class DeleteSelected:
    pass


@dataclass(frozen=True)
class PasteFirstMessage:
    pass


Event = Union[
    MoveSelection,
    ScrollPreview,
    ToggleScope,
    InsertText,
    DeleteChar,
    BeginRename,
    Confirm,
    Cancel,
    DeleteSelected,
    PasteFirstMessage,
]


# -- effects --

@dataclass(frozen=True)
class SwitchTo:
    path: str


@dataclass(frozen=True)
class Close:
    pass


@dataclass(frozen=True)
class CommitRename:
    session: SessionSummary
    name: str


@dataclass(frozen=True)
class DeleteSession:
    session: SessionSummary


@dataclass(frozen=True)
class PasteText:
    text: str


Effect = Union[SwitchTo, Close, CommitRename, DeleteSession, PasteText]

# Effects that end the interactive loop
TERMINAL_EFFECTS = (SwitchTo, Close, PasteText)


@dataclass(frozen=True)
class ViewContext:
    """Layout facts transitions need: list capacity and preview scroll limit."""

    visible_count: int = 10
    max_preview_scroll: int = 0


# -- helpers --

def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def ensure_visible(state: PickerState, visible_count: int):
    """Move the list window the least needed to keep the selection on screen."""
    visible_count = max(1, visible_count)
    if state.selected < state.list_scroll:
        state.list_scroll = state.selected
    elif state.selected >= state.list_scroll + visible_count:
        state.list_scroll = state.selected - visible_count + 1
    max_scroll = max(0, len(state.filtered) - visible_count)
    state.list_scroll = clamp(state.list_scroll, 0, max_scroll)


def refilter(state: PickerState, index: SessionIndex):
    """Recompute the filtered list after the query, scope or pool changed."""
    state.filtered = index.filter(state.scope, state.query)
    state.selected = clamp(state.selected, 0, max(0, len(state.filtered) - 1))
    state.list_scroll = 0
    state.preview_scroll = 0


def notice(state: PickerState, text: str, level: str = "info"):
    state.notice = Notice(text, level)


# -- transitions --

def _apply_rename(state: PickerState, event: Event) -> Optional[Effect]:
    draft = state.rename
    if isinstance(event, InsertText):
        draft.text += event.text
    elif isinstance(event, DeleteChar):
        draft.text = draft.text[:-1]
    elif isinstance(event, Confirm):
        state.rename = None
        return CommitRename(draft.target, draft.text.strip())
    elif isinstance(event, Cancel):
        state.rename = None
    # everything else is swallowed while renaming
    return None


def apply_event(
    state: PickerState,
    event: Event,
    index: SessionIndex,
    ctx: ViewContext = ViewContext(),
) -> Optional[Effect]:
    """Apply one input event to state, returning the effect it asks for."""
    if state.rename is not None:
        return _apply_rename(state, event)

    if isinstance(event, MoveSelection):
        target = clamp(state.selected + event.delta, 0, max(0, len(state.filtered) - 1))
        if target != state.selected:
            state.selected = target
            state.preview_scroll = 0
        ensure_visible(state, ctx.visible_count)
        return None

    if isinstance(event, ScrollPreview):
        state.preview_scroll = clamp(state.preview_scroll + event.delta, 0, max(0, ctx.max_preview_scroll))
        return None

    if isinstance(event, ToggleScope):
        state.scope = state.scope.other
        state.selected = 0
        refilter(state, index)
        ensure_visible(state, ctx.visible_count)
        return None

    if isinstance(event, InsertText):
        if event.text:
            state.query += event.text
            refilter(state, index)
            ensure_visible(state, ctx.visible_count)
        return None

    if isinstance(event, DeleteChar):
        if state.query:
            state.query = state.query[:-1]
            refilter(state, index)
            ensure_visible(state, ctx.visible_count)
        return None

    if isinstance(event, BeginRename):
        session = state.current
        if session is not None:
            state.rename = RenameDraft(session, session.name or "")
        return None

    if isinstance(event, Confirm):
        session = state.current
        if session is None:
            return None
        if session.is_current:
            notice(state, "Already on this session")
            return None
        return SwitchTo(session.path)

    if isinstance(event, Cancel):
        return Close()

    if isinstance(event, DeleteSelected):
        session = state.current
        if session is None:
            return None
        if session.is_current:
            notice(state, "Can't delete the active session", "warning")
            return None
        return DeleteSession(session)

    if isinstance(event, PasteFirstMessage):
        session = state.current
        if session is None:
            return None
        if not session.first_message.strip():
            notice(state, "Session has no first message", "warning")
            return None
        return PasteText(session.first_message)

    raise TypeError(f"Unknown event: {event!r}")
