"""Keyboard input to picker events.

Two front doors: ``decode_input`` for raw terminal bytes and
``event_for_key`` for hosts (like Textual) that already name their keys.
"""

from typing import Optional, Union

from .state import (
    BeginRename,
    Cancel,
    Confirm,
    DeleteChar,
    DeleteSelected,
    Event,
    InsertText,
    MoveSelection,
    PasteFirstMessage,
    ScrollPreview,
    ToggleScope,
)

PAGE_SCROLL = 10

KEY_EVENTS: dict[str, Event] = {
    "escape": Cancel(),
    "enter": Confirm(),
    "up": MoveSelection(-1),
    "down": MoveSelection(1),
    "shift+up": ScrollPreview(1),
    "shift+down": ScrollPreview(-1),
    "pageup": ScrollPreview(PAGE_SCROLL),
    "pagedown": ScrollPreview(-PAGE_SCROLL),
    "tab": ToggleScope(),
    "ctrl+t": ToggleScope(),
    "backspace": DeleteChar(),
    "ctrl+r": BeginRename(),
    "ctrl+d": DeleteSelected(),
    "ctrl+y": PasteFirstMessage(),
}

# Raw terminal sequences for the keys above
SEQUENCES: dict[str, str] = {
    "\x1b": "escape",
    "\r": "enter",
    "\n": "enter",
    "\x1b[A": "up",
    "\x1bOA": "up",
    "\x1b[B": "down",
    "\x1bOB": "down",
    "\x1b[1;2A": "shift+up",
    "\x1b[1;2B": "shift+down",
    "\x1b[5~": "pageup",
    "\x1b[6~": "pagedown",
    "\t": "tab",
    "\x14": "ctrl+t",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x12": "ctrl+r",
    "\x04": "ctrl+d",
    "\x19": "ctrl+y",
}


def is_printable(text: str) -> bool:
    return bool(text) and all(ch >= " " and ch != "\x7f" for ch in text)


def event_for_key(key: str, character: Optional[str] = None) -> Optional[Event]:
    """Event for a named key; printable characters become text input."""
    event = KEY_EVENTS.get(key)
    if event is not None:
        return event
    if character and is_printable(character):
        return InsertText(character)
    return None


def decode_input(data: Union[bytes, str]) -> Optional[Event]:
    """Event for one chunk of raw terminal input, or None if not bound."""
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="ignore")
    key = SEQUENCES.get(data)
    if key is not None:
        return KEY_EVENTS[key]
    if is_printable(data):
        return InsertText(data)
    return None
