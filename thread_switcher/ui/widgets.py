"""UI widgets for the thread switcher TUI."""

from typing import Optional

from rich.text import Text
from textual import events
from textual.widget import Widget

from ..controller import SwitcherController


class SwitcherView(Widget, can_focus=True):
    """Draws the controller's lines and feeds it key presses."""

    def __init__(self, controller: SwitcherController, id: Optional[str] = None):
        super().__init__(id=id)
        self.controller = controller

    def render(self) -> Text:
        width = self.size.width
        if width <= 0 or self.size.height <= 0:
            return Text("")
        lines = self.controller.render(width)[: self.size.height]
        text = Text("\n").join(lines)
        text.no_wrap = True
        return text

    def on_key(self, event: events.Key) -> None:
        if self.controller.handle_key(event.key, event.character):
            event.stop()
            event.prevent_default()

    def on_focus(self, event: events.Focus) -> None:
        self.controller.focused = True
        self.refresh()

    def on_blur(self, event: events.Blur) -> None:
        self.controller.focused = False
        self.refresh()
