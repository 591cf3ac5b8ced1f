"""UI components for the thread switcher."""

from .widgets import SwitcherView
from .styles import APP_CSS

__all__ = [
    "SwitcherView",
    "APP_CSS",
]
