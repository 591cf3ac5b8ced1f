"""Thread Switcher - session picker with a live preview."""

__version__ = "0.1.0"
