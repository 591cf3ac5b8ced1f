"""CSS styles for the thread switcher TUI."""

APP_CSS = """
Screen {
    layout: vertical;
    overflow: hidden;
}

#switcher {
    width: 100%;
    height: 100%;
    padding: 0;
}
"""
