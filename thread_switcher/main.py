#!/usr/bin/env python3
"""Thread Switcher - pick a session with a live preview and switch to it.

Entry point for the CLI application.
"""

import argparse
import logging
import sys
from typing import Optional

from .config import SwitcherConfig, load_config, setup_logging

logger = logging.getLogger(__name__)


def run_switcher(config: SwitcherConfig) -> int:
    """Open the switcher and act on what was picked. Returns an exit code."""
    from .app import ThreadSwitcherApp
    from .index import SessionIndex
    from .preview import PreviewCache, PreviewExtractor
    from .render import get_layout
    from .sources import (
        CommandSwitchAction,
        FileSessionActions,
        JsonlSessionSource,
        SessionLoadError,
    )

    source = JsonlSessionSource(config.sessions_dir, config.cwd)
    cache = PreviewCache()
    index = SessionIndex(source, active_key=config.active_session, preview_cache=cache)

    try:
        sessions = index.load_current()
    except SessionLoadError as e:
        logger.error(f"Failed to load sessions: {e}")
        print(f"Failed to load sessions: {e}", file=sys.stderr)
        return 1

    if not sessions:
        print(f"No sessions found for {config.cwd}", file=sys.stderr)
        return 0

    cache.clear()
    previews = PreviewExtractor(source.read_raw_log, cache)
    actions = FileSessionActions(active_path=config.active_session)

    app = ThreadSwitcherApp(index, previews, actions, layout=get_layout(config.layout))
    result = app.run()

    if actions.pasted is not None:
        print(actions.pasted)
        return 0

    if not result or not isinstance(result, str):
        return 0

    outcome = CommandSwitchAction(config.resume_command).switch_to(result)
    if outcome.cancelled:
        detail = f" ({outcome.message})" if outcome.message else ""
        print(f"Session switch cancelled{detail}", file=sys.stderr)
    return 0


def main(argv: Optional[list[str]] = None):
    """Main entry point for the thread-switcher CLI."""
    parser = argparse.ArgumentParser(
        description="Switch between sessions with a live preview",
        prog="thread-switcher",
    )
    parser.add_argument(
        "--version", "-v",
        action="store_true",
        help="Show version"
    )
    args = parser.parse_args(argv)

    if args.version:
        from . import __version__
        print(f"thread-switcher {__version__}")
        return 0

    config = load_config()
    setup_logging(config)
    return run_switcher(config)


if __name__ == "__main__":
    sys.exit(main())
