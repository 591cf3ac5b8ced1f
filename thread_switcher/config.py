"""Configuration for the thread switcher, read from the environment."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_SESSIONS_DIR = Path.home() / ".pi" / "agent" / "sessions"
DEFAULT_LAYOUT = "overlay"
DEFAULT_RESUME_COMMAND = "pi --session {path}"
LOG_DIR = Path.home() / ".cache" / "thread-switcher"
LOG_FILE = LOG_DIR / "thread-switcher.log"

LAYOUTS = ("overlay", "stacked")

ENV_PREFIX = "THREAD_SWITCHER_"


@dataclass
class SwitcherConfig:
    """Thread switcher configuration."""

    sessions_dir: Path = field(default_factory=lambda: DEFAULT_SESSIONS_DIR)
    cwd: str = field(default_factory=os.getcwd)
    layout: str = DEFAULT_LAYOUT
    active_session: Optional[str] = None  # path of the session the host is running
    resume_command: str = DEFAULT_RESUME_COMMAND  # "{path}" is replaced
    log_level: Optional[str] = None  # file logging is off unless set


def load_config(environ: Optional[Mapping[str, str]] = None) -> SwitcherConfig:
    """Build the configuration from THREAD_SWITCHER_* variables."""
    env = os.environ if environ is None else environ
    config = SwitcherConfig()

    sessions_dir = env.get(f"{ENV_PREFIX}SESSIONS_DIR")
    if sessions_dir:
        config.sessions_dir = Path(sessions_dir).expanduser()

    layout = env.get(f"{ENV_PREFIX}LAYOUT", "").strip().lower()
    if layout in LAYOUTS:
        config.layout = layout
    elif layout:
        logger.warning(f"Unknown layout {layout!r}, using {DEFAULT_LAYOUT}")

    active = env.get(f"{ENV_PREFIX}ACTIVE_SESSION")
    if active:
        config.active_session = str(Path(active).expanduser())

    resume = env.get(f"{ENV_PREFIX}RESUME_COMMAND")
    if resume:
        config.resume_command = resume

    log_level = env.get(f"{ENV_PREFIX}LOG_LEVEL")
    if log_level:
        config.log_level = log_level.upper()

    return config


def setup_logging(config: SwitcherConfig, log_file: Path = LOG_FILE):
    """Send log records to a file; the terminal belongs to the TUI."""
    if not config.log_level:
        logging.getLogger("thread_switcher").addHandler(logging.NullHandler())
        return
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(log_file),
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
