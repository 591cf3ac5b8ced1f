"""Session sources and host actions."""

from .base import (
    ProgressCallback,
    SessionActions,
    SessionLoadError,
    SessionSource,
    SwitchAction,
)
from .jsonl import (
    CommandSwitchAction,
    FileSessionActions,
    JsonlSessionSource,
    encode_cwd,
    parse_session_file,
)

__all__ = [
    "ProgressCallback",
    "SessionActions",
    "SessionLoadError",
    "SessionSource",
    "SwitchAction",
    "CommandSwitchAction",
    "FileSessionActions",
    "JsonlSessionSource",
    "encode_cwd",
    "parse_session_file",
]
