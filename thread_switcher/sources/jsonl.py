"""JSONL session files on disk.

Layout::

    <sessions_dir>/--home-user-project--/<timestamp>_<id>.jsonl

The first record of a file is a ``session`` header carrying the working
directory; ``message`` records hold the conversation and ``session_info``
records carry the display name (the latest one wins).
"""

import json
import logging
import os
import shlex
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..models import SessionSummary, SwitchResult
from ..preview import decode_entries, extract_text
from .base import ProgressCallback, SessionActions, SessionLoadError, SessionSource, SwitchAction

logger = logging.getLogger(__name__)


def encode_cwd(cwd: str) -> str:
    """Directory name used for the sessions of a working directory."""
    stripped = cwd.lstrip("/\\")
    for sep in ("/", "\\", ":"):
        stripped = stripped.replace(sep, "-")
    return f"--{stripped}--"


def parse_session_file(path: Path) -> Optional[SessionSummary]:
    """Build a summary from a session file, or None if it can't be read."""
    try:
        mtime = path.stat().st_mtime
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None

    cwd = ""
    name = None
    first_message = ""
    message_count = 0

    for entry in decode_entries(raw):
        entry_type = entry.get("type")
        if entry_type == "session":
            cwd = cwd or str(entry.get("cwd") or "")
        elif entry_type == "session_info":
            if "name" in entry:
                name = entry.get("name") or None
        elif entry_type == "message":
            msg = entry.get("message")
            if not isinstance(msg, dict):
                continue
            message_count += 1
            if not first_message and msg.get("role") == "user":
                first_message = extract_text(msg.get("content")).strip()

    return SessionSummary(
        path=str(path),
        first_message=first_message,
        message_count=message_count,
        name=name,
        modified=datetime.fromtimestamp(mtime),
        cwd=cwd,
    )


class JsonlSessionSource(SessionSource):
    """Reads sessions from a directory tree of JSONL files."""

    def __init__(self, sessions_dir: Path, cwd: str):
        self.sessions_dir = Path(sessions_dir)
        self.cwd = cwd

    def get_project_dir(self) -> Path:
        return self.sessions_dir / encode_cwd(self.cwd)

    def _list_files(self, directory: Path) -> list[Path]:
        try:
            return sorted(directory.glob("*.jsonl"))
        except OSError as e:
            raise SessionLoadError(f"Cannot read {directory}: {e}") from e

    def discover_session_files(self) -> list[Path]:
        """Every session file under the sessions directory."""
        if not self.sessions_dir.exists():
            return []
        files = []
        try:
            project_dirs = sorted(p for p in self.sessions_dir.iterdir() if p.is_dir())
        except OSError as e:
            raise SessionLoadError(f"Cannot read {self.sessions_dir}: {e}") from e
        for project_dir in project_dirs:
            files.extend(self._list_files(project_dir))
        return files

    def _load(self, files: list[Path], on_progress: Optional[ProgressCallback] = None) -> list[SessionSummary]:
        sessions = []
        total = len(files)
        for i, path in enumerate(files, 1):
            session = parse_session_file(path)
            if session:
                sessions.append(session)
            else:
                logger.debug(f"Skipping unreadable session {path}")
            if on_progress:
                on_progress(i, total)
        return sessions

    def list_current_scope(self) -> list[SessionSummary]:
        project_dir = self.get_project_dir()
        if not project_dir.exists():
            return []
        return self._load(self._list_files(project_dir))

    def list_all_scope(self, on_progress: ProgressCallback) -> list[SessionSummary]:
        files = self.discover_session_files()
        on_progress(0, len(files))
        return self._load(files, on_progress)

    def read_raw_log(self, path: str) -> str:
        return Path(path).read_text(encoding="utf-8")


class FileSessionActions(SessionActions):
    """Rename/delete straight on the session files.

    Text handed to the editor is kept in ``pasted`` for the caller to pick up
    once the picker has closed.
    """

    def __init__(self, active_path: Optional[str] = None):
        self.active_path = active_path
        self.pasted: Optional[str] = None

    def _append_name(self, path: str, name: str):
        record = {
            "type": "session_info",
            "name": name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(record) + "\n")

    def rename_active(self, name: str) -> None:
        if not self.active_path:
            raise RuntimeError("No active session")
        self._append_name(self.active_path, name)

    def rename_file(self, path: str, name: str) -> None:
        if not Path(path).is_file():
            raise FileNotFoundError(path)
        self._append_name(path, name)

    def delete(self, path: str) -> None:
        Path(path).unlink()

    def insert_into_editor(self, text: str) -> None:
        self.pasted = text


class CommandSwitchAction(SwitchAction):
    """Switches by replacing this process with a resume command."""

    def __init__(self, template: str):
        self.template = template

    def build_command(self, path: str) -> list[str]:
        return [part.replace("{path}", path) for part in shlex.split(self.template)]

    def switch_to(self, path: str) -> SwitchResult:
        parts = self.build_command(path)
        if not parts or shutil.which(parts[0]) is None:
            return SwitchResult(cancelled=True, message=f"Command not found: {parts[0] if parts else '(empty)'}")
        logger.info(f"Switching session: {' '.join(parts)}")
        os.execvp(parts[0], parts)
        return SwitchResult()
