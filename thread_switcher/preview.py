"""Session preview extraction.

A session log is a JSONL file of records. Only ``message`` records make it
into the preview: user turns become a gap plus their text lines, assistant
turns become their text lines followed by one short line per tool call.
Tool results are left out.
"""

import json
import logging
import re
from typing import Callable, Iterable, Optional

from .models import PreviewLine, Role

logger = logging.getLogger(__name__)

# Tools whose call is summarised as "<name> <path>"
FILE_TOOLS = ("read", "edit", "write")

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")


def decode_entries(raw: str) -> list[dict]:
    """Decode a JSONL session log, skipping blank and undecodable lines."""
    entries = []
    for line in raw.splitlines():
        if not line.strip():
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            entries.append(data)
    return entries


def extract_text(content) -> str:
    """Extract the text blocks of message content (string or block list)."""
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""
    texts = []
    for item in content:
        if isinstance(item, dict) and item.get("type") == "text":
            text = item.get("text")
            if isinstance(text, str):
                texts.append(text)
    return "\n".join(texts)


def clean_line(text: str) -> str:
    """Make a line safe to draw: tabs expanded, control characters dropped."""
    return _CONTROL_CHARS.sub("", text.replace("\t", "    "))


def describe_tool_call(name: str, args: dict) -> str:
    """One-line summary of a tool invocation."""
    if name == "bash" and args.get("command"):
        return f"$ {args['command']}"
    if name in FILE_TOOLS and args.get("path"):
        return f"{name} {args['path']}"
    return f"{name}(…)"


def _tool_calls(content) -> Iterable[tuple[str, dict]]:
    if not isinstance(content, list):
        return
    for block in content:
        if not isinstance(block, dict) or not block.get("name"):
            continue
        if block.get("type") == "toolCall":
            args = block.get("arguments")
        elif block.get("type") == "tool_use":
            args = block.get("input")
        else:
            continue
        yield block["name"], args if isinstance(args, dict) else {}


def _text_lines(role: Role, text: str) -> list[PreviewLine]:
    text = text.strip()
    if not text:
        return []
    return [PreviewLine(role, clean_line(line)) for line in text.split("\n")]


def parse_preview(raw: str) -> list[PreviewLine]:
    """Turn a raw session log into preview lines."""
    lines: list[PreviewLine] = []

    for entry in decode_entries(raw):
        if entry.get("type") != "message":
            continue
        msg = entry.get("message")
        if not isinstance(msg, dict):
            continue
        role = msg.get("role")
        content = msg.get("content")

        if role == "user":
            lines.append(PreviewLine(Role.GAP))
            lines.extend(_text_lines(Role.USER, extract_text(content)))
        elif role == "assistant":
            lines.extend(_text_lines(Role.ASSISTANT, extract_text(content)))
            for name, args in _tool_calls(content):
                lines.append(PreviewLine(Role.TOOL, clean_line(describe_tool_call(name, args))))
        # toolResult and anything else: not shown

    return lines


class PreviewCache:
    """Preview lines keyed by session path, scoped to one switcher session."""

    def __init__(self):
        self._data: dict[str, list[PreviewLine]] = {}

    def get(self, path: str) -> Optional[list[PreviewLine]]:
        return self._data.get(path)

    def set(self, path: str, lines: list[PreviewLine]):
        self._data[path] = lines

    def invalidate(self, path: str):
        self._data.pop(path, None)

    def clear(self):
        self._data.clear()

    def __contains__(self, path: str) -> bool:
        return path in self._data

    def __len__(self) -> int:
        return len(self._data)


class PreviewExtractor:
    """Reads and parses session logs, memoised through a PreviewCache."""

    def __init__(self, read_raw_log: Callable[[str], str], cache: Optional[PreviewCache] = None):
        self._read_raw_log = read_raw_log
        self.cache = cache if cache is not None else PreviewCache()

    def get(self, path: str) -> list[PreviewLine]:
        cached = self.cache.get(path)
        if cached is None:
            cached = self._extract(path)
            self.cache.set(path, cached)
        return cached

    def _extract(self, path: str) -> list[PreviewLine]:
        try:
            return parse_preview(self._read_raw_log(path))
        except Exception as e:
            logger.debug(f"Preview unavailable for {path}: {e}")
            return []
