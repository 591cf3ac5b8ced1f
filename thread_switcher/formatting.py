"""Text helpers for the switcher: ages, paths and width-exact lines."""

import os
from datetime import datetime
from typing import Optional, Union

from rich.cells import cell_len
from rich.style import Style
from rich.text import Text

StyleType = Union[str, Style]


def relative_time(modified: datetime, now: Optional[datetime] = None) -> str:
    """Compact age: now, 5m, 3h, 2d, 4mo."""
    now = now or datetime.now()
    secs = int((now - modified).total_seconds())
    if secs < 60:
        return "now"
    mins = secs // 60
    if mins < 60:
        return f"{mins}m"
    hours = mins // 60
    if hours < 24:
        return f"{hours}h"
    days = hours // 24
    if days < 30:
        return f"{days}d"
    return f"{days // 30}mo"


def cwd_short(cwd: str, home: Optional[str] = None) -> str:
    """Abbreviate a working directory for the list.

    The home directory becomes ``~``; paths deeper than three segments keep
    only their first and last segment.
    """
    if not cwd:
        return ""
    home = os.environ.get("HOME", "") if home is None else home
    home = home.rstrip("/")
    path = cwd
    if home and (path == home or path.startswith(home + "/")):
        path = "~" + path[len(home):]
    segments = [s for s in path.split("/") if s]
    if len(segments) > 3:
        return f"{segments[0]}/…/{segments[-1]}"
    return path


def fit(text: Union[str, Text], width: int, style: StyleType = "", ellipsis: bool = False) -> Text:
    """Return a copy of text cut or padded to exactly width cells."""
    if isinstance(text, str):
        line = Text(text, style=style, no_wrap=True)
    else:
        line = text.copy()
        line.no_wrap = True
    width = max(0, width)
    if width == 0:
        return Text("", no_wrap=True)
    line.truncate(width, overflow="ellipsis" if ellipsis else "crop", pad=True)
    if line.cell_len < width:
        line.pad_right(width - line.cell_len)
    return line


def blank(width: int) -> Text:
    return Text(" " * max(0, width), no_wrap=True)


def pad_lines(lines: list[Text], height: int, width: int) -> list[Text]:
    """Pad or cut a block of lines to height rows."""
    lines = lines[:height]
    while len(lines) < height:
        lines.append(blank(width))
    return lines


def cell_offset(text: Text, column: int) -> tuple[int, int]:
    """Character index where cell column starts, and spill-over cells.

    The spill-over is 1 when a double-width character straddles the column.
    """
    pos = 0
    for index, ch in enumerate(text.plain):
        if pos >= column:
            return index, pos - column
        pos += cell_len(ch)
    return len(text.plain), max(0, pos - column)


def overlay_line(base: Text, top: Text, column: int, width: int) -> Text:
    """Write top over base starting at cell column; result is width cells."""
    column = max(0, min(column, width))
    left = fit(base, column) if column else Text("", no_wrap=True)
    right_start = column + top.cell_len
    result = left + fit(top, min(top.cell_len, width - column))
    if right_start < width:
        index, spill = cell_offset(base, right_start)
        right = Text(" " * spill, no_wrap=True) + base[index:]
        result += fit(right, width - right_start)
    return fit(result, width)


def right_align(left: Text, right: Text, width: int) -> Text:
    """Left text padded so right ends exactly at width.

    Left is cut with an ellipsis when both don't fit.
    """
    room = width - right.cell_len - 1
    if room <= 0:
        return fit(right, width)
    return fit(left, room, ellipsis=True) + Text(" ", no_wrap=True) + right
