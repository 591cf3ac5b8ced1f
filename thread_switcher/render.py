"""Drawing the switcher.

Two layouts share the same pieces:

* overlay: the preview fills the whole terminal, dimmed, and a bordered
  box with the session list floats in the middle of it;
* stacked: the preview sits on top and the list below it.

Every line handed back is a ``rich.text.Text`` exactly ``width`` cells wide.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from rich.text import Text

from .formatting import blank, cwd_short, fit, overlay_line, pad_lines, relative_time, right_align
from .models import Notice, PickerState, PreviewLine, Role, Scope, SessionSummary
from .preview import PreviewExtractor, clean_line
from .state import ViewContext

# Styles
ACCENT = "cyan"
MUTED = "grey62"
WARNING = "yellow"
ERROR = "red"
BORDER = "bright_black"
DIM = "dim"
NOTICE_STYLES = {"info": ACCENT, "warning": WARNING, "error": ERROR}

# Overlay box
BOX_WIDTH_RATIO = 0.75
BOX_MIN_WIDTH = 40
BOX_MAX_WIDTH = 110
OVERLAY_MAX_VISIBLE = 10
# borders(2) + title + search + notice + 2 separators + help, plus room for
# both "more" indicators
OVERLAY_CHROME = 8 + 2

# Stacked layout
PREVIEW_MIN_HEIGHT = 6
STACKED_CHROME = 6  # separator, title, search, notice, help, bottom border


@dataclass
class Frame:
    """Everything one render pass looks at."""

    state: PickerState
    previews: PreviewExtractor
    width: int
    height: int
    progress: Optional[tuple[int, int]] = None
    all_loaded: bool = True
    load_failed: bool = False
    focused: bool = True
    now: datetime = field(default_factory=datetime.now)
    clock: float = field(default_factory=time.monotonic)


# -- shared pieces --

def rows_per_entry(state: PickerState) -> int:
    return 2 if state.scope is Scope.ALL else 1


def active_notice(notice: Optional[Notice], clock: float) -> Optional[Notice]:
    if notice is None:
        return None
    if notice.expires_at and clock >= notice.expires_at:
        return None
    return notice


def format_preview_line(line: PreviewLine, width: int) -> Text:
    if line.role is Role.GAP:
        return blank(width)
    if line.role is Role.USER:
        return fit(Text(" ") + Text(line.text, style=ACCENT), width)
    if line.role is Role.TOOL:
        return fit(Text("   ") + Text(line.text, style=WARNING), width)
    if line.role is Role.ASSISTANT:
        return fit(Text("   ") + Text(line.text, style=MUTED), width)
    raise ValueError(f"Unhandled role: {line.role}")


def preview_lines(frame: Frame) -> list[PreviewLine]:
    session = frame.state.current
    if session is None:
        return []
    return frame.previews.get(session.path)


def max_preview_scroll(frame: Frame, height: int) -> int:
    return max(0, len(preview_lines(frame)) - height)


def render_preview(frame: Frame, width: int, height: int) -> list[Text]:
    """Tail of the highlighted session, shifted back by preview_scroll.

    Clamps state.preview_scroll against the content it finds.
    """
    state = frame.state
    if height <= 0:
        return []
    session = state.current
    if session is None:
        state.preview_scroll = 0
        return pad_lines([fit(" No session selected", width, DIM)], height, width)

    lines = frame.previews.get(session.path)
    if not lines:
        state.preview_scroll = 0
        return pad_lines([fit(" (empty session)", width, DIM)], height, width)

    total = len(lines)
    state.preview_scroll = max(0, min(state.preview_scroll, max(0, total - height)))
    start = max(0, total - height - state.preview_scroll)
    visible = [format_preview_line(line, width) for line in lines[start:start + height]]
    if start > 0 and visible:
        visible[0] = fit(f" ↑ {start} more lines", width, DIM)
    return pad_lines(visible, height, width)


def title_line(state: PickerState, width: int) -> Text:
    scope_tag = "All" if state.scope is Scope.ALL else "Project"
    text = Text(" ")
    text.append("Select a thread", style=f"bold {ACCENT}")
    text.append(f"  ({scope_tag})", style=DIM)
    return fit(text, width)


def search_line(state: PickerState, width: int, focused: bool) -> Text:
    cursor = Text(" ", style="reverse") if focused else Text("")
    if state.rename is not None:
        text = Text(" Rename: ", style=WARNING)
        text.append(state.rename.text)
        return fit(text + cursor, width)
    text = Text(" > ", style=DIM)
    if state.query:
        text.append(state.query)
        text.append_text(cursor)
    else:
        text.append_text(cursor)
        text.append("type to filter...", style=DIM)
    return fit(text, width)


def status_line(frame: Frame, width: int) -> Text:
    """Notice if there is one, else loading progress, else blank."""
    notice = active_notice(frame.state.notice, frame.clock)
    if notice is not None:
        return fit(f" {notice.text}", width, NOTICE_STYLES.get(notice.level, ACCENT), ellipsis=True)
    if frame.state.scope is Scope.ALL and not frame.all_loaded and not frame.load_failed:
        loaded, total = frame.progress or (0, 0)
        counts = f" {loaded}/{total}" if total else ""
        return fit(f" Loading all sessions…{counts}", width, DIM)
    return blank(width)


def help_line(state: PickerState, width: int) -> Text:
    if state.rename is not None:
        items = ["enter save", "esc cancel"]
    else:
        items = [
            "↑↓ navigate",
            "shift+↑↓ scroll",
            "enter switch",
            "tab all" if state.scope is Scope.CURRENT else "tab project",
            "^r rename",
            "^d delete",
            "^y paste",
            "esc close",
        ]
    return fit(" " + " · ".join(items), width, DIM)


def entry_lines(session: SessionSummary, selected: bool, state: PickerState, width: int, now: datetime) -> list[Text]:
    if selected:
        marker = Text(" ❯ ", style=ACCENT)
    elif session.is_current:
        marker = Text(" • ", style=DIM)
    else:
        marker = Text("   ")

    text = clean_line(session.label)
    if session.is_current:
        label = Text(text, style=MUTED)
    elif selected:
        label = Text(text, style=f"bold {ACCENT}")
    else:
        label = Text(text)

    count = session.message_count
    right = Text(f"{count} msg{'' if count == 1 else 's'} · {relative_time(session.modified, now)}", style=DIM)
    lines = [fit(marker + right_align(label, right, width - marker.cell_len), width)]

    if state.scope is Scope.ALL and session.cwd:
        lines.append(fit(Text("     ") + Text(clean_line(cwd_short(session.cwd)), style=DIM), width))
    return lines


def list_lines(frame: Frame, width: int, visible_count: int) -> list[Text]:
    state = frame.state
    if not state.filtered:
        return [fit("  No matching sessions", width, WARNING)]

    start = state.list_scroll
    end = min(start + visible_count, len(state.filtered))
    out = []
    if start > 0:
        out.append(fit(f"  ↑ {start} more", width, DIM))
    for i in range(start, end):
        out.extend(entry_lines(state.filtered[i], i == state.selected, state, width, frame.now))
    if end < len(state.filtered):
        out.append(fit(f"  ↓ {len(state.filtered) - end} more", width, DIM))
    return out


# -- layouts --

class OverlayLayout:
    """Dimmed full-height preview behind a centered list box."""

    name = "overlay"

    def box_width(self, width: int) -> int:
        return min(width, BOX_MAX_WIDTH, max(BOX_MIN_WIDTH, int(width * BOX_WIDTH_RATIO)))

    def list_capacity(self, state: PickerState, height: int) -> int:
        return max(1, min(OVERLAY_MAX_VISIBLE, (height - OVERLAY_CHROME) // rows_per_entry(state)))

    def preview_height(self, state: PickerState, height: int) -> int:
        return height

    def box(self, frame: Frame, box_width: int) -> list[Text]:
        state = frame.state
        inner = max(1, box_width - 4)
        rule = fit("─" * inner, inner, BORDER)
        content = [
            title_line(state, inner),
            search_line(state, inner, frame.focused),
            status_line(frame, inner),
            rule,
            *list_lines(frame, inner, self.list_capacity(state, frame.height)),
            rule,
            help_line(state, inner),
        ]

        side = Text("│", style=BORDER)
        horizontal = "─" * max(0, box_width - 2)
        rows = [Text(f"╭{horizontal}╮", style=BORDER)]
        for line in content:
            rows.append(side + Text(" ") + line + Text(" ") + side)
        rows.append(Text(f"╰{horizontal}╯", style=BORDER))
        return [fit(row, box_width) for row in rows]

    def render(self, frame: Frame) -> list[Text]:
        width, height = frame.width, frame.height
        background = render_preview(frame, width, height)
        for line in background:
            line.stylize(DIM)

        box_width = self.box_width(width)
        box = self.box(frame, box_width)[:height]
        top = max(0, (height - len(box)) // 2)
        left = max(0, (width - box_width) // 2)

        out = list(background)
        for offset, row in enumerate(box):
            out[top + offset] = overlay_line(background[top + offset], row, left, width)
        return out


class StackedLayout:
    """Preview on top, list below."""

    name = "stacked"

    def list_capacity(self, state: PickerState, height: int) -> int:
        rows = max(5, int(height * 0.3) - 5)
        return max(1, rows // rows_per_entry(state))

    def list_rows(self, state: PickerState, height: int) -> int:
        if not state.filtered:
            return 1
        capacity = self.list_capacity(state, height)
        shown = min(capacity, max(0, len(state.filtered) - state.list_scroll))
        rows = shown * rows_per_entry(state)
        if state.list_scroll > 0:
            rows += 1
        if state.list_scroll + shown < len(state.filtered):
            rows += 1
        return rows

    def preview_height(self, state: PickerState, height: int) -> int:
        return max(PREVIEW_MIN_HEIGHT, height - STACKED_CHROME - self.list_rows(state, height))

    def render(self, frame: Frame) -> list[Text]:
        state, width, height = frame.state, frame.width, frame.height
        out = render_preview(frame, width, self.preview_height(state, height))
        rule = fit("─" * width, width, BORDER)
        out.append(rule)
        out.append(title_line(state, width))
        out.append(search_line(state, width, frame.focused))
        out.append(status_line(frame, width))
        out.extend(list_lines(frame, width, self.list_capacity(state, height)))
        out.append(help_line(state, width))
        out.append(rule.copy())
        return out


LAYOUTS = {
    OverlayLayout.name: OverlayLayout,
    StackedLayout.name: StackedLayout,
}


def get_layout(name: str):
    layout_class = LAYOUTS.get(name)
    if layout_class is None:
        raise ValueError(f"Unknown layout: {name!r} (expected one of {', '.join(LAYOUTS)})")
    return layout_class()


def view_context(layout, frame: Frame) -> ViewContext:
    """List capacity and preview scroll limit for the current terminal size."""
    state = frame.state
    preview_height = layout.preview_height(state, frame.height)
    return ViewContext(
        visible_count=layout.list_capacity(state, frame.height),
        max_preview_scroll=max_preview_scroll(frame, preview_height),
    )
