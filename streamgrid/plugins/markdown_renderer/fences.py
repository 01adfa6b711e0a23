# streamgrid/plugins/markdown_renderer/fences.py
"""Fenced code block parsing and markdown-fence unwrapping.

Models often wrap a table in a ```markdown fence. Rendered literally that
shows raw pipes in a code block, so fences tagged ``md``/``markdown`` (or
untagged) whose content contains a valid table are unwrapped and their
content rendered as markdown. Any other fence, or an eligible fence
without a table, stays a literal code block:

    ```md                      | A | B |
    | A | B |          ->      |---|---|
    |---|---|                  | 1 | 2 |
    | 1 | 2 |
    ```

An unclosed fence is never unwrapped; its content may still change.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from streamgrid.plugins.table_detect import contains_table

# Opening fence: up to 3 spaces, 3+ backticks or tildes, optional info string
_OPEN_FENCE = re.compile(r"^(?P<indent> {0,3})(?P<marker>`{3,}|~{3,})(?P<info>.*)$")

MARKDOWN_FENCE_TAGS = frozenset({"", "md", "markdown"})


class FenceContext(Enum):
    """Where a source line sits relative to fenced code blocks."""
    OUTSIDE = "outside"    # Not inside any fence
    MARKDOWN = "markdown"  # Inside an md/markdown/untagged fence
    OTHER = "other"        # Inside a fence for another language


@dataclass(frozen=True)
class Fence:
    """An opening fence.

    Attributes:
        marker: '`' or '~'.
        length: Number of marker characters (closing fence needs at least as many).
        info: First word of the info string ("" when untagged).
    """
    marker: str
    length: int
    info: str = ""

    @property
    def is_markdown(self) -> bool:
        return self.info.lower() in MARKDOWN_FENCE_TAGS


def parse_open_fence(line: str) -> Optional[Fence]:
    """Parse an opening fence line, or return None if ``line`` is not one.

    Backtick fences cannot carry backticks in their info string.
    """
    match = _OPEN_FENCE.match(line.rstrip("\n"))
    if not match:
        return None
    marker = match.group("marker")
    info = match.group("info").strip()
    if marker[0] == "`" and "`" in info:
        return None
    words = info.split()
    return Fence(marker=marker[0], length=len(marker), info=words[0] if words else "")


def is_close_fence(line: str, fence: Fence) -> bool:
    """Whether ``line`` closes ``fence`` (same marker, at least as long, nothing after)."""
    text = line.rstrip("\n")
    stripped = text.lstrip(" ")
    if len(text) - len(stripped) > 3:
        return False
    run = len(stripped) - len(stripped.lstrip(fence.marker))
    if run < fence.length:
        return False
    return not stripped[run:].strip()


def classify_fence_lines(lines: List[str]) -> List[FenceContext]:
    """Tag each line with its fence context.

    Fence marker lines themselves are tagged with the context of the fence
    they open or close.
    """
    contexts: List[FenceContext] = []
    active: Optional[Fence] = None
    for line in lines:
        if active is None:
            active = parse_open_fence(line)
            if active is None:
                contexts.append(FenceContext.OUTSIDE)
                continue
        elif is_close_fence(line, active):
            contexts.append(FenceContext.MARKDOWN if active.is_markdown else FenceContext.OTHER)
            active = None
            continue
        contexts.append(FenceContext.MARKDOWN if active.is_markdown else FenceContext.OTHER)
    return contexts


def find_open_fence_start(lines: List[str]) -> Optional[int]:
    """Index of the opening line of a fence still open at the end of ``lines``."""
    active: Optional[Fence] = None
    start: Optional[int] = None
    for idx, line in enumerate(lines):
        if active is None:
            active = parse_open_fence(line)
            start = idx if active is not None else None
        elif is_close_fence(line, active):
            active = None
            start = None
    return start if active is not None else None


def unwrap_markdown_fences(source: str) -> str:
    """Replace closed markdown fences that contain a table by their content.

    Args:
        source: Markdown source.

    Returns:
        Source with eligible fences unwrapped; everything else verbatim.
    """
    out: List[str] = []
    active: Optional[Fence] = None
    opening_line = ""
    content: List[str] = []

    for line in source.splitlines(keepends=True):
        if active is None:
            fence = parse_open_fence(line)
            if fence is None:
                out.append(line)
            elif fence.is_markdown:
                active, opening_line, content = fence, line, []
            else:
                out.append(line)
                active = fence
            continue

        if not active.is_markdown:
            out.append(line)
            if is_close_fence(line, active):
                active = None
            continue

        if not is_close_fence(line, active):
            content.append(line)
            continue

        body = "".join(content)
        if contains_table(body):
            out.append(body)
        else:
            out.extend([opening_line, body, line])
        active = None

    # Unclosed markdown candidate: keep it as written
    if active is not None and active.is_markdown:
        out.append(opening_line)
        out.extend(content)

    return "".join(out)
