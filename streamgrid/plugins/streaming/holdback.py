# streamgrid/plugins/streaming/holdback.py
"""Stable/tail partitioning of a streamed render.

A table's column widths depend on every one of its rows, so none of its
lines may be committed while rows can still arrive. Everything here is a
pure function of the accumulated source: the holdback state is recomputed
after every delta and never stored, so no delta can leave it stale.

    None ──header+delimiter──> PendingHeader ──body row──> Confirmed
      ^                                                        │
      └──────────────── blank line / non-row line ─────────────┘
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from rich.text import Text

from streamgrid.plugins.markdown_renderer import (
    FenceContext,
    LineRenderer,
    classify_fence_lines,
)
from streamgrid.plugins.table_detect import (
    TableHoldbackState,
    TableScanLine,
    scan_table_pattern,
    strip_blockquote_prefix,
)
from streamgrid.trace import trace as _trace_write

logger = logging.getLogger(__name__)


def _trace(msg: str) -> None:
    """Write trace message to log file for debugging."""
    _trace_write("HOLDBACK", msg)


@dataclass(frozen=True)
class HoldbackScan:
    """Table pattern at the end of the accumulated source.

    Attributes:
        state: NONE, PENDING_HEADER or CONFIRMED.
        table_start_line: Source line index of the open table's header row.
    """
    state: TableHoldbackState
    table_start_line: Optional[int] = None


def scan_lines(raw_source: str) -> List[TableScanLine]:
    """Annotate source lines for table detection.

    Blockquote markers are stripped; lines inside non-markdown fences are
    disabled because their pipes are code, not table syntax.
    """
    lines = raw_source.splitlines()
    return [
        TableScanLine(strip_blockquote_prefix(line), context is not FenceContext.OTHER)
        for line, context in zip(lines, classify_fence_lines(lines))
    ]


def table_holdback_state(raw_source: str) -> HoldbackScan:
    """Scan the accumulated source for a table that is still open.

    Tables cannot span blank lines, so the scan starts after the last blank
    line instead of at the beginning of the message.
    """
    lines = scan_lines(raw_source)
    start = 0
    for idx in range(len(lines) - 1, -1, -1):
        if not lines[idx].text.strip():
            start = idx + 1
            break

    scan = scan_table_pattern(lines[start:])
    if scan.state is TableHoldbackState.NONE:
        return HoldbackScan(TableHoldbackState.NONE)
    return HoldbackScan(scan.state, start + scan.start)


def hold_start_line(raw_source: str, renderer: LineRenderer) -> Optional[int]:
    """First source line that must stay in the tail, or None if all may commit.

    The earlier of the open table's header row and the renderer's own
    incompleteness signal (open markdown fence, trailing header candidate,
    unclosed inline markers).
    """
    candidates = []
    scan = table_holdback_state(raw_source)
    if scan.state is not TableHoldbackState.NONE:
        candidates.append(scan.table_start_line)
    incomplete = renderer.incomplete_tail_start(raw_source)
    if incomplete is not None:
        candidates.append(incomplete)
    return min(candidates) if candidates else None


def compute_holdback(
    raw_source: str,
    rendered_lines: Sequence[Text],
    renderer: LineRenderer,
    width: int,
    previous_stable: int = 0,
) -> int:
    """Number of leading rendered lines that may be committed as stable.

    With no open table, every line is stable except those rendered from the
    renderer's incomplete tail. With an open table (PENDING_HEADER or
    CONFIRMED), the count is the number of lines the source before the
    table's header renders to, however much of the table has arrived.

    Args:
        raw_source: Accumulated newline-terminated source.
        rendered_lines: Render of ``raw_source`` at ``width``.
        renderer: Renderer that produced ``rendered_lines``.
        width: Render width.
        previous_stable: Lines already committed; the result never drops
            below it.

    Returns:
        The stable line count.
    """
    hold_from = hold_start_line(raw_source, renderer)
    if hold_from is None:
        stable = len(rendered_lines)
    else:
        prefix = "".join(raw_source.splitlines(keepends=True)[:hold_from])
        stable = len(renderer.render(prefix, width)) if prefix else 0
        stable = min(stable, len(rendered_lines))

    if stable < previous_stable:
        _trace(f"clamp: stable {stable} < committed {previous_stable}")
        logger.debug("Stable count %d below committed %d, keeping committed", stable, previous_stable)
        stable = previous_stable
    return stable
