# streamgrid/plugins/table_detect/detect.py
"""Shared pipe-table detection helpers.

Both the markdown-fence unwrapper (markdown_renderer) and the stream
holdback scanner (streaming) need to identify pipe-table structure in raw
markdown source, and the table formatter needs the same cell splitting.
Everything here works on plain source lines so a fix applies to all callers.

Detection patterns:
    | Header | Header |      header row (>= 2 segments, some content)
    |:-------|-------:|      delimiter row (every segment ^:?-+:?$)
    | cell   | cell   |      body rows until a blank or non-row line

Outer pipes are optional (``A | B`` / ``--- | ---``), ``\\|`` is a literal
pipe inside a cell.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence

# Delimiter segment: hyphens with optional alignment colons.
_DELIMITER_SEGMENT = re.compile(r"^:?-+:?$")

# Leading blockquote markers ("> ", ">>", "> > ")
_BLOCKQUOTE_PREFIX = re.compile(r"^\s{0,3}(?:>\s?)+")


def split_row_cells(line: str) -> List[str]:
    """Split a pipe-delimited line into trimmed cells.

    One leading and one trailing pipe are dropped before splitting.
    Escaped pipes (``\\|``) do not split and are unescaped in the result.

    Args:
        line: A single source line.

    Returns:
        The trimmed cell texts (at least one element).
    """
    content = line.strip()
    if content.startswith("|"):
        content = content[1:]
    if content.endswith("|") and not content.endswith("\\|"):
        content = content[:-1]

    cells: List[str] = []
    current: List[str] = []
    i = 0
    while i < len(content):
        char = content[i]
        if char == "\\" and content[i + 1:i + 2] == "|":
            current.append("|")
            i += 2
            continue
        if char == "|":
            cells.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1
    cells.append("".join(current).strip())
    return cells


def parse_table_segments(line: str) -> Optional[List[str]]:
    """Split a line into table segments.

    Returns:
        Trimmed segments, or None if the line is blank or has fewer than
        two segments (a line without an unescaped ``|`` is never a row).
    """
    if not line.strip() or "|" not in line:
        return None
    segments = split_row_cells(line)
    return segments if len(segments) >= 2 else None


def is_table_row(line: str) -> bool:
    """Whether ``line`` can be a table row.

    Rows opening with ``|`` qualify once they have two segments. Rows without
    an outer pipe need non-whitespace content on both sides of a split point,
    so prose such as ``a |`` is not mistaken for a row.
    """
    segments = parse_table_segments(line)
    if segments is None:
        return False
    if line.strip().startswith("|"):
        return True
    return sum(1 for segment in segments if segment) >= 2


def is_table_delimiter_segment(segment: str) -> bool:
    """Whether a segment is ``---``, ``:---``, ``---:`` or ``:---:``."""
    return _DELIMITER_SEGMENT.match(segment.strip()) is not None


def is_table_delimiter_line(line: str) -> bool:
    """Whether ``line`` is a delimiter row (every segment is a delimiter segment)."""
    segments = parse_table_segments(line)
    return segments is not None and all(
        is_table_delimiter_segment(segment) for segment in segments
    )


def is_table_header_line(line: str) -> bool:
    """Whether ``line`` can open a table (a row with content that is not a delimiter)."""
    if not is_table_row(line) or is_table_delimiter_line(line):
        return False
    segments = parse_table_segments(line) or []
    return any(segments)


def parse_alignments(delimiter_line: str) -> List[str]:
    """Parse column alignments from a delimiter row (e.g. ``|:---|:---:|---:|``).

    Returns:
        List of 'left', 'center' or 'right', one per segment.
    """
    alignments = []
    for segment in parse_table_segments(delimiter_line) or []:
        segment = segment.strip()
        if segment.startswith(":") and segment.endswith(":"):
            alignments.append("center")
        elif segment.endswith(":"):
            alignments.append("right")
        else:
            alignments.append("left")
    return alignments


def strip_blockquote_prefix(line: str) -> str:
    """Remove leading blockquote markers so quoted tables are detected too."""
    return _BLOCKQUOTE_PREFIX.sub("", line, count=1)


@dataclass(frozen=True)
class TableScanLine:
    """A single line and whether table detection should consider it.

    ``enabled`` lets callers feed full source streams while masking contexts
    that must not participate in detection (non-markdown code fences).
    """
    text: str
    enabled: bool = True


@dataclass(frozen=True)
class TableSpan:
    """Line range of a detected table.

    Attributes:
        start: Index of the header row.
        end: Index one past the last body row.
    """
    start: int
    end: int

    @property
    def body_row_count(self) -> int:
        return self.end - self.start - 2


class TableHoldbackState(Enum):
    """Table pattern at the end of a scanned region."""
    NONE = "none"                      # No table reaches the end of the region
    PENDING_HEADER = "pending_header"  # Header + delimiter, body still arriving
    CONFIRMED = "confirmed"            # Header + delimiter + at least one body row


@dataclass(frozen=True)
class TableScan:
    """Result of scanning a region for an open table.

    Attributes:
        state: Pattern found at the end of the region.
        start: Index of the open table's header row (None for NONE).
    """
    state: TableHoldbackState
    start: Optional[int] = None


def _opens_table(header: TableScanLine, delimiter: TableScanLine) -> bool:
    if not (header.enabled and delimiter.enabled):
        return False
    if not is_table_header_line(header.text) or not is_table_delimiter_line(delimiter.text):
        return False
    # A segment count mismatch invalidates the whole candidate
    header_segments = parse_table_segments(header.text) or []
    delimiter_segments = parse_table_segments(delimiter.text) or []
    return len(header_segments) == len(delimiter_segments)


def find_tables(lines: Sequence[TableScanLine]) -> List[TableSpan]:
    """Find every table in a sequence of lines.

    A header row immediately followed by a delimiter row with the same
    segment count opens a table. Following rows extend it; a blank line, a
    disabled line or a non-row line ends it.

    Args:
        lines: Lines to scan, in source order.

    Returns:
        Detected tables in source order.
    """
    spans: List[TableSpan] = []
    i = 0
    while i < len(lines) - 1:
        if not _opens_table(lines[i], lines[i + 1]):
            i += 1
            continue
        end = i + 2
        while end < len(lines) and lines[end].enabled and is_table_row(lines[end].text):
            end += 1
        spans.append(TableSpan(start=i, end=end))
        i = end
    return spans


def scan_table_pattern(lines: Iterable[TableScanLine]) -> TableScan:
    """Report whether a table is still open at the end of ``lines``.

    ``CONFIRMED`` means a table with at least one body row runs to the last
    line, ``PENDING_HEADER`` means only its header and delimiter have arrived,
    ``NONE`` means no table touches the end (a blank or non-row line closed it).
    """
    lines = list(lines)
    spans = find_tables(lines)
    if not spans or spans[-1].end != len(lines):
        return TableScan(TableHoldbackState.NONE)

    span = spans[-1]
    if span.body_row_count > 0:
        return TableScan(TableHoldbackState.CONFIRMED, span.start)
    return TableScan(TableHoldbackState.PENDING_HEADER, span.start)


def contains_table(text: str) -> bool:
    """Whether a text region contains at least one valid table."""
    return bool(find_tables([TableScanLine(line) for line in text.splitlines()]))
