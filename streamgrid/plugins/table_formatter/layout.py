# streamgrid/plugins/table_formatter/layout.py
"""Column classification and width allocation for box-drawn tables.

Columns are either Narrative (prose-like cells that wrap gracefully) or
Structured (identifiers, numbers, short labels that read badly when broken).
When a table is wider than the terminal, Narrative columns give up width
first; Structured columns only shrink once every Narrative column sits at
its floor, and never below their widest word unless nothing else works.

    specs = [build_column_spec(header, cells, alignment, config) for ...]
    widths = allocate_widths(specs, available_width)   # None -> fallback
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from streamgrid.config import RenderConfig
from streamgrid.display_width import char_width, display_width


# Per-column overhead: one space of padding on each side plus the bar
# that closes the column. The table adds one more bar on the left.
PADDING_PER_SIDE = 1
CELL_OVERHEAD = 2 * PADDING_PER_SIDE + 1


class ColumnKind(Enum):
    """How a column behaves under width pressure."""
    NARRATIVE = "narrative"    # Prose: shrinks first, wraps at word boundaries
    STRUCTURED = "structured"  # Labels/values: shrinks last, keeps tokens whole


@dataclass
class ColumnSpec:
    """Layout data for one table column.

    Attributes:
        kind: Narrative or Structured.
        content_width: Widest cell (display columns, before wrapping).
        token_floor: Widest single word, capped by max_token_floor.
        floor: Width the column shrinks to in its own shrink phase.
        min_width: Absolute minimum (widest single character).
        alignment: 'left', 'center' or 'right'.
        allocated_width: Final width chosen by allocate_widths.
    """
    kind: ColumnKind
    content_width: int
    token_floor: int
    floor: int
    min_width: int = 1
    alignment: str = "left"
    allocated_width: int = 0


def table_overhead(num_cols: int) -> int:
    """Border and padding columns consumed by a table with ``num_cols`` columns."""
    return CELL_OVERHEAD * num_cols + 1


def classify_column(
    body_cells: Sequence[str],
    header: str = "",
    config: Optional[RenderConfig] = None,
) -> ColumnKind:
    """Classify a column from the plain text of its cells.

    The average is taken over non-empty body cells; the header stands in
    when the column has no body content.

    Returns:
        NARRATIVE if the cells average at least ``narrative_min_words`` words
        or ``narrative_min_chars`` characters, STRUCTURED otherwise.
    """
    config = config or RenderConfig()
    sample = [cell for cell in body_cells if cell.strip()]
    if not sample and header.strip():
        sample = [header]
    if not sample:
        return ColumnKind.STRUCTURED

    avg_words = sum(len(cell.split()) for cell in sample) / len(sample)
    avg_chars = sum(display_width(cell) for cell in sample) / len(sample)
    if avg_words >= config.narrative_min_words or avg_chars >= config.narrative_min_chars:
        return ColumnKind.NARRATIVE
    return ColumnKind.STRUCTURED


def _widest_char(cells: Sequence[str]) -> int:
    widths = [char_width(char) for cell in cells for char in cell]
    return max([1] + widths)


def build_column_spec(
    header: str,
    body_cells: Sequence[str],
    alignment: str = "left",
    config: Optional[RenderConfig] = None,
) -> ColumnSpec:
    """Measure one column and derive its floors.

    Args:
        header: Plain text of the header cell.
        body_cells: Plain text of the body cells (missing cells as "").
        alignment: Column alignment from the delimiter row.
        config: Thresholds; defaults when omitted.
    """
    config = config or RenderConfig()
    cells = [header] + list(body_cells)

    content_width = max([1] + [display_width(cell) for cell in cells])
    longest_token = max([1] + [display_width(word) for cell in cells for word in cell.split()])
    min_width = min(_widest_char(cells), content_width)
    token_floor = max(min_width, min(longest_token, config.max_token_floor, content_width))

    kind = classify_column(body_cells, header, config)
    if kind is ColumnKind.NARRATIVE:
        floor = max(token_floor, min(content_width, config.narrative_min_width))
    else:
        floor = token_floor

    return ColumnSpec(
        kind=kind,
        content_width=content_width,
        token_floor=token_floor,
        floor=floor,
        min_width=min_width,
        alignment=alignment,
    )


def _shrink_toward(widths: List[int], indices: Sequence[int], targets: Sequence[int], budget: int) -> None:
    """Shrink ``widths[indices]`` toward ``targets`` until the sum fits ``budget``.

    Each column gives up width in proportion to how far it sits above its
    target. The rounding remainder goes to the columns with the most slack
    left, lowest index first, so the result is deterministic.
    """
    excess = sum(widths) - budget
    if excess <= 0:
        return

    slack = {i: widths[i] - targets[i] for i in indices if widths[i] > targets[i]}
    total_slack = sum(slack.values())
    if total_slack == 0:
        return
    if total_slack <= excess:
        for i in slack:
            widths[i] = targets[i]
        return

    cuts = {i: excess * s // total_slack for i, s in slack.items()}
    remainder = excess - sum(cuts.values())
    for i in sorted(slack, key=lambda i: (-(slack[i] - cuts[i]), i)):
        if remainder == 0:
            break
        if cuts[i] < slack[i]:
            cuts[i] += 1
            remainder -= 1

    for i, cut in cuts.items():
        widths[i] -= cut


def allocate_widths(specs: Sequence[ColumnSpec], width: int) -> Optional[List[int]]:
    """Choose a content width for every column so the table fits ``width``.

    Natural widths are kept when they fit. Otherwise Narrative columns shrink
    toward their floor, then Structured columns toward their widest token,
    then every column toward its minimum (mid-word breaks).

    Args:
        specs: Column specs in table order. ``allocated_width`` is updated.
        width: Total available display columns, borders included.

    Returns:
        Content widths per column, or None when even the minimum widths
        plus borders exceed ``width`` (caller falls back to pipe text).
    """
    if not specs:
        return None

    budget = width - table_overhead(len(specs))
    if budget < sum(spec.min_width for spec in specs):
        return None

    widths = [spec.content_width for spec in specs]
    narrative = [i for i, spec in enumerate(specs) if spec.kind is ColumnKind.NARRATIVE]
    structured = [i for i, spec in enumerate(specs) if spec.kind is ColumnKind.STRUCTURED]

    _shrink_toward(widths, narrative, [spec.floor for spec in specs], budget)
    _shrink_toward(widths, structured, [spec.floor for spec in specs], budget)
    _shrink_toward(widths, range(len(specs)), [spec.min_width for spec in specs], budget)

    if sum(widths) > budget:
        return None

    for spec, allocated in zip(specs, widths):
        spec.allocated_width = allocated
    return widths
