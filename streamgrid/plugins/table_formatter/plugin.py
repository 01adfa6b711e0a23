# streamgrid/plugins/table_formatter/plugin.py
"""Table formatter plugin with box-drawing rendering.

Renders parsed markdown pipe tables as Unicode box-drawing grids that fit
a given terminal width:

    ┌──────┬─────────────────┐
    │ Name │ Notes           │
    ├──────┼─────────────────┤
    │ foo  │ wraps inside    │
    │      │ its own column  │
    └──────┴─────────────────┘

Column widths come from layout.allocate_widths(); cell text is styled by
the inline markdown formatter, so tables and paragraphs share one set of
inline styles. When no allocation can fit, the original pipe rows are
word-wrapped without borders instead.

Usage:
    from streamgrid.plugins.table_formatter import create_plugin, parse_markdown_table

    table = parse_markdown_table(["| A | B |", "|---|---|", "| x | y |"])
    lines = create_plugin().render_table(table, width=40)   # List[rich.text.Text]
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from rich.style import Style
from rich.text import Text

from streamgrid.config import RenderConfig
from streamgrid.display_width import pad_text, wrap_text
from streamgrid.plugins.inline_markdown_formatter import (
    InlineMarkdownFormatterPlugin,
    create_plugin as create_inline_formatter,
)
from streamgrid.plugins.table_detect import (
    is_table_delimiter_line,
    is_table_header_line,
    is_table_row,
    parse_alignments,
    split_row_cells,
)
from streamgrid.trace import trace as _trace_write

from .layout import allocate_widths, build_column_spec, ColumnSpec

logger = logging.getLogger(__name__)


def _trace(msg: str) -> None:
    """Write trace message to log file for debugging."""
    _trace_write("TABLE_FORMATTER", msg)


# Box-drawing characters for table rendering
BOX_CHARS = {
    "top_left": "┌",
    "top_right": "┐",
    "bottom_left": "└",
    "bottom_right": "┘",
    "horizontal": "─",
    "vertical": "│",
    "t_down": "┬",
    "t_up": "┴",
    "t_right": "├",
    "t_left": "┤",
    "cross": "┼",
}

BORDER_STYLE = Style(dim=True)
HEADER_STYLE = Style(bold=True)


@dataclass
class MarkdownTable:
    """A parsed pipe table.

    Attributes:
        header: Header cell sources.
        rows: Body rows (cell sources); rows may be shorter or longer
            than the header.
        alignments: Per-column alignment from the delimiter row.
        source_lines: The original lines, used by the pipe-text fallback.
    """
    header: List[str]
    rows: List[List[str]] = field(default_factory=list)
    alignments: List[str] = field(default_factory=list)
    source_lines: List[str] = field(default_factory=list)

    @property
    def num_cols(self) -> int:
        return max([len(self.header)] + [len(row) for row in self.rows])

    def alignment(self, col: int) -> str:
        return self.alignments[col] if col < len(self.alignments) else "left"

    def normalized_rows(self) -> List[List[str]]:
        """Header plus body rows, each padded with empty cells to num_cols."""
        num_cols = self.num_cols
        return [row + [""] * (num_cols - len(row)) for row in [self.header] + self.rows]


def parse_markdown_table(lines: Sequence[str]) -> Optional[MarkdownTable]:
    """Parse table source lines (header, delimiter, body rows).

    Returns:
        The parsed table, or None if the lines do not open with a valid
        header/delimiter pair. Body parsing stops at the first non-row line.
    """
    if len(lines) < 2:
        return None
    header_line, delimiter_line = lines[0], lines[1]
    if not is_table_header_line(header_line) or not is_table_delimiter_line(delimiter_line):
        return None

    header = split_row_cells(header_line)
    alignments = parse_alignments(delimiter_line)
    if len(header) != len(alignments):
        return None

    rows = []
    source_lines = [header_line, delimiter_line]
    for line in lines[2:]:
        if not is_table_row(line):
            break
        rows.append(split_row_cells(line))
        source_lines.append(line)

    return MarkdownTable(header=header, rows=rows, alignments=alignments, source_lines=source_lines)


def render_pipe_fallback(rows: Sequence[str], width: int) -> List[Text]:
    """Render table source rows as plain text word-wrapped at ``width``.

    Used when no column allocation fits. No line exceeds ``width``.
    """
    lines: List[Text] = []
    for row in rows:
        lines.extend(wrap_text(Text(row.strip()), width))
    return lines


class TableFormatterPlugin:
    """Renders parsed tables as box-drawn grids sized to a terminal width.

    Features:
    - Narrative/Structured column classification drives shrinking
    - Cells word-wrap inside their column ("spillover" rows)
    - Column alignment from the delimiter row
    - Inline markdown styling inside cells
    - Pipe-text fallback when the table cannot fit
    """

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        inline_formatter: Optional[InlineMarkdownFormatterPlugin] = None,
    ):
        self._config = config or RenderConfig()
        self._inline = inline_formatter or create_inline_formatter(self._config)

    @property
    def name(self) -> str:
        """Unique identifier for this formatter."""
        return "table_formatter"

    @property
    def config(self) -> RenderConfig:
        return self._config

    def render_table(self, table: MarkdownTable, width: int) -> List[Text]:
        """Render a table into styled lines.

        Args:
            table: Parsed table.
            width: Available display columns.

        Returns:
            Bordered grid lines, each exactly ``width`` columns wide, or
            pipe-text fallback lines no wider than ``width``.

        Raises:
            ValueError: If width is not positive.
        """
        if width <= 0:
            raise ValueError(f"table width must be positive, got {width}")

        normalized = table.normalized_rows()
        header_cells = [self._inline.format_line(cell, HEADER_STYLE) for cell in normalized[0]]
        body_rows = [
            [self._inline.format_line(cell) for cell in row] for row in normalized[1:]
        ]

        specs = [
            build_column_spec(
                header_cells[col].plain,
                [row[col].plain for row in body_rows],
                table.alignment(col),
                self._config,
            )
            for col in range(table.num_cols)
        ]

        if allocate_widths(specs, width) is None:
            _trace(f"fallback: {table.num_cols} columns do not fit width {width}")
            logger.debug("Table with %d columns does not fit width %d", table.num_cols, width)
            return render_pipe_fallback(table.source_lines, width)

        lines = [self._make_border("top", specs, width)]
        lines.extend(self._make_row(header_cells, specs, width))
        lines.append(self._make_border("middle", specs, width))
        for row in body_rows:
            lines.extend(self._make_row(row, specs, width))
        lines.append(self._make_border("bottom", specs, width))
        return lines

    def _make_border(self, position: str, specs: Sequence[ColumnSpec], width: int) -> Text:
        """Create a horizontal border line."""
        if position == "top":
            left = BOX_CHARS["top_left"]
            mid = BOX_CHARS["t_down"]
            right = BOX_CHARS["top_right"]
        elif position == "middle":
            left = BOX_CHARS["t_right"]
            mid = BOX_CHARS["cross"]
            right = BOX_CHARS["t_left"]
        else:  # bottom
            left = BOX_CHARS["bottom_left"]
            mid = BOX_CHARS["t_up"]
            right = BOX_CHARS["bottom_right"]

        horiz = BOX_CHARS["horizontal"]
        segments = [horiz * (spec.allocated_width + 2) for spec in specs]
        return pad_text(Text(left + mid.join(segments) + right, style=BORDER_STYLE), width)

    def _make_row(self, cells: Sequence[Text], specs: Sequence[ColumnSpec], width: int) -> List[Text]:
        """Create the output lines of one table row.

        Cells wrap inside their column; continuation lines repeat the
        vertical borders and leave exhausted cells blank.
        """
        vert = BOX_CHARS["vertical"]
        wrapped = [wrap_text(cell, spec.allocated_width) for cell, spec in zip(cells, specs)]
        height = max(len(pieces) for pieces in wrapped)

        lines = []
        for line_idx in range(height):
            line = Text(vert, style=BORDER_STYLE)
            for pieces, spec in zip(wrapped, specs):
                piece = pieces[line_idx] if line_idx < len(pieces) else Text()
                line.append(" ")
                line.append_text(pad_text(piece, spec.allocated_width, spec.alignment))
                line.append(" ")
                line.append(vert, style=BORDER_STYLE)
            lines.append(pad_text(line, width))
        return lines


def create_plugin(config: Optional[RenderConfig] = None) -> TableFormatterPlugin:
    """Factory function to create a TableFormatterPlugin instance."""
    return TableFormatterPlugin(config)
