"""Pipe-table pattern detection shared by rendering and stream holdback."""

from .detect import (
    TableHoldbackState,
    TableScan,
    TableScanLine,
    TableSpan,
    contains_table,
    find_tables,
    is_table_delimiter_line,
    is_table_delimiter_segment,
    is_table_header_line,
    is_table_row,
    parse_alignments,
    parse_table_segments,
    scan_table_pattern,
    split_row_cells,
    strip_blockquote_prefix,
)

__all__ = [
    "TableHoldbackState",
    "TableScan",
    "TableScanLine",
    "TableSpan",
    "contains_table",
    "find_tables",
    "is_table_delimiter_line",
    "is_table_delimiter_segment",
    "is_table_header_line",
    "is_table_row",
    "parse_alignments",
    "parse_table_segments",
    "scan_table_pattern",
    "split_row_cells",
    "strip_blockquote_prefix",
]
