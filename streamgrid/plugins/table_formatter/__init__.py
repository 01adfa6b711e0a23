"""Box-drawn table rendering with width-aware column layout."""

from .layout import (
    ColumnKind,
    ColumnSpec,
    allocate_widths,
    build_column_spec,
    classify_column,
    table_overhead,
)
from .plugin import (
    BOX_CHARS,
    MarkdownTable,
    TableFormatterPlugin,
    create_plugin,
    parse_markdown_table,
    render_pipe_fallback,
)

__all__ = [
    "BOX_CHARS",
    "ColumnKind",
    "ColumnSpec",
    "MarkdownTable",
    "TableFormatterPlugin",
    "allocate_widths",
    "build_column_spec",
    "classify_column",
    "create_plugin",
    "parse_markdown_table",
    "render_pipe_fallback",
    "table_overhead",
]
