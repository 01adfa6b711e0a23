"""Markdown rendering into styled terminal lines."""

from .code import CodeHighlighter
from .fences import (
    Fence,
    FenceContext,
    classify_fence_lines,
    find_open_fence_start,
    is_close_fence,
    parse_open_fence,
    unwrap_markdown_fences,
)
from .protocol import LineRenderer
from .renderer import MarkdownRenderer, create_renderer, render_agent_markdown

__all__ = [
    "CodeHighlighter",
    "Fence",
    "FenceContext",
    "LineRenderer",
    "MarkdownRenderer",
    "classify_fence_lines",
    "create_renderer",
    "find_open_fence_start",
    "is_close_fence",
    "parse_open_fence",
    "render_agent_markdown",
    "unwrap_markdown_fences",
]
