"""Inline markdown formatting (code, emphasis, strikethrough, links)."""

from .plugin import InlineMarkdownFormatterPlugin, create_plugin

__all__ = ["InlineMarkdownFormatterPlugin", "create_plugin"]
