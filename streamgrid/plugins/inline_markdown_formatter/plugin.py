# streamgrid/plugins/inline_markdown_formatter/plugin.py
"""Inline markdown formatter producing styled ``rich.text.Text`` lines.

This plugin turns inline markdown elements of a single source line into
styled spans. It handles:

- ``code`` → configurable foreground/background color
- **bold** → bold attribute
- *italic* → italic attribute
- ***bold italic*** → bold + italic attributes
- ~~strikethrough~~ → strikethrough attribute
- [text](url) → underlined text with configurable color (URL stripped)

Underscore-based emphasis (_italic_, __bold__) is intentionally not supported
to avoid false positives with code identifiers, file paths, and URLs.

The formatter also answers whether a line ends with an inline construct that
is still open (``has_unclosed_markers``). The stream controller uses that to
keep a half-arrived ``**bold`` from being committed as plain asterisks.

Usage:
    from streamgrid.plugins.inline_markdown_formatter import create_plugin

    formatter = create_plugin()
    formatter.set_inline_code_style("#87d7d7", "#2d2d3d")
    line = formatter.format_line("Use `foo()` here")   # -> rich.text.Text
"""

import re
from typing import Any, Dict, Optional

from rich.style import Style
from rich.text import Text

from streamgrid.config import (
    DEFAULT_INLINE_CODE_BG,
    DEFAULT_INLINE_CODE_FG,
    DEFAULT_LINK_FG,
    RenderConfig,
)
from streamgrid.trace import trace as _trace_write


def _trace(msg: str) -> None:
    """Write trace message to log file for debugging."""
    _trace_write("INLINE_MD_FORMATTER", msg)


BOLD = Style(bold=True)
ITALIC = Style(italic=True)
BOLD_ITALIC = Style(bold=True, italic=True)
STRIKETHROUGH = Style(strike=True)

# Combined regex for inline markdown elements.
# Order matters: longer/more specific patterns are tried first to prevent
# partial matches (e.g., *** before ** before *).
#
# Each pattern ensures no whitespace immediately inside the markers to
# prevent false positives like "2 * 3 * 4" being treated as italic.
#
# The negative lookahead/lookbehind for * in the italic pattern prevents
# it from matching inside ** or *** sequences.
INLINE_MD_PATTERN = re.compile(
    r'(?P<code>`[^`\n]+`)'                                           # `code`
    r'|(?P<bold_italic>\*\*\*(?!\s)(?:(?!\*\*\*).)+?(?<!\s)\*\*\*)'  # ***bold italic***
    r'|(?P<bold>\*\*(?!\s)(?:(?!\*\*).)+?(?<!\s)\*\*)'               # **bold**
    r'|(?P<italic>(?<!\*)\*(?!\*|\s)(?:(?!\*).)+?(?<!\s)\*(?!\*))'    # *italic*
    r'|(?P<strike>~~(?!\s)(?:(?!~~).)+?(?<!\s)~~)'                   # ~~strikethrough~~
    r'|(?P<link>\[(?P<link_text>[^\]\n]+)\]\((?P<link_url>[^)\n]+)\))'  # [text](url)
)

# Quick check: if a line contains none of these characters, skip regex
_MARKER_CHARS = frozenset('`*~[')

# Opening markers left over once every complete element is removed.
_OPEN_STRONG = re.compile(r'\*\*(?!\s|$)')
_OPEN_STRIKE = re.compile(r'~~(?!\s|$)')
_OPEN_LINK = re.compile(r'\[[^\]\n]*(?:\](?:\([^)\n]*)?)?$')


def _code_style(fg_hex: str, bg_hex: Optional[str]) -> Style:
    return Style(color=fg_hex, bgcolor=bg_hex) if bg_hex else Style(color=fg_hex)


class InlineMarkdownFormatterPlugin:
    """Formats inline markdown elements of a line into styled text.

    Inline elements handled:
    - ``code`` → configurable foreground/background color
    - **bold** → bold attribute
    - *italic* → italic attribute
    - ***bold italic*** → bold + italic
    - ~~strikethrough~~ → strikethrough attribute
    - [text](url) → underlined text (URL stripped)

    Style lifecycle:
    - Default colors are applied at construction.
    - ``set_inline_code_style()`` / ``set_link_style()`` update colors
      at any time (typically after a theme change).
    """

    def __init__(self):
        self._code_style = _code_style(DEFAULT_INLINE_CODE_FG, DEFAULT_INLINE_CODE_BG)
        self._link_style = Style(color=DEFAULT_LINK_FG, underline=True)

    @property
    def name(self) -> str:
        """Unique identifier for this formatter."""
        return "inline_markdown_formatter"

    def initialize(self, config: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the formatter with configuration.

        Args:
            config: Dict with optional settings:
                - inline_code_fg: Hex color for inline code foreground
                - inline_code_bg: Hex color for inline code background
                - link_fg: Hex color for link text
        """
        config = config or {}

        inline_code_fg = config.get("inline_code_fg")
        inline_code_bg = config.get("inline_code_bg")
        if inline_code_fg:
            self.set_inline_code_style(inline_code_fg, inline_code_bg)

        link_fg = config.get("link_fg")
        if link_fg:
            self.set_link_style(link_fg)

    def set_inline_code_style(self, fg_hex: str, bg_hex: Optional[str] = None) -> None:
        """Configure the style for inline code elements.

        Args:
            fg_hex: Foreground hex color (e.g., "#87d7d7").
            bg_hex: Background hex color (e.g., "#2d2d3d"), or None for no background.
        """
        self._code_style = _code_style(fg_hex, bg_hex)

    def set_link_style(self, fg_hex: str) -> None:
        """Configure the style for link text.

        Args:
            fg_hex: Foreground hex color (e.g., "#5f87ff").
        """
        self._link_style = Style(color=fg_hex, underline=True)

    @property
    def code_style(self) -> Style:
        return self._code_style

    @property
    def link_style(self) -> Style:
        return self._link_style

    def format_line(self, line: str, base_style: Optional[Style] = None) -> Text:
        """Apply inline markdown formatting to a single line.

        Args:
            line: Text line (without trailing newline).
            base_style: Style for the whole line (e.g., bold for headings).

        Returns:
            Styled line. Plain text is returned unstyled if no markdown
            markers are present.
        """
        result = Text(style=base_style or "")
        if not line:
            return result

        # Quick check: skip regex if no markdown marker characters present
        if not _MARKER_CHARS.intersection(line):
            result.append(line)
            return result

        last_end = 0
        for match in INLINE_MD_PATTERN.finditer(line):
            # Plain text before this match
            if match.start() > last_end:
                result.append(line[last_end:match.start()])

            if match.group('code'):
                result.append(match.group('code')[1:-1], self._code_style)
            elif match.group('bold_italic'):
                result.append(match.group('bold_italic')[3:-3], BOLD_ITALIC)
            elif match.group('bold'):
                result.append(match.group('bold')[2:-2], BOLD)
            elif match.group('italic'):
                result.append(match.group('italic')[1:-1], ITALIC)
            elif match.group('strike'):
                result.append(match.group('strike')[2:-2], STRIKETHROUGH)
            elif match.group('link'):
                result.append(match.group('link_text'), self._link_style)

            last_end = match.end()

        if last_end < len(line):
            result.append(line[last_end:])

        return result

    def has_unclosed_markers(self, line: str) -> bool:
        """Whether ``line`` contains an inline element that has not closed yet.

        Complete elements are removed first; whatever remains is checked for
        an odd backtick, an opening ``**`` or ``~~``, or a link whose
        ``[text](url)`` form is cut off at the end of the line.
        """
        if not _MARKER_CHARS.intersection(line):
            return False

        remaining = INLINE_MD_PATTERN.sub("", line)
        if remaining.count('`') % 2 == 1:
            _trace(f"unclosed code span: {line[:60]!r}")
            return True
        if _OPEN_STRONG.search(remaining) or _OPEN_STRIKE.search(remaining):
            _trace(f"unclosed emphasis: {line[:60]!r}")
            return True
        if _OPEN_LINK.search(remaining):
            _trace(f"unclosed link: {line[:60]!r}")
            return True
        return False


def create_plugin(config: Optional[RenderConfig] = None) -> InlineMarkdownFormatterPlugin:
    """Factory function to create an InlineMarkdownFormatterPlugin instance."""
    plugin = InlineMarkdownFormatterPlugin()
    if config is not None:
        plugin.initialize({
            "inline_code_fg": config.inline_code_fg,
            "inline_code_bg": config.inline_code_bg,
            "link_fg": config.link_fg,
        })
    return plugin
