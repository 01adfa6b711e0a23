# streamgrid/plugins/markdown_renderer/renderer.py
"""Line-oriented markdown renderer for agent transcript output.

Turns markdown source into ``rich.text.Text`` lines for a given width.
Each source line renders on its own (soft line breaks are kept), so a
newline-terminated prefix of a source renders to a prefix of the full
rendering. Tables are the exception: a table renders as one unit because
its column widths depend on every row, which is why the stream controller
holds tables back until they close.

Blocks handled:
- blank lines
- fenced code (marker lines hidden, lines highlighted and hard-wrapped)
- ATX headings (# .. ######)
- thematic breaks (---, ***, ___)
- bullet and ordered list items with a hanging indent
- blockquotes (rendered recursively behind a ▌ gutter)
- indented code (4+ spaces)
- pipe tables (box-drawn, see table_formatter)
- paragraphs (inline styles, word-wrapped)

Usage:
    from streamgrid.plugins.markdown_renderer import create_renderer

    renderer = create_renderer()
    for line in renderer.render(source, width=80):
        console.print(line)
"""

import re
from typing import List, Optional

from rich.style import Style
from rich.text import Text

from streamgrid.config import RenderConfig, get_default_config
from streamgrid.display_width import display_width, fold_text, wrap_text
from streamgrid.plugins.inline_markdown_formatter import (
    InlineMarkdownFormatterPlugin,
    create_plugin as create_inline_formatter,
)
from streamgrid.plugins.table_detect import is_table_header_line, strip_blockquote_prefix
from streamgrid.plugins.table_formatter import (
    TableFormatterPlugin,
    parse_markdown_table,
)

from .code import CodeHighlighter
from .fences import (
    FenceContext,
    classify_fence_lines,
    find_open_fence_start,
    is_close_fence,
    parse_open_fence,
    unwrap_markdown_fences,
)

_HEADING = re.compile(r"^ {0,3}(?P<level>#{1,6})(?:\s+(?P<text>.*?))?(?:\s+#+)?\s*$")
_THEMATIC_BREAK = re.compile(r"^ {0,3}([-*_])(?:[ \t]*\1){2,}[ \t]*$")
_LIST_ITEM = re.compile(r"^(?P<indent>\s*)(?P<marker>[-*+]|\d{1,9}[.)])\s+(?P<text>.*)$")
_BLOCKQUOTE = re.compile(r"^ {0,3}>")
_INDENTED_CODE = re.compile(r"^(?: {4}|\t)")

BULLET = "•"
QUOTE_GUTTER = "▌ "

HEADING_STYLES = {
    1: Style(bold=True, underline=True),
    2: Style(bold=True),
}
DEFAULT_HEADING_STYLE = Style(bold=True, italic=True)
RULE_STYLE = Style(dim=True)
QUOTE_STYLE = Style(dim=True)
MARKER_STYLE = Style(dim=True)
INDENTED_CODE_STYLE = Style(dim=True)


class MarkdownRenderer:
    """Renders markdown source into styled terminal lines.

    Implements the LineRenderer protocol. Rendering is pure: no state is
    kept between calls, so re-rendering at a new width is always exact.
    """

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        inline_formatter: Optional[InlineMarkdownFormatterPlugin] = None,
        table_formatter: Optional[TableFormatterPlugin] = None,
    ):
        self._config = config or get_default_config()
        self._inline = inline_formatter or create_inline_formatter(self._config)
        self._tables = table_formatter or TableFormatterPlugin(self._config, self._inline)
        self._code = CodeHighlighter(self._config.code_theme)

    @property
    def name(self) -> str:
        """Unique identifier for this renderer."""
        return "markdown_renderer"

    @property
    def config(self) -> RenderConfig:
        return self._config

    # ==================== LineRenderer Protocol ====================

    def render(self, source: str, width: int) -> List[Text]:
        """Render markdown source into styled lines.

        Leading and trailing blank lines are dropped.

        Raises:
            ValueError: If width is not positive.
        """
        if width <= 0:
            raise ValueError(f"render width must be positive, got {width}")

        lines = self._render_lines(unwrap_markdown_fences(source).splitlines(), width)

        start = 0
        while start < len(lines) and not lines[start].plain.strip():
            start += 1
        end = len(lines)
        while end > start and not lines[end - 1].plain.strip():
            end -= 1
        return lines[start:end]

    def incomplete_tail_start(self, source: str) -> Optional[int]:
        """Index of the first source line whose rendering may still change.

        Three things can still change with more input:
        - an open md/markdown fence (it may unwrap into a table once closed)
        - a trailing line that could be a table header (a delimiter may follow)
        - a trailing line with an inline element that has not closed
        """
        lines = source.splitlines()
        if not lines:
            return None

        candidates = []
        fence_start = find_open_fence_start(lines)
        if fence_start is not None:
            fence = parse_open_fence(lines[fence_start])
            if fence is not None and fence.is_markdown:
                candidates.append(fence_start)

        last_idx = len(lines) - 1
        if classify_fence_lines(lines)[last_idx] is FenceContext.OUTSIDE:
            last = strip_blockquote_prefix(lines[last_idx])
            if is_table_header_line(last) or self._inline.has_unclosed_markers(last):
                candidates.append(last_idx)

        return min(candidates) if candidates else None

    # ==================== Block Rendering ====================

    def _render_lines(self, lines: List[str], width: int) -> List[Text]:
        out: List[Text] = []
        idx = 0
        while idx < len(lines):
            line = lines[idx]

            fence = parse_open_fence(line)
            if fence is not None:
                idx += 1
                while idx < len(lines) and not is_close_fence(lines[idx], fence):
                    out.extend(self._render_code_line(lines[idx], fence.info, width))
                    idx += 1
                idx += 1  # closing fence (or end of input)
                continue

            if not line.strip():
                out.append(Text(""))
                idx += 1
                continue

            table = parse_markdown_table(lines[idx:])
            if table is not None:
                out.extend(self._tables.render_table(table, width))
                idx += len(table.source_lines)
                continue

            if _BLOCKQUOTE.match(line):
                end = idx
                while end < len(lines) and _BLOCKQUOTE.match(lines[end]):
                    end += 1
                out.extend(self._render_blockquote(lines[idx:end], width))
                idx = end
                continue

            out.extend(self._render_line(line, width))
            idx += 1
        return out

    def _render_line(self, line: str, width: int) -> List[Text]:
        """Render a single non-fence, non-table source line."""
        heading = _HEADING.match(line)
        if heading:
            level = len(heading.group("level"))
            style = HEADING_STYLES.get(level, DEFAULT_HEADING_STYLE)
            return wrap_text(self._inline.format_line(heading.group("text") or "", style), width)

        if _THEMATIC_BREAK.match(line):
            return [Text("─" * width, style=RULE_STYLE)]

        item = _LIST_ITEM.match(line)
        if item:
            return self._render_list_item(item, width)

        if _INDENTED_CODE.match(line):
            code = line.expandtabs(4)[4:]
            return fold_text(Text(code, style=INDENTED_CODE_STYLE), width)

        return wrap_text(self._inline.format_line(line.strip()), width)

    def _render_list_item(self, item: "re.Match", width: int) -> List[Text]:
        """Render a list item with its marker and a hanging indent."""
        indent = item.group("indent").expandtabs(4)
        marker = item.group("marker")
        if marker in "-*+":
            marker = BULLET
        prefix = f"{indent}{marker} "
        prefix_width = display_width(prefix)
        content = self._inline.format_line(item.group("text"))

        if width - prefix_width < 1:
            return wrap_text(Text(prefix, style=MARKER_STYLE) + content, width)

        lines = []
        for i, piece in enumerate(wrap_text(content, width - prefix_width)):
            if i == 0:
                line = Text(indent)
                line.append(f"{marker} ", style=MARKER_STYLE)
            else:
                line = Text(" " * prefix_width)
            line.append_text(piece)
            lines.append(line)
        return lines

    def _render_blockquote(self, lines: List[str], width: int) -> List[Text]:
        """Render consecutive blockquote lines behind a gutter.

        The quoted content is rendered recursively, so quoted tables, lists
        and nested quotes work as they do at the top level.
        """
        inner = [_BLOCKQUOTE.sub("", line, count=1) for line in lines]
        inner = [line[1:] if line.startswith(" ") else line for line in inner]

        gutter_width = display_width(QUOTE_GUTTER)
        if width - gutter_width < 1:
            return self._render_lines(inner, width)

        rendered = []
        for line in self._render_lines(inner, width - gutter_width):
            quoted = Text(QUOTE_GUTTER, style=QUOTE_STYLE)
            quoted.append_text(line)
            rendered.append(quoted)
        return rendered

    def _render_code_line(self, line: str, language: str, width: int) -> List[Text]:
        """Highlight and hard-wrap one fenced code line."""
        return fold_text(self._code.highlight_line(line.expandtabs(4), language), width)


def create_renderer(config: Optional[RenderConfig] = None) -> MarkdownRenderer:
    """Factory function to create a MarkdownRenderer instance."""
    return MarkdownRenderer(config)


_default_renderer: Optional[MarkdownRenderer] = None


def render_agent_markdown(source: str, width: int) -> List[Text]:
    """Render agent markdown with the process-wide default renderer."""
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = create_renderer()
    return _default_renderer.render(source, width)
