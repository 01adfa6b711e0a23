# streamgrid/plugins/reflow/cells.py
"""Transcript cells.

A finalized assistant message stores only its markdown source and renders
it again on every ``display_lines(width)`` call, so a resize is always
exact and there is no cache to invalidate. While a message streams, the
lines drained from the stable queue live in transient chunk cells that are
replaced by one markdown cell when the stream is consolidated.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Protocol, runtime_checkable

from rich.text import Text

from streamgrid.plugins.markdown_renderer import LineRenderer, render_agent_markdown


@runtime_checkable
class TranscriptCell(Protocol):
    """Anything the transcript can lay out at a width."""

    def display_lines(self, width: int) -> List[Text]:
        ...


@dataclass(frozen=True)
class AgentMarkdownCell:
    """A finalized assistant message.

    Attributes:
        markdown_source: The complete message source, stored verbatim.
    """
    markdown_source: str

    def display_lines(self, width: int, renderer: Optional[LineRenderer] = None) -> List[Text]:
        """Render the stored source at ``width`` (no caching)."""
        if renderer is not None:
            return renderer.render(self.markdown_source, width)
        return render_agent_markdown(self.markdown_source, width)


@dataclass
class StreamingChunkCell:
    """Lines emitted to scrollback while a message was still streaming.

    The lines keep the width they were laid out at; consolidation replaces
    these cells with an AgentMarkdownCell.

    Attributes:
        lines: The emitted lines.
        starts_message: Whether this is the first chunk of its message.
    """
    lines: List[Text] = field(default_factory=list)
    starts_message: bool = False

    def display_lines(self, width: int) -> List[Text]:
        return list(self.lines)
