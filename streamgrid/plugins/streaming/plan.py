# streamgrid/plugins/streaming/plan.py
"""Proposed-plan stream: the holdback controller wrapped in a plan block.

A plan streams through the same StreamCore as an assistant message; only
the emitted lines are decorated:

    • Proposed Plan          <- header, once per plan
                             <- spacer
      ·                      <- top padding, once
      <plan lines>           <- indented, plan style
      ·                      <- bottom padding, on finalize

The markdown is laid out ``PLAN_INDENT`` columns narrower than the plan
width, so the indented lines still fit.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from rich.style import Style
from rich.text import Text

from streamgrid.config import RenderConfig
from streamgrid.plugins.markdown_renderer import LineRenderer
from streamgrid.trace import trace as _trace_write

from .controller import StreamCore

PLAN_TITLE = "Proposed Plan"
PLAN_INDENT = "  "
PLAN_STYLE = Style(bgcolor="#262630")


def _trace(msg: str) -> None:
    """Write trace message to log file for debugging."""
    _trace_write("PLAN_STREAM", msg)


@dataclass
class PlanChunk:
    """Decorated lines from one plan emission.

    Attributes:
        lines: Header, padding and indented plan lines, ready to display.
        is_continuation: False for the chunk that carries the header.
    """
    lines: List[Text] = field(default_factory=list)
    is_continuation: bool = False


def _plan_body_width(width: int) -> int:
    return max(1, width - len(PLAN_INDENT))


class PlanStream:
    """Streams a proposed plan with a one-time header and padded, indented body."""

    def __init__(
        self,
        width: int,
        renderer: Optional[LineRenderer] = None,
        config: Optional[RenderConfig] = None,
    ):
        if width <= 0:
            raise ValueError(f"plan width must be positive, got {width}")
        self.width = width
        self.core = StreamCore(_plan_body_width(width), renderer, config)
        self.header_emitted = False
        self.top_padding_emitted = False

    def push(self, delta: str) -> bool:
        return self.core.push(delta)

    def on_commit_tick(self) -> Tuple[Optional[PlanChunk], bool]:
        lines, idle = self.core.on_commit_tick()
        return self._emit(lines, include_bottom_padding=False), idle

    def on_commit_tick_batch(self, max_lines: int) -> Tuple[Optional[PlanChunk], bool]:
        lines, idle = self.core.on_commit_tick_batch(max_lines)
        return self._emit(lines, include_bottom_padding=False), idle

    @property
    def queued_lines(self) -> int:
        return self.core.queued_lines

    def oldest_queued_age(self, now: Optional[float] = None) -> Optional[float]:
        return self.core.oldest_queued_age(now)

    def set_width(self, width: int) -> bool:
        """Reflow the plan body for a new outer width."""
        if width <= 0:
            raise ValueError(f"plan width must be positive, got {width}")
        self.width = width
        return self.core.set_width(_plan_body_width(width))

    def finalize(self) -> Tuple[PlanChunk, str]:
        """Close the plan, emitting the remaining lines and the bottom padding.

        Returns:
            (the final chunk, the complete plan source)
        """
        lines, source = self.core.finalize()
        chunk = self._emit(lines, include_bottom_padding=True)
        _trace(f"finalize: {len(chunk.lines)} lines, {len(source)} source chars")
        return chunk, source

    def _emit(self, lines: List[Text], include_bottom_padding: bool) -> Optional[PlanChunk]:
        if not lines and not include_bottom_padding:
            return None

        chunk = PlanChunk(is_continuation=self.header_emitted)
        if not self.header_emitted:
            header = Text()
            header.append("• ", style="dim")
            header.append(PLAN_TITLE, style="bold")
            chunk.lines.extend([header, Text(" ")])
            self.header_emitted = True

        body: List[Text] = []
        if not self.top_padding_emitted:
            body.append(Text(" "))
            self.top_padding_emitted = True
        body.extend(lines)
        if include_bottom_padding:
            body.append(Text(" "))

        for line in body:
            indented = Text(PLAN_INDENT)
            indented.append_text(line)
            indented.stylize(PLAN_STYLE)
            chunk.lines.append(indented)
        return chunk
