# streamgrid/plugins/reflow/transcript.py
"""Transcript of cells with one in-flight stream and debounced resizes.

The transcript owns the finalized cells, the chunk cells of the active
stream and the stream's lifecycle:

    begin_stream() ──> STREAMING ──finalize_stream()──> CLOSED (FINALIZED)
                           │──────abort_stream()──────> CLOSED (ABORTED)
                           └──────begin_stream()──────> CLOSED (REPLACED)

Every exit goes through StreamSession._close(), which clears the
"reflowed during this stream" flag, so no exit path can leave it set for
the next stream.

Usage:
    transcript = Transcript(width=80)
    transcript.begin_stream()
    transcript.push_delta("| A | B |\\n")
    emitted = transcript.on_commit_tick()
    result = transcript.finalize_stream()
    if result.needs_redraw:
        redraw(transcript.display_lines())
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from rich.text import Text

from streamgrid.config import RenderConfig, get_default_config
from streamgrid.plugins.markdown_renderer import LineRenderer, create_renderer
from streamgrid.plugins.streaming import StreamClosedError, StreamCore
from streamgrid.trace import trace as _trace_write

from .cells import AgentMarkdownCell, StreamingChunkCell

logger = logging.getLogger(__name__)


def _trace(msg: str) -> None:
    """Write trace message to log file for debugging."""
    _trace_write("TRANSCRIPT", msg)


Cell = Union[AgentMarkdownCell, StreamingChunkCell]


class SessionStatus(Enum):
    """Lifecycle status of a stream session."""
    STREAMING = "streaming"  # Accepting deltas
    CLOSED = "closed"        # Terminal: finalized, aborted or replaced


class CloseReason(Enum):
    """Why a stream session closed."""
    FINALIZED = "finalized"  # Stream ended normally and was consolidated
    ABORTED = "aborted"      # Cancelled mid-flight
    REPLACED = "replaced"    # A new stream began while this one was active


@dataclass
class StreamSession:
    """Per-stream context owned by the transcript.

    Attributes:
        core: The stream controller.
        status: STREAMING until a terminal transition.
        close_reason: Set when the session closes.
        reflowed_during_stream: Whether a resize re-laid-out this stream.
        chunk_cells: Cells holding lines emitted by this stream.
    """
    core: StreamCore
    status: SessionStatus = SessionStatus.STREAMING
    close_reason: Optional[CloseReason] = None
    reflowed_during_stream: bool = False
    chunk_cells: List[StreamingChunkCell] = field(default_factory=list)

    def is_active(self) -> bool:
        return self.status is SessionStatus.STREAMING

    def _close(self, reason: CloseReason) -> bool:
        """Single exit of the lifecycle.

        Returns:
            Whether the stream had been reflowed (the flag is cleared).
        """
        if not self.is_active():
            raise StreamClosedError(f"stream already closed ({self.close_reason.value})")
        reflowed = self.reflowed_during_stream
        self.status = SessionStatus.CLOSED
        self.close_reason = reason
        self.reflowed_during_stream = False
        _trace(f"session closed: {reason.value}, reflowed={reflowed}")
        return reflowed


@dataclass
class ConsolidationResult:
    """Outcome of finalizing a stream.

    Attributes:
        cell: The markdown cell replacing the stream's chunk cells, or None
            when the stream produced no source.
        needs_redraw: Whether scrollback must be redrawn because a resize
            re-laid-out the stream while it was in flight.
        appended_lines: Lines not emitted before finalize.
    """
    cell: Optional[AgentMarkdownCell]
    needs_redraw: bool = False
    appended_lines: List[Text] = field(default_factory=list)


class ResizeDebouncer:
    """Coalesces rapid width changes into the settled final width.

    Each request restarts the window; ``poll`` yields the width only once
    the window has passed without another request.
    """

    def __init__(self, window: float):
        self.window = window
        self._pending_width: Optional[int] = None
        self._deadline = 0.0

    @property
    def pending(self) -> Optional[int]:
        """The width waiting to settle, if any."""
        return self._pending_width

    def request(self, width: int, now: Optional[float] = None) -> None:
        now = time.monotonic() if now is None else now
        self._pending_width = width
        self._deadline = now + self.window

    def poll(self, now: Optional[float] = None) -> Optional[int]:
        """Return the settled width once the window elapsed, else None."""
        if self._pending_width is None:
            return None
        now = time.monotonic() if now is None else now
        if now < self._deadline:
            return None
        width = self._pending_width
        self._pending_width = None
        return width


class Transcript:
    """Ordered transcript cells plus the single in-flight stream.

    Single-threaded: deltas, ticks and resizes are processed one at a time
    on the caller's turn; nothing here locks.
    """

    def __init__(
        self,
        width: int,
        renderer: Optional[LineRenderer] = None,
        config: Optional[RenderConfig] = None,
    ):
        if width <= 0:
            raise ValueError(f"transcript width must be positive, got {width}")
        self._config = config or get_default_config()
        self._renderer = renderer or create_renderer(self._config)
        self.width = width
        self.cells: List[Cell] = []
        self.session: Optional[StreamSession] = None
        self._debouncer = ResizeDebouncer(self._config.resize_debounce_seconds)

    @property
    def active_stream(self) -> Optional[StreamSession]:
        if self.session is not None and self.session.is_active():
            return self.session
        return None

    # ==================== Stream lifecycle ====================

    def begin_stream(self) -> StreamSession:
        """Start a new stream, replacing any stream still in flight.

        A replaced stream keeps what it produced as a markdown cell.
        """
        if self.active_stream is not None:
            _trace("begin_stream: replacing active stream")
            self._end_stream(CloseReason.REPLACED, keep_partial=True)

        self.session = StreamSession(core=StreamCore(self.width, self._renderer, self._config))
        _trace(f"begin_stream: width={self.width}")
        return self.session

    def push_delta(self, delta: str) -> bool:
        """Feed a delta to the active stream.

        Returns:
            True if new stable lines were queued.

        Raises:
            StreamClosedError: If no stream is active.
        """
        session = self._require_active()
        return session.core.push(delta)

    def on_commit_tick(self, max_lines: Optional[int] = None) -> List[Text]:
        """Emit queued stable lines into a chunk cell.

        Args:
            max_lines: Lines to reveal this tick (defaults to
                ``commit_lines_per_tick``).

        Returns:
            The lines emitted this tick.
        """
        session = self.active_stream
        if session is None:
            return []
        starts_message = not session.core.header_emitted
        lines, _idle = session.core.on_commit_tick_batch(max_lines or self._config.commit_lines_per_tick)
        if lines:
            cell = StreamingChunkCell(lines, starts_message=starts_message)
            session.chunk_cells.append(cell)
            self.cells.append(cell)
        return lines

    def tail_lines(self) -> List[Text]:
        """The active stream's mutable tail (empty when nothing streams)."""
        session = self.active_stream
        return session.core.tail_lines() if session is not None else []

    def tail_starts_message(self) -> bool:
        """Whether the live tail is the first visible part of the streaming message."""
        session = self.active_stream
        return session is not None and session.core.tail_starts_stream()

    def finalize_stream(self) -> ConsolidationResult:
        """End the active stream and consolidate it into one markdown cell.

        Raises:
            StreamClosedError: If no stream is active.
        """
        session = self._require_active()
        lines, source = session.core.finalize()
        needs_redraw = session._close(CloseReason.FINALIZED)
        cell = self._consolidate(session, source)
        logger.debug("Stream finalized: %d chars, redraw=%s", len(source), needs_redraw)
        return ConsolidationResult(cell=cell, needs_redraw=needs_redraw, appended_lines=lines)

    def abort_stream(self, keep_partial: bool = True) -> Optional[AgentMarkdownCell]:
        """Cancel the active stream.

        Args:
            keep_partial: Keep the source received so far as a markdown cell;
                otherwise the stream's cells are dropped.

        Returns:
            The kept cell, if any. No-op (None) when nothing streams.
        """
        if self.active_stream is None:
            return None
        return self._end_stream(CloseReason.ABORTED, keep_partial)

    # ==================== Resize ====================

    def request_resize(self, width: int, now: Optional[float] = None) -> None:
        """Record a width change; it applies once it settles (see poll_resize)."""
        if width <= 0:
            raise ValueError(f"transcript width must be positive, got {width}")
        self._debouncer.request(width, now)

    def poll_resize(self, now: Optional[float] = None) -> bool:
        """Apply a settled width change.

        Returns:
            True if the width changed and cells must be redrawn.
        """
        width = self._debouncer.poll(now)
        if width is None or width == self.width:
            return False

        _trace(f"resize: {self.width} -> {width}")
        self.width = width
        session = self.active_stream
        if session is not None:
            rebuilt = session.core.set_width(width)
            session.reflowed_during_stream = True
            if rebuilt:
                self._replace_chunk_cells(
                    session, [StreamingChunkCell(session.core.stable_lines(), starts_message=True)]
                )
        return True

    @property
    def pending_resize(self) -> Optional[int]:
        return self._debouncer.pending

    # ==================== Display ====================

    def display_lines(self) -> List[Text]:
        """Committed lines of every cell at the current width (tail excluded)."""
        lines: List[Text] = []
        for cell in self.cells:
            if isinstance(cell, AgentMarkdownCell):
                lines.extend(cell.display_lines(self.width, self._renderer))
            else:
                lines.extend(cell.display_lines(self.width))
        return lines

    # ==================== Internal Methods ====================

    def _require_active(self) -> StreamSession:
        session = self.active_stream
        if session is None:
            raise StreamClosedError("no active stream")
        return session

    def _end_stream(self, reason: CloseReason, keep_partial: bool) -> Optional[AgentMarkdownCell]:
        session = self._require_active()
        source = session.core.abort()
        session._close(reason)
        if not keep_partial:
            self._replace_chunk_cells(session, [])
            return None
        return self._consolidate(session, source)

    def _consolidate(self, session: StreamSession, source: str) -> Optional[AgentMarkdownCell]:
        """Replace the session's chunk cells with one markdown cell."""
        cell = AgentMarkdownCell(source) if source.strip() else None
        self._replace_chunk_cells(session, [cell] if cell is not None else [])
        return cell

    def _replace_chunk_cells(self, session: StreamSession, replacement: List[Cell]) -> None:
        """Swap the session's chunk cells for ``replacement`` in place."""
        positions = [
            idx for idx, cell in enumerate(self.cells)
            if any(cell is chunk for chunk in session.chunk_cells)
        ]
        insert_at = positions[0] if positions else len(self.cells)
        for idx in reversed(positions):
            del self.cells[idx]
        self.cells[insert_at:insert_at] = replacement
        session.chunk_cells = [cell for cell in replacement if isinstance(cell, StreamingChunkCell)]
