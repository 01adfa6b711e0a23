# streamgrid/plugins/streaming/controller.py
"""Stream controller: full re-render per delta, stable queue, mutable tail.

Every committed delta re-renders the whole accumulated source. The holdback
scan then decides how many leading lines are stable; newly stable lines go
into a FIFO the presentation layer drains at its own pace, while the rest
(the tail) is redrawn from the latest render every frame.

Counters (the invariant is asserted after every mutation):

    emitted_stable_len <= enqueued_stable_len <= len(rendered_lines)

    rendered_lines: [ emitted ........ | queued ....... | tail ......... ]
                      0       emitted_stable_len  enqueued_stable_len  len

On resize, the emitted count is remapped to the new width through a source
offset, so already-emitted lines are neither re-queued nor lost.

Usage:
    core = StreamCore(width=80)
    core.push("| A | B |\\n")
    lines, idle = core.on_commit_tick()
    tail = core.tail_lines()
    remaining, source = core.finalize()
"""

import logging
from typing import List, Optional, Tuple

from rich.text import Text

from streamgrid.config import RenderConfig, get_default_config
from streamgrid.plugins.markdown_renderer import LineRenderer, create_renderer
from streamgrid.trace import trace as _trace_write

from .holdback import compute_holdback, table_holdback_state
from .protocol import StreamClosedError, StreamState

logger = logging.getLogger(__name__)


def _trace(msg: str) -> None:
    """Write trace message to log file for debugging."""
    _trace_write("STREAM_CORE", msg)


class StreamCore:
    """Controller for one in-flight assistant message.

    Attributes:
        state: Delta collector and stable-line queue.
        width: Current render width.
        raw_source: Accumulated newline-terminated source (append-only).
        rendered_lines: Full render of ``raw_source`` at ``width``.
        enqueued_stable_len: Lines handed to the queue so far.
        emitted_stable_len: Lines drained from the queue so far.
        header_emitted: Whether the first chunk of this message was emitted.
    """

    def __init__(
        self,
        width: int,
        renderer: Optional[LineRenderer] = None,
        config: Optional[RenderConfig] = None,
    ):
        if width <= 0:
            raise ValueError(f"stream width must be positive, got {width}")
        self._config = config or get_default_config()
        self._renderer = renderer or create_renderer(self._config)
        self.state = StreamState()
        self.width = width
        self.raw_source = ""
        self.rendered_lines: List[Text] = []
        self.enqueued_stable_len = 0
        self.emitted_stable_len = 0
        self.header_emitted = False
        self._closed = False

    @property
    def renderer(self) -> LineRenderer:
        return self._renderer

    @property
    def closed(self) -> bool:
        return self._closed

    # ==================== Deltas ====================

    def push(self, delta: str) -> bool:
        """Push a delta; commit complete lines and enqueue newly stable lines.

        Returns:
            True if new lines were enqueued.

        Raises:
            StreamClosedError: If the stream was finalized or aborted.
        """
        if self._closed:
            raise StreamClosedError("cannot push into a closed stream")
        self.state.collector.push_delta(delta)

        if "\n" not in delta:
            return False
        committed = self.state.collector.commit_complete_source()
        if not committed:
            return False

        self.raw_source += committed
        self._recompute_render()
        enqueued = self._sync_stable_queue()
        _trace(
            f"push: +{committed.count(chr(10))} lines, rendered={len(self.rendered_lines)} "
            f"enqueued={self.enqueued_stable_len} emitted={self.emitted_stable_len} "
            f"holdback={table_holdback_state(self.raw_source).state.value}"
        )
        self._check_invariants()
        return enqueued

    # ==================== Draining ====================

    def on_commit_tick(self) -> Tuple[List[Text], bool]:
        """Emit at most one queued line.

        Returns:
            (emitted lines, whether the queue is now idle)
        """
        step = self.state.step()
        self._mark_emitted(step)
        self._check_invariants()
        return step, self.state.is_idle()

    def on_commit_tick_batch(self, max_lines: int) -> Tuple[List[Text], bool]:
        """Emit up to ``max_lines`` queued lines (at least one).

        Intended for catch-up drains; keep ``max_lines`` bounded or the reveal
        animation collapses into a single jump.
        """
        step = self.state.drain_n(max(1, max_lines))
        self._mark_emitted(step)
        self._check_invariants()
        return step, self.state.is_idle()

    @property
    def queued_lines(self) -> int:
        """Number of stable lines waiting to be emitted."""
        return self.state.queued_len()

    def oldest_queued_age(self, now: Optional[float] = None) -> Optional[float]:
        """Seconds the oldest queued line has been waiting."""
        return self.state.oldest_queued_age(now)

    def tail_lines(self) -> List[Text]:
        """Current mutable tail (everything after the enqueued stable lines)."""
        start = min(self.enqueued_stable_len, len(self.rendered_lines))
        return self.rendered_lines[start:]

    def has_live_tail(self) -> bool:
        return bool(self.tail_lines())

    def tail_starts_stream(self) -> bool:
        """Whether the tail would be the first visible chunk of the message."""
        return not self.header_emitted and self.enqueued_stable_len == 0

    # ==================== Resize ====================

    def set_width(self, width: int) -> bool:
        """Re-render at a new width and remap the emitted count.

        The emitted count maps to a source offset at the old width, and the
        source before that offset is re-rendered at the new width to get the
        new emitted count. The queue is rebuilt from the new render.

        When the source holds constructs that can change earlier lines
        (reference definitions, footnotes), the offset cannot be trusted: the
        whole stable region is marked emitted instead and the caller must
        redraw it from ``stable_lines()``.

        Returns:
            True if the stable region was rebuilt from scratch.
        """
        from streamgrid.plugins.reflow.remap import (
            has_prefix_unstable_constructs,
            remap_emitted_count,
        )

        if width <= 0:
            raise ValueError(f"stream width must be positive, got {width}")
        if width == self.width:
            return False

        old_width = self.width
        self.width = width
        if not self.raw_source:
            return False

        rebuilt = has_prefix_unstable_constructs(self.raw_source)
        if rebuilt:
            self._recompute_render()
            self.state.clear_queue()
            self.emitted_stable_len = 0
            target = self._target_stable_len()
            self.emitted_stable_len = self.enqueued_stable_len = target
        else:
            if self.emitted_stable_len > 0:
                self.emitted_stable_len = remap_emitted_count(
                    self.raw_source, old_width, width, self.emitted_stable_len, self._renderer,
                )
            self._recompute_render()
            self._rebuild_stable_queue_from_render()

        _trace(
            f"set_width: {old_width} -> {width}, rebuilt={rebuilt} rendered={len(self.rendered_lines)} "
            f"enqueued={self.enqueued_stable_len} emitted={self.emitted_stable_len}"
        )
        self._check_invariants()
        return rebuilt

    def stable_lines(self) -> List[Text]:
        """Lines already emitted, as laid out at the current width."""
        return self.rendered_lines[:self.emitted_stable_len]

    # ==================== Lifecycle ====================

    def finalize(self) -> Tuple[List[Text], str]:
        """Close the stream, discarding holdback.

        Returns:
            (every line not yet emitted, the complete source). The source is
            what the consolidated transcript cell stores.
        """
        if self._closed:
            raise StreamClosedError("stream already closed")

        remainder = self.state.collector.finalize_and_drain_source()
        if remainder:
            self.raw_source += remainder
        source = self.raw_source

        lines: List[Text] = []
        if source:
            self._recompute_render()
            lines = self.rendered_lines[self.emitted_stable_len:]

        _trace(f"finalize: {len(lines)} remaining lines, {len(source)} source chars")
        self._reset_stream_state()
        self._closed = True
        return lines, source

    def abort(self) -> str:
        """Close the stream without emitting anything further.

        Returns:
            The source accumulated so far, partial last line included.
        """
        if self._closed:
            return ""
        source = self.raw_source + self.state.collector.finalize_and_drain_source()
        _trace(f"abort: dropping {self.queued_lines} queued lines, {len(source)} source chars")
        self._reset_stream_state()
        self._closed = True
        return source

    # ==================== Internal Methods ====================

    def _mark_emitted(self, lines: List[Text]) -> None:
        self.emitted_stable_len += len(lines)
        if lines:
            self.header_emitted = True

    def _recompute_render(self) -> None:
        """Re-render the full source at the current width."""
        self.rendered_lines = self._renderer.render(self.raw_source, self.width)
        if len(self.rendered_lines) < self.emitted_stable_len:
            # Already-emitted lines cannot be taken back; keep the counters valid
            logger.warning(
                "Render shrank below emitted lines (%d < %d)",
                len(self.rendered_lines), self.emitted_stable_len,
            )
            _trace(f"render shrank: {len(self.rendered_lines)} < emitted {self.emitted_stable_len}")
            self.emitted_stable_len = len(self.rendered_lines)
            self.enqueued_stable_len = min(self.enqueued_stable_len, self.emitted_stable_len)
            self.state.clear_queue()

    def _target_stable_len(self) -> int:
        return compute_holdback(
            self.raw_source,
            self.rendered_lines,
            self._renderer,
            self.width,
            previous_stable=self.emitted_stable_len,
        )

    def _sync_stable_queue(self) -> bool:
        """Advance the stable boundary and enqueue newly stable lines.

        If the boundary moved backward into queued-but-unemitted lines, the
        queue is rebuilt from the latest render.

        Returns:
            True if new lines were enqueued.
        """
        target = self._target_stable_len()

        if target < self.enqueued_stable_len:
            _trace(f"stable boundary moved back: {self.enqueued_stable_len} -> {target}")
            self._rebuild_queue(target)
            return self.state.queued_len() > 0

        if target == self.enqueued_stable_len:
            return False

        self.state.enqueue(self.rendered_lines[self.enqueued_stable_len:target])
        self.enqueued_stable_len = target
        return True

    def _rebuild_stable_queue_from_render(self) -> None:
        """Discard the queue and refill it from the current render."""
        self._rebuild_queue(self._target_stable_len())

    def _rebuild_queue(self, target: int) -> None:
        self.state.clear_queue()
        if self.emitted_stable_len < target:
            self.state.enqueue(self.rendered_lines[self.emitted_stable_len:target])
        self.enqueued_stable_len = target

    def _reset_stream_state(self) -> None:
        self.state.clear()
        self.raw_source = ""
        self.rendered_lines = []
        self.enqueued_stable_len = 0
        self.emitted_stable_len = 0
        self.header_emitted = False

    def _check_invariants(self) -> None:
        assert self.emitted_stable_len <= self.enqueued_stable_len, (
            f"emitted {self.emitted_stable_len} > enqueued {self.enqueued_stable_len}"
        )
        assert self.enqueued_stable_len <= len(self.rendered_lines), (
            f"enqueued {self.enqueued_stable_len} > rendered {len(self.rendered_lines)}"
        )
        assert self.state.queued_len() == self.enqueued_stable_len - self.emitted_stable_len, (
            f"queue holds {self.state.queued_len()} lines, counters say "
            f"{self.enqueued_stable_len - self.emitted_stable_len}"
        )
