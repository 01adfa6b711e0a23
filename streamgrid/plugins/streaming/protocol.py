# streamgrid/plugins/streaming/protocol.py
"""Data structures shared by the stream controller and its consumers.

The controller pushes newly stable lines into a FIFO; the presentation layer
drains it at its own pace (an animation budget per frame). Draining only
pops precomputed lines, it never re-renders.
"""

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Iterable, List, Optional

from rich.text import Text

from .collector import MarkdownStreamCollector


class StreamClosedError(RuntimeError):
    """Raised when a delta is pushed into a stream that already closed."""


@dataclass
class QueuedLine:
    """A stable line waiting to be revealed.

    Attributes:
        line: The rendered line.
        enqueued_at: time.monotonic() timestamp of when it became stable.
    """
    line: Text
    enqueued_at: float = field(default_factory=time.monotonic)


class StreamState:
    """Per-stream delta collector plus the queue of stable lines.

    Attributes:
        collector: Newline-gated delta buffer.
        queued_lines: FIFO of stable lines not yet emitted.
    """

    def __init__(self):
        self.collector = MarkdownStreamCollector()
        self.queued_lines: Deque[QueuedLine] = deque()

    def enqueue(self, lines: Iterable[Text], now: Optional[float] = None) -> None:
        """Append stable lines to the queue, stamped with ``now``."""
        stamp = time.monotonic() if now is None else now
        self.queued_lines.extend(QueuedLine(line, stamp) for line in lines)

    def step(self) -> List[Text]:
        """Pop at most one queued line."""
        return self.drain_n(1)

    def drain_n(self, max_lines: int) -> List[Text]:
        """Pop up to ``max_lines`` queued lines in order."""
        drained = []
        while self.queued_lines and len(drained) < max_lines:
            drained.append(self.queued_lines.popleft().line)
        return drained

    def clear_queue(self) -> None:
        """Discard queued lines (they will be re-enqueued from a fresh render)."""
        self.queued_lines.clear()

    def queued_len(self) -> int:
        return len(self.queued_lines)

    def oldest_queued_age(self, now: Optional[float] = None) -> Optional[float]:
        """Seconds the oldest queued line has been waiting, or None when empty."""
        if not self.queued_lines:
            return None
        now = time.monotonic() if now is None else now
        return max(0.0, now - self.queued_lines[0].enqueued_at)

    def is_idle(self) -> bool:
        """Whether nothing is waiting to be revealed."""
        return not self.queued_lines

    def clear(self) -> None:
        """Reset the collector and the queue."""
        self.collector.clear()
        self.queued_lines.clear()
