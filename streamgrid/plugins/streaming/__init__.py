"""Streaming holdback controller: stable queue plus mutable tail, and the plan stream."""

from .collector import MarkdownStreamCollector
from .controller import StreamCore
from .holdback import (
    HoldbackScan,
    compute_holdback,
    hold_start_line,
    scan_lines,
    table_holdback_state,
)
from .plan import PLAN_TITLE, PlanChunk, PlanStream
from .protocol import QueuedLine, StreamClosedError, StreamState
from streamgrid.plugins.table_detect import TableHoldbackState

__all__ = [
    "HoldbackScan",
    "MarkdownStreamCollector",
    "PLAN_TITLE",
    "PlanChunk",
    "PlanStream",
    "QueuedLine",
    "StreamClosedError",
    "StreamCore",
    "StreamState",
    "TableHoldbackState",
    "compute_holdback",
    "hold_start_line",
    "scan_lines",
    "table_holdback_state",
]
