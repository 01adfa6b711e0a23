"""Resize reflow: transcript cells, emitted-count remapping, debounced resize."""

from .cells import AgentMarkdownCell, StreamingChunkCell, TranscriptCell
from .remap import (
    has_prefix_unstable_constructs,
    line_boundaries,
    remap_emitted_count,
    source_offset_for_rendered_count,
)
from .transcript import (
    CloseReason,
    ConsolidationResult,
    ResizeDebouncer,
    SessionStatus,
    StreamSession,
    Transcript,
)

__all__ = [
    "AgentMarkdownCell",
    "CloseReason",
    "ConsolidationResult",
    "ResizeDebouncer",
    "SessionStatus",
    "StreamSession",
    "StreamingChunkCell",
    "Transcript",
    "TranscriptCell",
    "has_prefix_unstable_constructs",
    "line_boundaries",
    "remap_emitted_count",
    "source_offset_for_rendered_count",
]
