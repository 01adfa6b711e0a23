# streamgrid/plugins/streaming/collector.py
"""Newline-gated accumulation of streamed markdown deltas.

Deltas arrive at arbitrary boundaries (mid-word, mid-line). The renderer
only ever sees complete lines during a stream; the partial last line stays
here until its newline arrives or the stream finalizes.
"""


class MarkdownStreamCollector:
    """Buffers raw deltas and hands out complete lines."""

    def __init__(self):
        self._buffer = ""

    def push_delta(self, delta: str) -> None:
        """Append a streamed delta."""
        self._buffer += delta

    def commit_complete_source(self) -> str:
        """Return everything up to and including the last newline.

        The partial line after it stays buffered. Returns "" when no
        complete line is available.
        """
        last_newline = self._buffer.rfind("\n")
        if last_newline == -1:
            return ""
        committed = self._buffer[:last_newline + 1]
        self._buffer = self._buffer[last_newline + 1:]
        return committed

    def finalize_and_drain_source(self) -> str:
        """Return whatever is still buffered (a partial last line) and reset."""
        remainder = self._buffer
        self.clear()
        return remainder

    def clear(self) -> None:
        """Drop all buffered text."""
        self._buffer = ""
