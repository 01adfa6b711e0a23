"""streamgrid - table-aware markdown rendering for streamed terminal transcripts."""

__version__ = "0.1.0"
