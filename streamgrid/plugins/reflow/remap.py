# streamgrid/plugins/reflow/remap.py
"""Remapping emitted line counts across a width change.

Lines already emitted to scrollback during a stream were laid out at the old
width. After a resize, the controller needs to know how many lines of the
new layout correspond to them, without replaying the stream:

    old_width render:  [ a1 a2 | b1 | c1 c2 c3 | ... ]    emitted = 3
                                 ^ source offset after "b"
    new_width render:  [ a1 | b1 | c1 c2 | ... ]          emitted = 2

This relies on prefix stability: rendering a newline-terminated prefix of
the source yields a prefix of the full rendering. Constructs that break it
(reference link definitions, footnotes) are detected so the caller can
rebuild from scratch instead of trusting the offset.
"""

import re
from typing import List

from streamgrid.plugins.markdown_renderer import LineRenderer
from streamgrid.trace import trace as _trace_write

# [label]: destination  /  [^note]: text
_REFERENCE_DEFINITION = re.compile(r"^ {0,3}\[[^\]\n]+\]:\s*\S", re.MULTILINE)
_FOOTNOTE_DEFINITION = re.compile(r"^ {0,3}\[\^[^\]\n]+\]:", re.MULTILINE)


def _trace(msg: str) -> None:
    """Write trace message to log file for debugging."""
    _trace_write("REFLOW", msg)


def line_boundaries(raw_source: str) -> List[int]:
    """Offsets just past each newline (the only places a prefix may be cut)."""
    return [idx + 1 for idx, char in enumerate(raw_source) if char == "\n"]


def source_offset_for_rendered_count(
    raw_source: str,
    old_width: int,
    emitted_stable_len: int,
    renderer: LineRenderer,
) -> int:
    """Find the source prefix that rendered the emitted lines.

    Returns the length of the smallest newline-terminated prefix whose render
    at ``old_width`` has exactly ``emitted_stable_len`` lines. When no prefix
    matches exactly (a wrapped source line was only partly drained), returns
    the largest prefix rendering fewer lines: wrapped rows may be duplicated
    but nothing un-emitted is dropped.

    Render counts grow with the prefix, so the boundaries are binary searched.
    """
    if emitted_stable_len <= 0:
        return 0

    boundaries = line_boundaries(raw_source)
    lo, hi = 0, len(boundaries)
    while lo < hi:
        mid = (lo + hi) // 2
        count = len(renderer.render(raw_source[:boundaries[mid]], old_width))
        if count < emitted_stable_len:
            lo = mid + 1
        else:
            hi = mid

    if lo == len(boundaries):
        # Even the whole source renders fewer lines
        return boundaries[-1] if boundaries else 0

    offset = boundaries[lo]
    if len(renderer.render(raw_source[:offset], old_width)) == emitted_stable_len:
        return offset
    return boundaries[lo - 1] if lo > 0 else 0


def remap_emitted_count(
    raw_source: str,
    old_width: int,
    new_width: int,
    emitted_stable_len: int,
    renderer: LineRenderer,
) -> int:
    """Translate an emitted line count from ``old_width`` to ``new_width``.

    Rendered prefixes never end on a blank line, so a drain that stopped
    right after a paragraph separator matches a shorter prefix. Emitted
    lines past that prefix which are all blank carry over unchanged.
    """
    offset = source_offset_for_rendered_count(raw_source, old_width, emitted_stable_len, renderer)
    prefix_count = len(renderer.render(raw_source[:offset], old_width)) if offset else 0
    remapped = len(renderer.render(raw_source[:offset], new_width)) if offset else 0

    if emitted_stable_len > prefix_count:
        leftover = renderer.render(raw_source, old_width)[prefix_count:emitted_stable_len]
        if leftover and all(not line.plain.strip() for line in leftover):
            remapped += len(leftover)

    _trace(
        f"remap: emitted {emitted_stable_len}@{old_width} -> offset {offset} -> "
        f"{remapped}@{new_width}"
    )
    return remapped


def has_prefix_unstable_constructs(source: str) -> bool:
    """Whether ``source`` holds constructs that can alter earlier lines.

    Reference link definitions and footnote definitions change how earlier
    references read once they arrive, so a prefix render is not a prefix of
    the full render.
    """
    return bool(_REFERENCE_DEFINITION.search(source) or _FOOTNOTE_DEFINITION.search(source))
