"""Display width utilities for terminal rendering.

Provides display width measurement for strings containing wide characters
(CJK), ambiguous-width characters (box-drawing) and zero-width characters,
plus padding and word wrapping of styled ``rich.text.Text`` lines.
"""

import os
import re
import unicodedata
from typing import List

import wcwidth
from rich.text import Text


AMBIGUOUS_WIDTH_ENV_VAR = "STREAMGRID_AMBIGUOUS_WIDTH"

# A word plus the whitespace that follows it.
_WORD_PATTERN = re.compile(r"\S+\s*")


def _get_ambiguous_width() -> int:
    """Get the width to use for East Asian Ambiguous characters.

    Reads from STREAMGRID_AMBIGUOUS_WIDTH. Default is 1 (standard Western
    terminals). Set to 2 for CJK terminals or terminals with ambiguous
    width = wide.

    Returns:
        1 or 2 depending on configuration.
    """
    value = os.environ.get(AMBIGUOUS_WIDTH_ENV_VAR, "1")
    return 2 if value.strip() == "2" else 1


def char_width(char: str, ambiguous_width: int = 1) -> int:
    """Return the number of terminal columns a single character occupies."""
    wc = wcwidth.wcwidth(char)
    if wc <= 0:
        # Zero-width and non-printable characters
        return 0

    eaw = unicodedata.east_asian_width(char)
    if eaw in ("F", "W"):
        return 2
    if eaw == "A":
        return ambiguous_width
    return 1


def display_width(text: str) -> int:
    """Calculate the display width of a string, accounting for wide characters.

    Uses unicodedata.east_asian_width() to handle:
    - Fullwidth (F) and Wide (W) characters: 2 columns
    - Ambiguous (A) characters: configurable via STREAMGRID_AMBIGUOUS_WIDTH
    - Halfwidth (H), Narrow (Na), Neutral (N): 1 column
    - Zero-width characters (via wcwidth): 0 columns

    Args:
        text: The string to measure.

    Returns:
        The display width in terminal columns.
    """
    ambiguous_width = _get_ambiguous_width()
    return sum(char_width(char, ambiguous_width) for char in text)


def pad_to_width(text: str, target_width: int, align: str = "left") -> str:
    """Pad a string to a target display width, accounting for wide characters.

    Args:
        text: The string to pad.
        target_width: The desired display width.
        align: Alignment - 'left', 'right', or 'center'.

    Returns:
        The padded string.
    """
    padding_needed = max(0, target_width - display_width(text))

    if align == "right":
        return " " * padding_needed + text
    elif align == "center":
        left_pad = padding_needed // 2
        right_pad = padding_needed - left_pad
        return " " * left_pad + text + " " * right_pad
    else:  # left
        return text + " " * padding_needed


def pad_text(text: Text, target_width: int, align: str = "left") -> Text:
    """Pad a styled line to a target display width.

    Returns a new Text; the input is not modified.
    """
    padded = text.copy()
    padding_needed = max(0, target_width - display_width(text.plain))
    if align == "right":
        padded.pad_left(padding_needed)
    elif align == "center":
        left_pad = padding_needed // 2
        padded.pad_left(left_pad)
        padded.pad_right(padding_needed - left_pad)
    else:
        padded.pad_right(padding_needed)
    return padded


def wrap_offsets(plain: str, width: int) -> List[int]:
    """Compute the character offsets at which ``plain`` should be divided.

    Breaks happen at word starts so each piece, once its trailing whitespace
    is stripped, fits in ``width`` columns. Words wider than ``width`` are
    split between characters. Leading indentation stays on the first piece.

    Args:
        plain: Single-line text (no newlines).
        width: Available columns (must be positive).

    Returns:
        Sorted list of division offsets (empty when the text fits).
    """
    ambiguous_width = _get_ambiguous_width()
    offsets: List[int] = []
    indent = len(plain) - len(plain.lstrip())
    col = display_width(plain[:indent])
    has_word = False

    for match in _WORD_PATTERN.finditer(plain, indent):
        start = match.start()
        word = match.group().rstrip()
        trailing = match.group()[len(word):]
        word_width = display_width(word)

        if has_word and col + word_width > width:
            offsets.append(start)
            col = 0

        if col + word_width > width:
            # Word does not fit on a line of its own: split mid-word
            for i, char in enumerate(word):
                cw = char_width(char, ambiguous_width)
                if col > 0 and col + cw > width:
                    offsets.append(start + i)
                    col = 0
                col += cw
        else:
            col += word_width

        has_word = True
        col += display_width(trailing)

    return offsets


def wrap_text(text: Text, width: int) -> List[Text]:
    """Word-wrap a styled line into lines no wider than ``width``.

    Styles survive the wrap because the line is divided rather than rebuilt.
    Always returns at least one line.

    Raises:
        ValueError: If width is not positive.
    """
    if width <= 0:
        raise ValueError(f"wrap width must be positive, got {width}")

    offsets = wrap_offsets(text.plain, width)
    pieces = text.divide(offsets) if offsets else [text.copy()]
    lines = []
    for piece in pieces:
        piece.rstrip()
        lines.append(piece)
    return lines


def fold_text(text: Text, width: int) -> List[Text]:
    """Hard-wrap a styled line every ``width`` columns, keeping whitespace.

    Used for code, where word boundaries carry no meaning.

    Raises:
        ValueError: If width is not positive.
    """
    if width <= 0:
        raise ValueError(f"fold width must be positive, got {width}")

    ambiguous_width = _get_ambiguous_width()
    offsets: List[int] = []
    col = 0
    for i, char in enumerate(text.plain):
        cw = char_width(char, ambiguous_width)
        if col > 0 and col + cw > width:
            offsets.append(i)
            col = 0
        col += cw

    if not offsets:
        return [text.copy()]
    return list(text.divide(offsets))
