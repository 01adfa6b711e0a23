"""Tests for display width measurement, padding and wrapping."""

import pytest
from rich.style import Style
from rich.text import Text

from streamgrid.display_width import (
    char_width,
    display_width,
    fold_text,
    pad_text,
    pad_to_width,
    wrap_text,
)


class TestDisplayWidth:
    """Tests for terminal column measurement."""

    def test_ascii(self):
        """ASCII characters take one column each."""
        assert display_width("hello") == 5

    def test_wide_characters(self):
        """CJK characters take two columns."""
        assert display_width("日本") == 4
        assert char_width("日") == 2

    def test_zero_width(self):
        """Combining marks add no width."""
        assert display_width("é") == 1

    def test_box_drawing_default_narrow(self):
        """Box-drawing characters are ambiguous and default to one column."""
        assert display_width("┌─┐") == 3

    def test_ambiguous_width_from_env(self, monkeypatch):
        """STREAMGRID_AMBIGUOUS_WIDTH=2 widens ambiguous characters."""
        monkeypatch.setenv("STREAMGRID_AMBIGUOUS_WIDTH", "2")
        assert display_width("┌─┐") == 6


class TestPadding:
    """Tests for padding strings and styled lines."""

    def test_pad_to_width_alignments(self):
        assert pad_to_width("ab", 5) == "ab   "
        assert pad_to_width("ab", 5, "right") == "   ab"
        assert pad_to_width("ab", 5, "center") == " ab  "

    def test_pad_accounts_for_wide_characters(self):
        assert pad_to_width("日", 4) == "日  "

    def test_pad_text_keeps_input(self):
        """pad_text returns a copy."""
        text = Text("ab")
        padded = pad_text(text, 4, "right")
        assert padded.plain == "  ab"
        assert text.plain == "ab"

    def test_no_truncation(self):
        assert pad_to_width("abcdef", 3) == "abcdef"


class TestWrapping:
    """Tests for word wrap and hard fold."""

    def test_fits_on_one_line(self):
        assert [line.plain for line in wrap_text(Text("a b c"), 10)] == ["a b c"]

    def test_wraps_at_word_boundaries(self):
        lines = wrap_text(Text("the quick brown fox"), 10)
        assert [line.plain for line in lines] == ["the quick", "brown fox"]

    def test_long_word_split(self):
        lines = wrap_text(Text("abcdefgh"), 3)
        assert [line.plain for line in lines] == ["abc", "def", "gh"]

    def test_wide_characters_never_split(self):
        lines = wrap_text(Text("日本語"), 3)
        assert [line.plain for line in lines] == ["日", "本", "語"]

    def test_styles_survive_wrap(self):
        text = Text("plain ")
        text.append("bold", style=Style(bold=True))
        lines = wrap_text(text, 6)
        assert [line.plain for line in lines] == ["plain", "bold"]
        assert lines[1].spans[0].style == Style(bold=True)

    def test_empty_line(self):
        assert [line.plain for line in wrap_text(Text(""), 5)] == [""]

    def test_invalid_width(self):
        with pytest.raises(ValueError):
            wrap_text(Text("x"), 0)
        with pytest.raises(ValueError):
            fold_text(Text("x"), 0)

    def test_fold_keeps_whitespace(self):
        lines = fold_text(Text("ab  cd"), 3)
        assert [line.plain for line in lines] == ["ab ", " cd"]
