# streamgrid/plugins/reflow/tests/test_remap.py
"""Tests for remapping emitted line counts across widths."""

import pytest

from streamgrid.plugins.markdown_renderer import create_renderer
from streamgrid.plugins.reflow import (
    has_prefix_unstable_constructs,
    line_boundaries,
    remap_emitted_count,
    source_offset_for_rendered_count,
)

WRAPPED = "alpha beta gamma\nz\n"


@pytest.fixture
def renderer():
    return create_renderer()


class TestSourceOffset:
    """Tests for finding the prefix behind an emitted count."""

    def test_line_boundaries(self):
        assert line_boundaries("ab\nc\n") == [3, 5]
        assert line_boundaries("no newline") == []

    def test_zero_emitted(self, renderer):
        assert source_offset_for_rendered_count("one\ntwo\n", 40, 0, renderer) == 0

    def test_exact_match(self, renderer):
        assert source_offset_for_rendered_count("one\ntwo\n", 40, 1, renderer) == 4
        assert source_offset_for_rendered_count("one\ntwo\n", 40, 2, renderer) == 8

    def test_wrapped_line_exactly_emitted(self, renderer):
        # "alpha beta gamma" renders as two lines at width 11
        assert source_offset_for_rendered_count(WRAPPED, 11, 2, renderer) == 17
        assert source_offset_for_rendered_count(WRAPPED, 11, 3, renderer) == 19

    def test_wrapped_line_partly_emitted_falls_back(self, renderer):
        """Half of a wrapped line maps to the prefix before it."""
        assert source_offset_for_rendered_count(WRAPPED, 11, 1, renderer) == 0
        source = "intro\n" + WRAPPED
        assert source_offset_for_rendered_count(source, 11, 2, renderer) == 6

    def test_more_than_rendered(self, renderer):
        assert source_offset_for_rendered_count(WRAPPED, 11, 9, renderer) == 19


class TestRemapEmittedCount:
    """Tests for the old-width to new-width translation."""

    def test_narrower(self, renderer):
        assert remap_emitted_count(WRAPPED, 40, 11, 1, renderer) == 2

    def test_wider(self, renderer):
        assert remap_emitted_count(WRAPPED, 11, 40, 2, renderer) == 1
        assert remap_emitted_count(WRAPPED, 11, 40, 3, renderer) == 2

    def test_nothing_emitted(self, renderer):
        assert remap_emitted_count(WRAPPED, 40, 11, 0, renderer) == 0

    def test_drained_blank_line_carries_over(self, renderer):
        source = "alpha\n\nbeta\n"
        assert remap_emitted_count(source, 40, 30, 2, renderer) == 2

    def test_partly_drained_wrap_does_not_carry_over(self, renderer):
        source = "intro\n" + WRAPPED
        assert remap_emitted_count(source, 11, 40, 2, renderer) == 1


class TestPrefixUnstableConstructs:
    """Tests for detecting constructs that alter earlier lines."""

    def test_reference_definition(self):
        assert has_prefix_unstable_constructs("See [docs][1].\n\n[1]: https://example.com\n")

    def test_footnote_definition(self):
        assert has_prefix_unstable_constructs("Claim[^1].\n\n[^1]: Source.\n")

    def test_inline_links_are_stable(self):
        assert not has_prefix_unstable_constructs("See [docs](https://example.com).\n")

    def test_tables_are_stable(self):
        assert not has_prefix_unstable_constructs("| A | B |\n|---|---|\n")
