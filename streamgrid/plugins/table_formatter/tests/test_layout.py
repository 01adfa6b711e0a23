# streamgrid/plugins/table_formatter/tests/test_layout.py
"""Tests for column classification and width allocation."""

import pytest

from streamgrid.config import RenderConfig
from streamgrid.plugins.table_formatter import (
    ColumnKind,
    ColumnSpec,
    allocate_widths,
    build_column_spec,
    classify_column,
    table_overhead,
)


class TestClassification:
    """Tests for Narrative/Structured classification."""

    def test_short_values_are_structured(self):
        assert classify_column(["42", "ok", "n/a"]) is ColumnKind.STRUCTURED

    def test_four_words_average_is_narrative(self):
        assert classify_column(["one two three four"]) is ColumnKind.NARRATIVE

    def test_long_single_token_average_is_narrative(self):
        assert classify_column(["x" * 28]) is ColumnKind.NARRATIVE

    def test_empty_cells_ignored_in_average(self):
        cells = ["explains what the option does", "", ""]
        assert classify_column(cells) is ColumnKind.NARRATIVE

    def test_header_used_without_body(self):
        assert classify_column([], header="Description of the field") is ColumnKind.NARRATIVE
        assert classify_column([], header="Id") is ColumnKind.STRUCTURED

    def test_single_short_cell_does_not_flip_column(self):
        cells = [
            "the first sentence is long enough",
            "the second sentence is long enough",
            "the third sentence is long enough",
        ]
        assert classify_column(cells) is ColumnKind.NARRATIVE
        assert classify_column(cells[:2] + ["short"]) is ColumnKind.NARRATIVE

    def test_thresholds_from_config(self):
        config = RenderConfig(narrative_min_words=2, narrative_min_chars=100)
        assert classify_column(["two words"], config=config) is ColumnKind.NARRATIVE


class TestColumnSpec:
    """Tests for measured column floors."""

    def test_structured_floor_is_widest_token(self):
        spec = build_column_spec("Key", ["alpha beta", "gamma"])
        assert spec.kind is ColumnKind.STRUCTURED
        assert spec.content_width == 10
        assert spec.token_floor == 5
        assert spec.floor == 5

    def test_token_floor_capped(self):
        spec = build_column_spec("Url", ["https://example.com/" + "a" * 60])
        assert spec.token_floor == RenderConfig().max_token_floor

    def test_narrative_floor(self):
        spec = build_column_spec("Notes", ["a long note that wraps across several lines of text"])
        assert spec.kind is ColumnKind.NARRATIVE
        assert spec.floor == max(spec.token_floor, 12)


class TestAllocateWidths:
    """Tests for shrinking columns into the available width."""

    @pytest.fixture
    def specs(self):
        return [
            ColumnSpec(kind=ColumnKind.NARRATIVE, content_width=40, token_floor=8, floor=12),
            ColumnSpec(kind=ColumnKind.STRUCTURED, content_width=20, token_floor=10, floor=10),
        ]

    def test_overhead(self):
        assert table_overhead(1) == 4
        assert table_overhead(3) == 10

    def test_natural_widths_when_they_fit(self, specs):
        assert allocate_widths(specs, 7 + 60) == [40, 20]
        assert allocate_widths(specs, 200) == [40, 20]

    def test_narrative_shrinks_first(self, specs):
        assert allocate_widths(specs, 7 + 50) == [30, 20]

    def test_structured_untouched_until_narrative_at_floor(self, specs):
        assert allocate_widths(specs, 7 + 12 + 20) == [12, 20]
        assert allocate_widths(specs, 7 + 12 + 15) == [12, 15]

    def test_last_resort_shrinks_everything(self, specs):
        widths = allocate_widths(specs, 7 + 10)
        assert widths == [5, 5]

    def test_allocated_width_recorded(self, specs):
        allocate_widths(specs, 7 + 50)
        assert [spec.allocated_width for spec in specs] == [30, 20]

    def test_proportional_shrink_between_narrative_columns(self):
        specs = [
            ColumnSpec(kind=ColumnKind.NARRATIVE, content_width=42, token_floor=6, floor=12),
            ColumnSpec(kind=ColumnKind.NARRATIVE, content_width=22, token_floor=6, floor=12),
        ]
        # slack 30 and 10, excess 20 -> cuts 15 and 5
        assert allocate_widths(specs, 7 + 44) == [27, 17]

    def test_unfittable_returns_none(self, specs):
        assert allocate_widths(specs, 8) is None
        assert allocate_widths(specs, 9) == [1, 1]

    def test_sum_fits_budget_for_every_width(self, specs):
        for width in range(9, 80):
            widths = allocate_widths(specs, width)
            assert widths is not None
            assert sum(widths) + table_overhead(2) <= width
