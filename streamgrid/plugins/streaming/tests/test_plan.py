# streamgrid/plugins/streaming/tests/test_plan.py
"""Tests for the proposed-plan stream."""

import pytest

from streamgrid.plugins.streaming import PLAN_TITLE, PlanStream
from streamgrid.plugins.streaming.plan import PLAN_INDENT, PLAN_STYLE


def _plain(lines):
    return [line.plain.rstrip() for line in lines]


class TestPlanHeader:
    """Tests for the one-time header and top padding."""

    def test_first_chunk_carries_header(self):
        plan = PlanStream(width=40)
        plan.push("Inspect the logs.\n")
        chunk, idle = plan.on_commit_tick()

        assert idle
        assert not chunk.is_continuation
        assert _plain(chunk.lines) == [f"• {PLAN_TITLE}", "", "", "  Inspect the logs."]

    def test_later_chunks_are_continuations(self):
        plan = PlanStream(width=40)
        plan.push("Inspect the logs.\n")
        plan.on_commit_tick()
        plan.push("\nFix the bug.\n")

        first, _ = plan.on_commit_tick()
        second, _ = plan.on_commit_tick()
        assert first.is_continuation and second.is_continuation
        assert _plain(first.lines) == [""]
        assert _plain(second.lines) == ["  Fix the bug."]

    def test_empty_tick_emits_nothing(self):
        plan = PlanStream(width=40)
        chunk, idle = plan.on_commit_tick()
        assert chunk is None
        assert idle

    def test_held_table_emits_nothing(self):
        plan = PlanStream(width=40)
        plan.push("| Step | Owner |\n|---|---|\n| 1 | ops |\n")
        chunk, _ = plan.on_commit_tick_batch(5)
        assert chunk is None
        assert not plan.header_emitted


class TestPlanFinalize:
    """Tests for closing the plan block."""

    def test_finalize_adds_bottom_padding(self):
        plan = PlanStream(width=40)
        plan.push("Inspect the logs.\n")
        plan.on_commit_tick()

        chunk, source = plan.finalize()
        assert chunk.is_continuation
        assert _plain(chunk.lines) == [""]
        assert source == "Inspect the logs.\n"

    def test_finalize_without_ticks_emits_whole_block(self):
        plan = PlanStream(width=40)
        plan.push("Roll back the deploy")

        chunk, source = plan.finalize()
        assert _plain(chunk.lines) == [
            f"• {PLAN_TITLE}", "", "", "  Roll back the deploy", "",
        ]
        assert source == "Roll back the deploy"

    def test_body_lines_are_indented_and_styled(self):
        plan = PlanStream(width=40)
        plan.push("Check quotas.\n")
        chunk, _ = plan.finalize()

        body = chunk.lines[2:]
        assert all(line.plain.startswith(PLAN_INDENT) for line in body)
        assert all(any(span.style == PLAN_STYLE for span in line.spans) for line in body)
        assert not any(span.style == PLAN_STYLE for span in chunk.lines[0].spans)


class TestPlanWidth:
    """Tests for laying the body out inside the indent."""

    def test_body_fits_outer_width(self):
        plan = PlanStream(width=12)
        assert plan.core.width == 10
        plan.push("alpha beta gamma\n")
        chunk, _ = plan.finalize()
        assert all(len(line.plain) <= 12 for line in chunk.lines[2:])
        assert "  alpha beta" in _plain(chunk.lines)

    def test_set_width_reflows_body(self):
        plan = PlanStream(width=40)
        plan.push("alpha beta gamma\n")
        plan.set_width(20)
        assert plan.width == 20
        assert plan.core.width == 18

    def test_invalid_width(self):
        with pytest.raises(ValueError):
            PlanStream(width=0)
