"""End-to-end scenarios: deltas in, scrollback and tail out, resize in between."""

import pytest

from streamgrid.display_width import display_width
from streamgrid.plugins.markdown_renderer import render_agent_markdown
from streamgrid.plugins.reflow import AgentMarkdownCell, Transcript
from streamgrid.plugins.streaming import TableHoldbackState, table_holdback_state


def _plain(lines):
    return [line.plain.rstrip() for line in lines]


def _drain(transcript):
    """Reveal every queued line, one tick at a time."""
    revealed = []
    while True:
        lines = transcript.on_commit_tick()
        if not lines:
            return revealed
        revealed.extend(lines)


class TestTableStreamScenario:
    """A table arriving row by row, then closed by a blank line."""

    def test_holdback_transitions_and_finalized_box(self):
        transcript = Transcript(width=40)
        session = transcript.begin_stream()

        expected_states = [
            TableHoldbackState.NONE,
            TableHoldbackState.PENDING_HEADER,
            TableHoldbackState.CONFIRMED,
        ]
        for delta, state in zip(["| A | B |\n", "|---|---|\n", "| x | y |\n"], expected_states):
            transcript.push_delta(delta)
            assert table_holdback_state(session.core.raw_source).state is state
            assert session.core.enqueued_stable_len == 0
            assert _drain(transcript) == []

        transcript.push_delta("\n")
        assert table_holdback_state(session.core.raw_source).state is TableHoldbackState.NONE
        assert len(_drain(transcript)) == 5

        result = transcript.finalize_stream()
        assert result.appended_lines == []
        assert _plain(result.cell.display_lines(40)) == [
            "┌───┬───┐",
            "│ A │ B │",
            "├───┼───┤",
            "│ x │ y │",
            "└───┴───┘",
        ]

    def test_table_lines_never_stable_before_close(self):
        """No line of a confirmed table is revealed until a blank line arrives."""
        transcript = Transcript(width=40)
        session = transcript.begin_stream()
        transcript.push_delta("Before the table.\n\n| Step | Notes |\n|---|---|\n")

        revealed = []
        for row in range(5):
            transcript.push_delta(f"| {row} | row number {row} |\n")
            revealed.extend(_drain(transcript))
            assert _plain(revealed) == ["Before the table."]
            assert session.core.tail_lines()[-1].plain.startswith("└")

        transcript.push_delta("\nAfter the table.\n")
        revealed.extend(_drain(transcript))
        assert _plain(revealed)[-1] == "After the table."
        assert sum(1 for line in revealed if line.plain.startswith("│")) == 6

    def test_stream_matches_one_shot_render(self):
        source = (
            "## Summary\n"
            "\n"
            "```md\n"
            "| Option | Effect |\n"
            "|---|---|\n"
            "| --fast | Skips the slow consistency checks before writing |\n"
            "```\n"
            "\n"
            "Run `make check` when done.\n"
        )
        transcript = Transcript(width=36)
        transcript.begin_stream()
        revealed = []
        for start in range(0, len(source), 5):
            transcript.push_delta(source[start:start + 5])
            revealed.extend(_drain(transcript))
        result = transcript.finalize_stream()

        one_shot = render_agent_markdown(source, 36)
        assert _plain(revealed + result.appended_lines) == _plain(one_shot)
        assert _plain(one_shot)[2].startswith("┌")


class TestFenceScenarios:
    """Markdown fences around tables versus code fences."""

    def test_md_fence_renders_table(self):
        lines = render_agent_markdown("```md\n| A | B |\n|---|---|\n| 1 | 2 |\n```", 40)
        assert _plain(lines)[0] == "┌───┬───┐"
        assert len(lines) == 5

    def test_js_fence_stays_code(self):
        lines = render_agent_markdown("```js\n| A | B |\n```", 40)
        assert _plain(lines) == ["| A | B |"]


class TestResizeScenarios:
    """Width changes before, during and after a stream."""

    @pytest.mark.parametrize("width", [12, 25, 40, 80])
    def test_finalized_cell_rerenders_identically(self, width):
        cell = AgentMarkdownCell(
            "| Name | Description |\n|---|---|\n"
            "| grid | Lays out columns so prose wraps before identifiers |\n"
        )
        first = cell.display_lines(width)
        assert first == cell.display_lines(width)
        assert all(display_width(line.plain) <= width for line in first)

    def test_resize_mid_stream_keeps_emitted_lines(self):
        transcript = Transcript(width=60)
        session = transcript.begin_stream()
        transcript.push_delta("The first paragraph is long enough to wrap when narrow.\n\nSecond.\n")
        transcript.on_commit_tick()
        assert session.core.emitted_stable_len == 1

        transcript.request_resize(20, now=0.0)
        assert transcript.poll_resize(now=1.0)
        core = session.core
        assert _plain(core.stable_lines()) == [
            "The first paragraph",
            "is long enough to",
            "wrap when narrow.",
        ]
        assert _plain(_drain(transcript)) == ["", "Second."]

        result = transcript.finalize_stream()
        assert result.needs_redraw
        assert _plain(transcript.display_lines()) == _plain(
            render_agent_markdown(result.cell.markdown_source, 20)
        )
