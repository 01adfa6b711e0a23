"""Tests for trace log path resolution and writing."""

import os
import tempfile

from streamgrid.config import RenderConfig, load_render_config
from streamgrid.trace import (
    DEFAULT_TRACE_FILENAME,
    resolve_trace_path,
    trace,
    trace_write,
)


class TestResolveTracePath:
    """Tests for environment-based trace path resolution."""

    def test_empty_value_disables(self, monkeypatch):
        monkeypatch.setenv("TRACE_A", "")
        assert resolve_trace_path("TRACE_A") is None

    def test_set_variable_is_used(self, monkeypatch):
        monkeypatch.setenv("TRACE_A", "/tmp/a.log")
        assert resolve_trace_path("TRACE_A") == "/tmp/a.log"

    def test_default_variable(self, monkeypatch):
        monkeypatch.setenv("STREAMGRID_TRACE_LOG", "/tmp/streamgrid.log")
        assert resolve_trace_path() == "/tmp/streamgrid.log"

    def test_falls_back_to_temp_dir(self, monkeypatch):
        monkeypatch.delenv("TRACE_A", raising=False)
        expected = os.path.join(tempfile.gettempdir(), DEFAULT_TRACE_FILENAME)
        assert resolve_trace_path("TRACE_A") == expected


class TestTraceWrite:
    """Tests for writing trace lines."""

    def test_writes_component_and_message(self, tmp_path):
        path = tmp_path / "nested" / "trace.log"
        trace_write("StreamCore", "push: 3 lines", str(path))
        content = path.read_text()
        assert "[StreamCore] push: 3 lines" in content

    def test_none_path_is_noop(self, tmp_path):
        trace_write("StreamCore", "ignored", None)
        assert list(tmp_path.iterdir()) == []

    def test_trace_uses_env_path(self, tmp_path, monkeypatch):
        path = tmp_path / "trace.log"
        monkeypatch.setenv("STREAMGRID_TRACE_LOG", str(path))
        trace("HOLDBACK", "state=pending_header")
        assert "[HOLDBACK] state=pending_header" in path.read_text()

    def test_disabled_by_default_in_tests(self, tmp_path):
        trace("HOLDBACK", "nothing written")
        assert list(tmp_path.iterdir()) == []


class TestTraceback:
    """Tests for appending the handled exception to a trace line."""

    def test_traceback_written_inside_except(self, tmp_path):
        path = tmp_path / "trace.log"
        try:
            raise ValueError("bad width")
        except ValueError:
            trace_write("CONFIG", "load failed", str(path), include_traceback=True)

        content = path.read_text()
        assert "[CONFIG] load failed" in content
        assert "[CONFIG] Traceback:" in content
        assert "ValueError: bad width" in content

    def test_no_traceback_outside_except(self, tmp_path):
        path = tmp_path / "trace.log"
        trace_write("CONFIG", "nothing to report", str(path), include_traceback=True)
        assert "Traceback" not in path.read_text()

    def test_invalid_config_traces_the_error(self, tmp_path, monkeypatch):
        trace_path = tmp_path / "trace.log"
        monkeypatch.setenv("STREAMGRID_TRACE_LOG", str(trace_path))
        config_path = tmp_path / "render.json"
        config_path.write_text("{not json")

        assert load_render_config(str(config_path)) == RenderConfig()
        content = trace_path.read_text()
        assert f"[CONFIG] could not read {config_path}" in content
        assert "JSONDecodeError" in content
