"""Pytest configuration for streamgrid tests.

Run tests with: pytest --import-mode=importlib
"""

import pytest

from streamgrid import config as render_config
from streamgrid.plugins.markdown_renderer import renderer as markdown_renderer


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Disable trace files and reset process-wide defaults around each test."""
    monkeypatch.setenv("STREAMGRID_TRACE_LOG", "")
    monkeypatch.delenv("STREAMGRID_CONFIG", raising=False)
    monkeypatch.delenv("STREAMGRID_RESIZE_DEBOUNCE", raising=False)
    monkeypatch.delenv("STREAMGRID_AMBIGUOUS_WIDTH", raising=False)
    monkeypatch.setattr(render_config, "_default_config", render_config.RenderConfig())
    monkeypatch.setattr(markdown_renderer, "_default_renderer", None)
    yield
