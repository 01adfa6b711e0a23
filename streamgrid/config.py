"""Render configuration for table layout, inline styles and stream pacing.

Configuration can come from a dict, a JSON file or the environment:

    from streamgrid.config import load_render_config

    config = load_render_config()                 # env / default file
    config = load_render_config(".streamgrid/render.json")

Configuration file format (.streamgrid/render.json):
    {
      "render": {
        "narrative_min_words": 4,
        "narrative_min_chars": 28,
        "inline_code_fg": "#87d7d7",
        "resize_debounce_seconds": 0.075
      }
    }

Unknown keys are ignored. A missing or unreadable file yields the defaults.
"""

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from streamgrid.trace import trace as _trace_write

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "STREAMGRID_CONFIG"
DEBOUNCE_ENV_VAR = "STREAMGRID_RESIZE_DEBOUNCE"
DEFAULT_CONFIG_PATH = ".streamgrid/render.json"

# Default inline code colors (teal on slightly blue-tinted dark surface)
DEFAULT_INLINE_CODE_FG = "#87d7d7"
DEFAULT_INLINE_CODE_BG = "#2d2d3d"
DEFAULT_LINK_FG = "#5f87ff"


@dataclass(frozen=True)
class RenderConfig:
    """Tunables shared by the renderer, the holdback controller and the transcript.

    Attributes:
        narrative_min_words: Average words per cell at which a column is Narrative.
        narrative_min_chars: Average characters per cell at which a column is Narrative.
        narrative_min_width: Narrative columns are not shrunk below this width
            (or their content width, if smaller) before Structured columns shrink.
        max_token_floor: Cap on the "widest atomic token" floor, so one long
            URL cannot pin a column wide.
        inline_code_fg: Hex colour for inline code text.
        inline_code_bg: Hex colour for inline code background, or None.
        link_fg: Hex colour for link text.
        code_theme: Pygments theme for fenced code blocks.
        resize_debounce_seconds: Settle window before a resize re-renders.
        commit_lines_per_tick: Queued stable lines revealed per animation tick.
    """
    narrative_min_words: float = 4.0
    narrative_min_chars: float = 28.0
    narrative_min_width: int = 12
    max_token_floor: int = 24
    inline_code_fg: str = DEFAULT_INLINE_CODE_FG
    inline_code_bg: Optional[str] = DEFAULT_INLINE_CODE_BG
    link_fg: str = DEFAULT_LINK_FG
    code_theme: str = "monokai"
    resize_debounce_seconds: float = 0.075
    commit_lines_per_tick: int = 1

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RenderConfig":
        """Build a config from a dict, ignoring unknown keys.

        Args:
            data: Mapping of field names to values.

        Returns:
            RenderConfig with the given overrides applied to the defaults.
        """
        known = {f.name for f in fields(cls)}
        overrides = {key: value for key, value in data.items() if key in known}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.debug("Ignoring unknown render config keys: %s", ", ".join(unknown))
        return cls(**overrides)


def _read_config_file(path: Path) -> Optional[Dict[str, Any]]:
    """Read the "render" section of a JSON config file.

    Returns:
        The section as a dict, or None if the file is missing or invalid.
    """
    if not path.exists():
        return None

    try:
        with open(path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError) as exc:
        logger.warning("Could not read render config %s: %s", path, exc)
        _trace_write("CONFIG", f"could not read {path}, using defaults", include_traceback=True)
        return None

    section = data.get("render", {}) if isinstance(data, dict) else None
    if not isinstance(section, dict):
        logger.warning("Render config %s has no \"render\" object", path)
        return None
    return section


def load_render_config(config_path: Optional[str] = None) -> RenderConfig:
    """Load the render configuration.

    Resolution order: explicit ``config_path``, then STREAMGRID_CONFIG, then
    .streamgrid/render.json in the working directory. STREAMGRID_RESIZE_DEBOUNCE
    overrides the debounce window from any source.

    Args:
        config_path: Optional path to a JSON configuration file.

    Returns:
        The resolved RenderConfig (defaults when nothing is configured).
    """
    path = Path(config_path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)
    section = _read_config_file(path) or {}

    debounce = os.environ.get(DEBOUNCE_ENV_VAR)
    if debounce:
        try:
            section["resize_debounce_seconds"] = float(debounce)
        except ValueError:
            logger.warning("Ignoring invalid %s=%r", DEBOUNCE_ENV_VAR, debounce)

    return RenderConfig.from_dict(section)


_default_config: Optional[RenderConfig] = None


def get_default_config() -> RenderConfig:
    """Return the process-wide default config, loading it on first use."""
    global _default_config
    if _default_config is None:
        _default_config = load_render_config()
    return _default_config
