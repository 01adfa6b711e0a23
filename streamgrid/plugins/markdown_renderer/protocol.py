# streamgrid/plugins/markdown_renderer/protocol.py
"""Protocol definition for markdown line renderers.

The stream controller, the resize remapper and finalized transcript cells
only ever talk to a renderer through this interface:

    lines = renderer.render(source, width)          # List[rich.text.Text]
    hold = renderer.incomplete_tail_start(source)   # Optional[int]

Renderers must be pure: the same source and width always produce the same
lines, and nothing is cached between calls. Rendering a newline-terminated
prefix of a source should yield a prefix of the full rendering (outside an
open table); the resize remapper relies on it.
"""

from typing import List, Optional, Protocol, runtime_checkable

from rich.text import Text


@runtime_checkable
class LineRenderer(Protocol):
    """Protocol for renderers that turn markdown source into styled lines.

    Implementations:
    - Render complete source at a given width via render()
    - Report where the still-changeable tail of a source starts via
      incomplete_tail_start()
    """

    def render(self, source: str, width: int) -> List[Text]:
        """Render markdown source into styled lines.

        Args:
            source: Markdown text (usually newline-terminated).
            width: Available display columns (positive).

        Returns:
            Styled lines, none wider than ``width``.
        """
        ...

    def incomplete_tail_start(self, source: str) -> Optional[int]:
        """Return the index of the first source line whose rendering may
        still change when more text is appended, or None.
        """
        ...
