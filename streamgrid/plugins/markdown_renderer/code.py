# streamgrid/plugins/markdown_renderer/code.py
"""Syntax highlighting for fenced code block lines.

Lines are highlighted one at a time so that a code block still streaming in
renders the same leading lines as the finished block.
"""

from typing import Dict, Optional

from rich.syntax import Syntax
from rich.text import Text

# Common language aliases mapping
LANGUAGE_ALIASES = {
    'js': 'javascript',
    'ts': 'typescript',
    'py': 'python',
    'rb': 'ruby',
    'yml': 'yaml',
    'sh': 'bash',
    'shell': 'bash',
    'zsh': 'bash',
    'dockerfile': 'docker',
    'md': 'markdown',
    'cs': 'csharp',
    'c++': 'cpp',
    'objective-c': 'objectivec',
}


class CodeHighlighter:
    """Highlights single code lines with a rich Syntax per language.

    Unknown languages render unstyled (rich returns no lexer for them).
    """

    def __init__(self, theme: str = "monokai"):
        self._theme = theme
        self._syntax_by_language: Dict[str, Syntax] = {}

    def _syntax_for(self, language: str) -> Syntax:
        lang = LANGUAGE_ALIASES.get(language.lower(), language.lower()) or "text"
        syntax = self._syntax_by_language.get(lang)
        if syntax is None:
            syntax = Syntax(
                "",
                lang,
                theme=self._theme,
                word_wrap=False,
                background_color="default",
            )
            self._syntax_by_language[lang] = syntax
        return syntax

    def highlight_line(self, line: str, language: Optional[str] = None) -> Text:
        """Highlight one code line (no trailing newline in the result)."""
        highlighted = self._syntax_for(language or "").highlight(line)
        if highlighted.plain.endswith("\n"):
            highlighted.right_crop(1)
        return highlighted
