"""Markdown + LaTeX rendering for question, answer and explanation text.

The server renders markdown to HTML fragments and the presentation page
typesets any math with MathJax at display time, so show files stay plain
text and no math engine output is stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from markdown_it import MarkdownIt

MATHJAX_SCRIPT = (
    "https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-mml-chtml.js"
)


@dataclass(slots=True)
class MarkdownMathRenderer:
    """Converts markdown-with-math into HTML fragments."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html})
            .enable("table")
            .enable("strikethrough")
        )

    def render_fragment(self, markdown_text: str | None) -> str:
        """Render a markdown string into an HTML fragment ('' for no text)."""

        sanitized = (markdown_text or "").strip()
        if not sanitized:
            return ""
        return self._markdown.render(sanitized)

    def render_inline(self, markdown_text: str | None) -> str:
        """Render without the wrapping paragraph, for short labels such as answers."""

        sanitized = (markdown_text or "").strip()
        if not sanitized:
            return ""
        return self._markdown.renderInline(sanitized)


# Shared instance; MarkdownIt is safe to reuse for read-only renders.
renderer = MarkdownMathRenderer()
