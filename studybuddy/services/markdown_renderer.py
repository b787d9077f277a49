"""
Minimal markdown-subset renderer for generated notes.

Handles headers, **bold**, bullet lists and paragraphs line by line.
The "handwritten" variant swaps bold for highlighter marks and bullets
for stars; everything else is shared.
"""

import re
from html import escape

from studybuddy.schemas.common import RenderVariant

HEADER_RE = re.compile(r"^(#{1,6})\s*(.+)")
LIST_RE = re.compile(r"^(\*(?!\*)|-)\s*(.+)")  # "**bold** ..." is not a bullet
BOLD_SPLIT_RE = re.compile(r"(\*\*.*?\*\*)")

MARKER_COLORS = ("marker-yellow", "marker-pink", "marker-green", "marker-blue")


def _format_inline(text: str, handwritten: bool) -> str:
    parts = []
    for part in BOLD_SPLIT_RE.split(text):
        if len(part) >= 4 and part.startswith("**") and part.endswith("**"):
            inner = part[2:-2]
            if handwritten:
                # colour keyed on length so re-renders are stable
                color = MARKER_COLORS[len(inner) % len(MARKER_COLORS)]
                parts.append(f'<span class="highlight {color}">{escape(inner)}</span>')
            else:
                parts.append(f"<strong>{escape(inner)}</strong>")
        else:
            parts.append(escape(part))
    return "".join(parts)


def render_line(line: str, variant: RenderVariant = RenderVariant.standard) -> str:
    """Render one source line to a single HTML element."""
    handwritten = variant == RenderVariant.handwritten
    trimmed = line.strip()
    if not trimmed:
        return '<div class="spacer"></div>'

    header = HEADER_RE.match(trimmed)
    if header:
        level = len(header.group(1))
        text = escape(header.group(2).strip())
        if level in (2, 3):
            return f"<h{level}>{text}</h{level}>"
        return f"<h1>{text}</h1>"

    item = LIST_RE.match(trimmed)
    if item:
        body = _format_inline(item.group(2).strip(), handwritten)
        if handwritten:
            return f'<li><span class="star">★</span>{body}</li>'
        return f"<li>{body}</li>"

    return f"<p>{_format_inline(trimmed, handwritten)}</p>"


def render_markdown(content: str, variant: RenderVariant = RenderVariant.standard) -> str:
    variant = RenderVariant(variant)
    lines = [render_line(line, variant) for line in content.split("\n")]
    return f'<div class="notes notes-{variant.value}">' + "\n".join(lines) + "</div>"
