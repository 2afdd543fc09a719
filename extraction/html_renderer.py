"""Render stage text as the small HTML subset the reader displays."""
import html
from typing import List

from extraction.classifiers import is_heading, is_list_item, strip_list_marker


def escape_html(text: str) -> str:
    """Escape &, <, > and " for embedding in element content. Apostrophes stay literal."""
    return html.escape(text, quote=False).replace('"', '&quot;')


def text_to_html(text: str) -> str:
    """Convert raw extracted text to clean HTML for the reader.

    Every non-empty line becomes exactly one block: an ``<h2>`` heading, an
    ``<li>`` inside a ``<ul>``, or a ``<p>`` paragraph.

    Args:
        text: Stage text

    Returns:
        HTML string without any wrapping element
    """
    lines = [line.strip() for line in text.split('\n')]
    parts: List[str] = []
    in_list = False

    for line in lines:
        if not line:
            continue

        if is_heading(line):
            if in_list:
                parts.append('</ul>')
                in_list = False
            parts.append(f'<h2>{escape_html(line)}</h2>')
        elif is_list_item(line):
            if not in_list:
                parts.append('<ul>')
                in_list = True
            parts.append(f'<li>{escape_html(strip_list_marker(line))}</li>')
        else:
            if in_list:
                parts.append('</ul>')
                in_list = False
            parts.append(f'<p>{escape_html(line)}</p>')

    if in_list:
        parts.append('</ul>')

    return ''.join(parts)
