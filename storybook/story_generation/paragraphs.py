"""
Split a generated narrative into the paragraphs that become story pages.
"""

from __future__ import annotations


def extract_paragraphs(narrative_text: str) -> list[str]:
    """
    Return every non-blank line of ``narrative_text``, trimmed, in order.
    """
    paragraphs: list[str] = []
    for line in narrative_text.splitlines():
        trimmed = line.strip()
        if trimmed:
            paragraphs.append(trimmed)
    return paragraphs
