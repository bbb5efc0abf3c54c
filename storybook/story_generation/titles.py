"""
Validation and extraction of the deck title from a text completion.
"""

from __future__ import annotations

import re

from storybook.common import ResponseShapeViolation

_TITLE_PATTERN = re.compile(r'title: ".*"')


def extract_title(response: str) -> str:
    """
    Pull the title out of a ``TITLE: "<title>"`` response.

    The whole trimmed response must be that single line (the ``TITLE`` label
    may use any letter case). Anything else is rejected rather than guessed at.
    """
    normalized = response.strip().lower()
    if not _TITLE_PATTERN.fullmatch(normalized):
        raise ResponseShapeViolation(
            f"Title response is not in the TITLE: \"...\" format: {response!r}",
        )
    return response.split('"')[1].strip()
