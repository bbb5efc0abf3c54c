"""
Service layer for producing the narrative text of a story.
"""

from __future__ import annotations

import logging
from typing import Protocol

from .prompting import build_story_prompt
from .synopsis import Synopsis

logger = logging.getLogger(__name__)


class TextSynthesizer(Protocol):
    def complete(self, prompt: str, *, user_message: str | None = None) -> str:
        ...


class NarrativeWriter:
    """
    High-level helper that turns a synopsis into the full story text.
    """

    def __init__(self, *, text_synthesizer: TextSynthesizer) -> None:
        self._text_synthesizer = text_synthesizer

    def write_story(self, synopsis: Synopsis) -> str:
        """
        Invoke the text model to produce the narrative, one paragraph per line.
        """
        prompt = build_story_prompt(synopsis)
        narrative = self._text_synthesizer.complete(
            prompt,
            user_message="Hrm. I actually can't think of a story like that. Try again later!",
        )
        logger.info("Narrative drafted for %s (%d words).", synopsis.name, len(narrative.split()))
        return narrative
