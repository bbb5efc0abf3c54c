"""
Cover pipeline: the deck title and the cover illustration.
"""

from __future__ import annotations

import logging
import threading

from storybook.ai_generation import build_cover_prompts
from storybook.story_generation import (
    TextSynthesizer,
    build_cover_concept_prompt,
    build_title_prompt,
    extract_title,
)

from .illustrator import Illustrator, raise_if_cancelled
from .models import Story

COVER_SLOT = "cover"

logger = logging.getLogger(__name__)


class CoverBuilder:
    """
    Produces the title and the cover image URL for a story.

    The two methods are independent and meant to run concurrently; neither
    writes to the story, the caller records their results after joining.
    """

    def __init__(self, *, text_synthesizer: TextSynthesizer, illustrator: Illustrator) -> None:
        self._text_synthesizer = text_synthesizer
        self._illustrator = illustrator

    def generate_title(
        self,
        story: Story,
        *,
        cancel_event: threading.Event | None = None,
    ) -> str:
        raise_if_cancelled(cancel_event)
        response = self._text_synthesizer.complete(
            build_title_prompt(story.synopsis, story.narrative_text),
            user_message=(
                "Screw it. I can't think of a title. No point in writing a story without a title"
            ),
        )
        title = extract_title(response)
        logger.info("Story %s titled %r.", story.id, title)
        return title

    def generate_cover_image(
        self,
        story: Story,
        *,
        cancel_event: threading.Event | None = None,
    ) -> str:
        raise_if_cancelled(cancel_event)
        concept = self._text_synthesizer.complete(
            build_cover_concept_prompt(story.synopsis),
            user_message="I can't picture this anymore. Forget about it.",
        )
        local_path = self._illustrator.render_to_file(
            build_cover_prompts(concept),
            story_id=story.id,
            slot=COVER_SLOT,
            cancel_event=cancel_event,
        )
        url = self._illustrator.publish(local_path, cancel_event=cancel_event)
        logger.info("Cover for story %s published at %s.", story.id, url)
        return url
