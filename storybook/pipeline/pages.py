"""
Per-page enrichment: paragraph -> illustration brief -> image prompt -> image -> public URL.
"""

from __future__ import annotations

import logging
import random
import threading
import time

from storybook.ai_generation import build_image_prompt, build_page_prompts
from storybook.story_generation import TextSynthesizer, build_illustration_brief_prompt

from .illustrator import Illustrator, raise_if_cancelled
from .models import Page, Story

logger = logging.getLogger(__name__)


class PageEnricher:
    """
    Turns one bare paragraph slot of a :class:`Story` into a published page.

    Each call paces itself with a random wait before touching the network;
    there is no shared limiter between pages.
    """

    def __init__(
        self,
        *,
        text_synthesizer: TextSynthesizer,
        illustrator: Illustrator,
        pacing_range: tuple[float, float] = (2.0, 11.0),
        rng: random.Random | None = None,
    ) -> None:
        self._text_synthesizer = text_synthesizer
        self._illustrator = illustrator
        self._pacing_range = pacing_range
        self._rng = rng or random.Random()

    def enrich(
        self,
        story: Story,
        index: int,
        *,
        cancel_event: threading.Event | None = None,
    ) -> Page:
        page = story.pages[index]
        self._pace(cancel_event)

        raise_if_cancelled(cancel_event)
        brief = self._text_synthesizer.complete(
            build_illustration_brief_prompt(story.synopsis, page.paragraph_text),
            user_message="I'm actually having a hard time picturing this. Let's try again later",
        )
        page.record_brief(brief)

        page.record_image_prompt(build_image_prompt(brief, story.synopsis))

        local_path = self._illustrator.render_to_file(
            build_page_prompts(page.image_prompt),
            story_id=story.id,
            slot=index,
            cancel_event=cancel_event,
        )
        page.record_image(local_path)

        page.record_publication(self._illustrator.publish(local_path, cancel_event=cancel_event))
        logger.info("Page %d (%s) published at %s.", index, page.id, page.public_image_url)
        return page

    def _pace(self, cancel_event: threading.Event | None) -> None:
        low, high = self._pacing_range
        delay = self._rng.uniform(low, high)
        if delay <= 0:
            return
        logger.debug("Pacing for %.1fs before calling upstream services.", delay)
        if cancel_event is not None:
            cancel_event.wait(delay)
        else:
            time.sleep(delay)
