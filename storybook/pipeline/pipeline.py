"""
Orchestrates the full storybook pipeline from synopsis to deck script.
"""

from __future__ import annotations

import logging
import random
import threading
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping

from storybook.ai_generation import (
    ImageSynthesizer,
    ReplicateImageGenerator,
    StabilityImageGenerator,
)
from storybook.common import (
    LiteLLMTextSynthesizer,
    PipelineCancelled,
    StorybookSettings,
)
from storybook.publishing import ArtifactPublisher, S3ArtifactPublisher
from storybook.slides import DeckScript, assemble_deck
from storybook.story_generation import NarrativeWriter, Synopsis, TextSynthesizer

from .cover import CoverBuilder
from .illustrator import Illustrator
from .models import Story
from .pages import PageEnricher

ProgressCallback = Callable[[str, dict[str, Any]], None]

EXCLAMATIONS = (
    "Oh yeah, this is looking good.",
    "I like this a lot.",
    "Wait, let me retry that one...",
    "Eh! Not too shabby!",
    "That's way better than I had imagined it.",
    "A little tweak here...",
    "A little rewrite there...",
    "Where did I put my pen?",
    "I'm going to ask my mom what she thinks of this real quick.",
    "It seems like I'm doing all the work here.",
    "Well, that's alright I guess.",
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorybookResult:
    """A completed story and the deck script assembled from it."""

    story: Story
    deck: DeckScript


class StorybookOrchestrator:
    """
    High-level coordinator that chains narrative, illustration, and deck assembly.

    Cover and page tasks run on worker threads. The first task failure
    cancels the rest of the run: queued tasks never start, running tasks stop
    at their next pacing wait or network call, and the failure is re-raised
    once everything has settled. A story is only assembled when every task
    succeeded.
    """

    def __init__(
        self,
        *,
        text_synthesizer: TextSynthesizer,
        image_generator: ImageSynthesizer,
        publisher: ArtifactPublisher,
        closing_image_url: str,
        images_root: Path,
        max_workers: int | None = None,
        pacing_range: tuple[float, float] = (2.0, 11.0),
        rng: random.Random | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._closing_image_url = closing_image_url
        self._max_workers = max_workers
        self._narrative_writer = NarrativeWriter(text_synthesizer=text_synthesizer)
        illustrator = Illustrator(
            image_generator=image_generator,
            publisher=publisher,
            images_root=images_root,
        )
        self._page_enricher = PageEnricher(
            text_synthesizer=text_synthesizer,
            illustrator=illustrator,
            pacing_range=pacing_range,
            rng=self._rng,
        )
        self._cover_builder = CoverBuilder(
            text_synthesizer=text_synthesizer,
            illustrator=illustrator,
        )

    @classmethod
    def from_settings(cls, settings: StorybookSettings) -> "StorybookOrchestrator":
        """
        Wire the production LiteLLM, image, and S3 clients from ``settings``.
        """
        text_synthesizer = LiteLLMTextSynthesizer(
            model=settings.text_model,
            api_key=settings.openai_api_key,
        )
        image_generator: ImageSynthesizer
        if settings.image_backend == "replicate":
            image_generator = ReplicateImageGenerator(
                api_token=settings.replicate_api_token,
                model_identifier=settings.replicate_model or "",
            )
        else:
            image_generator = StabilityImageGenerator(
                api_key=settings.stability_api_key or "",
                engine=settings.stability_engine,
            )
        publisher = S3ArtifactPublisher(
            bucket_name=settings.s3_bucket_name,
            region=settings.aws_region,
            key_prefix=settings.s3_key_prefix,
        )
        return cls(
            text_synthesizer=text_synthesizer,
            image_generator=image_generator,
            publisher=publisher,
            closing_image_url=settings.final_slide_image,
            images_root=settings.images_root,
            max_workers=settings.max_workers,
            pacing_range=settings.pacing_range,
        )

    def run(
        self,
        synopsis: Synopsis | Mapping[str, Any],
        *,
        progress_callback: ProgressCallback | None = None,
    ) -> StorybookResult:
        """
        Complete pipeline from synopsis to an assembled deck script.
        """
        if not isinstance(synopsis, Synopsis):
            synopsis = Synopsis.from_mapping(synopsis)

        story = self.start_story(synopsis, progress_callback=progress_callback)
        self.illustrate(story, progress_callback=progress_callback)

        self._notify(progress_callback, "deck:assembling", title=story.title)
        deck = assemble_deck(story, closing_image_url=self._closing_image_url)
        self._notify(
            progress_callback,
            "pipeline:complete",
            title=story.title,
            total_pages=len(story.pages),
            total_operations=len(deck.operations),
        )
        return StorybookResult(story=story, deck=deck)

    def start_story(
        self,
        synopsis: Synopsis,
        *,
        progress_callback: ProgressCallback | None = None,
    ) -> Story:
        """
        Write the narrative and allocate one page slot per paragraph.
        """
        story = Story(synopsis=synopsis, cover_image_url=self._closing_image_url)
        self._notify(progress_callback, "story:generating", story_id=str(story.id))
        story.record_narrative(self._narrative_writer.write_story(synopsis))
        self._notify(
            progress_callback,
            "story:generated",
            word_count=len(story.narrative_text.split()),
            total_pages=len(story.pages),
        )
        return story

    def illustrate(
        self,
        story: Story,
        *,
        progress_callback: ProgressCallback | None = None,
    ) -> Story:
        """
        Run the cover tasks and every page task concurrently, then join them.
        """
        cancel_event = threading.Event()
        page_workers = self._max_workers or max(len(story.pages), 1)
        total_pages = len(story.pages)
        self._notify(progress_callback, "pages:enriching", total_pages=total_pages)

        with ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="storybook-cover"
        ) as cover_pool, ThreadPoolExecutor(
            max_workers=page_workers, thread_name_prefix="storybook-page"
        ) as page_pool:
            title_future = cover_pool.submit(
                self._cover_builder.generate_title, story, cancel_event=cancel_event
            )
            cover_future = cover_pool.submit(
                self._cover_builder.generate_cover_image, story, cancel_event=cancel_event
            )
            page_futures = [
                page_pool.submit(
                    self._enrich_page, story, index, cancel_event, progress_callback
                )
                for index in range(total_pages)
            ]
            self._join([title_future, cover_future, *page_futures], cancel_event)

        story.record_title(title_future.result())
        story.record_cover(cover_future.result())
        self._notify(progress_callback, "cover:ready", title=story.title)
        return story

    def _enrich_page(
        self,
        story: Story,
        index: int,
        cancel_event: threading.Event,
        progress_callback: ProgressCallback | None,
    ) -> None:
        self._page_enricher.enrich(story, index, cancel_event=cancel_event)
        self._notify(
            progress_callback,
            "page:done",
            page_index=index,
            total_pages=len(story.pages),
            message=self._rng.choice(EXCLAMATIONS),
        )

    @staticmethod
    def _join(futures: list[Future], cancel_event: threading.Event) -> None:
        first_error: BaseException | None = None
        for future in as_completed(futures):
            try:
                future.result()
            except (CancelledError, PipelineCancelled):
                continue
            except Exception as exc:
                if first_error is None:
                    first_error = exc
                    logger.debug("Task failed; cancelling sibling tasks.", exc_info=True)
                    cancel_event.set()
                    for pending in futures:
                        pending.cancel()

        if first_error is not None:
            raise first_error

    @staticmethod
    def _notify(
        callback: ProgressCallback | None,
        stage: str,
        **payload: Any,
    ) -> None:
        if callback is not None:
            callback(stage, payload)
