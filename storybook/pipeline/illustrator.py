"""
Render an illustration, keep it on disk, and publish it.
"""

from __future__ import annotations

import logging
import threading
import uuid
from pathlib import Path
from typing import Sequence

from storybook.ai_generation import (
    DEFAULT_RENDER_SETTINGS,
    ImageSynthesizer,
    RenderSettings,
    WeightedPrompt,
)
from storybook.common import PipelineCancelled, ResponseShapeViolation
from storybook.publishing import ArtifactPublisher

logger = logging.getLogger(__name__)


def raise_if_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise PipelineCancelled("Run cancelled after a sibling task failed.")


class Illustrator:
    """
    Shared render/persist/publish steps for page and cover illustrations.

    Files land in ``<images_root>/<story_id>/<slot>.png`` so concurrent
    workers never write the same path.
    """

    def __init__(
        self,
        *,
        image_generator: ImageSynthesizer,
        publisher: ArtifactPublisher,
        images_root: Path,
        render_settings: RenderSettings = DEFAULT_RENDER_SETTINGS,
    ) -> None:
        self._image_generator = image_generator
        self._publisher = publisher
        self._images_root = Path(images_root)
        self._render_settings = render_settings

    def image_path(self, story_id: uuid.UUID, slot: str | int) -> Path:
        return self._images_root / str(story_id) / f"{slot}.png"

    def render_to_file(
        self,
        prompts: Sequence[WeightedPrompt],
        *,
        story_id: uuid.UUID,
        slot: str | int,
        cancel_event: threading.Event | None = None,
    ) -> Path:
        """
        Render exactly one image for ``prompts`` and write it to the slot's path.
        """
        raise_if_cancelled(cancel_event)
        artifacts = self._image_generator.render(prompts, self._render_settings)
        if len(artifacts) != 1:
            raise ResponseShapeViolation(
                f"Expected exactly one rendered image for slot {slot}, got {len(artifacts)}.",
                user_message="This art didn't turn out the way I wanted. Maybe we should try again later.",
            )
        path = artifacts[0].save(self.image_path(story_id, slot))
        logger.debug("Saved illustration for slot %s to %s.", slot, path)
        return path

    def publish(self, local_path: Path, *, cancel_event: threading.Event | None = None) -> str:
        raise_if_cancelled(cancel_event)
        return self._publisher.publish(local_path)
