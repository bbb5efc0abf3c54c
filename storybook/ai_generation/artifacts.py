"""
Shared request and response types for image synthesis backends.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from storybook.common import LocalIOFailure

from .prompting import WeightedPrompt


@dataclass(frozen=True)
class RenderSettings:
    """Fixed render configuration requested for every illustration."""

    width: int = 1344
    height: int = 768
    steps: int = 40
    seed: int = 0
    cfg_scale: int = 10
    samples: int = 1


DEFAULT_RENDER_SETTINGS = RenderSettings()


@dataclass(frozen=True)
class ImageArtifact:
    """A single rendered raster image."""

    image_bytes: bytes
    finish_reason: str = "SUCCESS"
    seed: int | None = None

    def save(self, path: Path) -> Path:
        """
        Write the image to ``path``, creating parent directories as needed.
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(self.image_bytes)
        except OSError as exc:
            raise LocalIOFailure(f"Could not write image to {path}: {exc}") from exc
        return path


class ImageSynthesizer(Protocol):
    def render(
        self,
        prompts: Sequence[WeightedPrompt],
        settings: RenderSettings = DEFAULT_RENDER_SETTINGS,
    ) -> list[ImageArtifact]:
        ...
