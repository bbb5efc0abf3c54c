"""
AI image generation package for storybook illustrations.
"""

from .artifacts import DEFAULT_RENDER_SETTINGS, ImageArtifact, ImageSynthesizer, RenderSettings
from .prompting import (
    NO_TEXT_PROMPT,
    WeightedPrompt,
    build_cover_prompts,
    build_image_prompt,
    build_page_prompts,
)
from .replicate_service import ReplicateImageGenerator
from .stability_service import StabilityImageGenerator

__all__ = [
    "DEFAULT_RENDER_SETTINGS",
    "ImageArtifact",
    "ImageSynthesizer",
    "RenderSettings",
    "NO_TEXT_PROMPT",
    "WeightedPrompt",
    "build_cover_prompts",
    "build_image_prompt",
    "build_page_prompts",
    "ReplicateImageGenerator",
    "StabilityImageGenerator",
]
