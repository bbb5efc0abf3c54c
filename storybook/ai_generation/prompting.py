"""
Prompt construction utilities for storybook image generation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from storybook.story_generation import Synopsis

PAGE_STYLE_SUFFIX = " as a watercolor done in the style of a childrens book"
COVER_STYLE_PREFIX = "in the style of a watercolor childrens book. "

# Suppresses lettering the model likes to paint into book illustrations.
NO_TEXT_PROMPT_TEXT = "writing words letters alphabet text"


@dataclass(frozen=True)
class WeightedPrompt:
    """
    One text prompt term. Positive weights emphasize, negative weights suppress.
    """

    text: str
    weight: int = 1

    def as_dict(self) -> dict[str, str | int]:
        return {"text": self.text, "weight": self.weight}


NO_TEXT_PROMPT = WeightedPrompt(text=NO_TEXT_PROMPT_TEXT, weight=-1)


def build_image_prompt(illustration_brief: str, synopsis: Synopsis) -> str:
    """
    Turn an illustration brief into the instruction sent to the image model.

    The brief is lower-cased, the protagonist's name is replaced by
    "the <subject>" wherever it appears in the brief, and the style suffix is
    appended last so it is never rewritten.
    """
    brief = illustration_brief.lower()
    name = synopsis.name.strip()
    if name:
        replacement = f"the {synopsis.subject}"
        brief = re.sub(re.escape(name), lambda _: replacement, brief, flags=re.IGNORECASE)
    return f"{brief}{PAGE_STYLE_SUFFIX}"


def build_page_prompts(image_prompt: str) -> list[WeightedPrompt]:
    return [WeightedPrompt(text=image_prompt, weight=1)]


def build_cover_prompts(cover_concept: str) -> list[WeightedPrompt]:
    """
    Wrap a cover concept in the watercolor style and forbid painted text.
    """
    return [
        WeightedPrompt(text=f"{COVER_STYLE_PREFIX}{cover_concept.strip()}", weight=1),
        NO_TEXT_PROMPT,
    ]
