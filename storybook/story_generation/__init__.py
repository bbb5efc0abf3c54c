"""
Story generation utilities: the premise, the narrative, and its text prompts.
"""

from .paragraphs import extract_paragraphs
from .prompting import (
    build_cover_concept_prompt,
    build_illustration_brief_prompt,
    build_story_prompt,
    build_title_prompt,
)
from .story_service import NarrativeWriter, TextSynthesizer
from .synopsis import Synopsis, collect_synopsis
from .titles import extract_title

__all__ = [
    "Synopsis",
    "collect_synopsis",
    "extract_paragraphs",
    "extract_title",
    "build_story_prompt",
    "build_illustration_brief_prompt",
    "build_title_prompt",
    "build_cover_concept_prompt",
    "NarrativeWriter",
    "TextSynthesizer",
]
