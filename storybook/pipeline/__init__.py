"""
End-to-end orchestration for storybook narrative, illustration, and deck assembly.
"""

from .cover import CoverBuilder
from .illustrator import Illustrator
from .models import DEFAULT_TITLE, Page, PageStage, Story
from .pages import PageEnricher
from .pipeline import EXCLAMATIONS, StorybookOrchestrator, StorybookResult

__all__ = [
    "CoverBuilder",
    "Illustrator",
    "DEFAULT_TITLE",
    "Page",
    "PageStage",
    "Story",
    "PageEnricher",
    "EXCLAMATIONS",
    "StorybookOrchestrator",
    "StorybookResult",
]
