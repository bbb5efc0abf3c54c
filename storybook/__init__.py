"""
Storybook package: a synopsis in, an illustrated slide deck script out.
"""

__version__ = "0.1.0"

from .pipeline import Story, StorybookOrchestrator, StorybookResult  # noqa: E402
from .slides import DeckScript, assemble_deck  # noqa: E402
from .story_generation import Synopsis  # noqa: E402

__all__ = [
    "__version__",
    "DeckScript",
    "assemble_deck",
    "Story",
    "StorybookOrchestrator",
    "StorybookResult",
    "Synopsis",
]
