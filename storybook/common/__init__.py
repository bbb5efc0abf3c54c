"""
Common utilities shared across storybook modules.
"""

from .config import StorybookSettings
from .errors import (
    ConfigurationError,
    LocalIOFailure,
    PipelineCancelled,
    ResponseShapeViolation,
    StorybookError,
    UpstreamCallFailure,
)
from .llm import ChatResult, CompletionCallable, LiteLLMTextSynthesizer, call_chat_completion

__all__ = [
    "ChatResult",
    "CompletionCallable",
    "call_chat_completion",
    "LiteLLMTextSynthesizer",
    "StorybookSettings",
    "StorybookError",
    "UpstreamCallFailure",
    "ResponseShapeViolation",
    "LocalIOFailure",
    "ConfigurationError",
    "PipelineCancelled",
]
