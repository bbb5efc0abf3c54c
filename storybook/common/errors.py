"""
Error taxonomy for the storybook pipeline.

Every :class:`StorybookError` is fatal for the run: nothing retries it and no
partial deck is produced. Each error carries a short ``user_message`` that the
command-line driver prints before exiting.
"""

from __future__ import annotations


class StorybookError(Exception):
    """Base class for all fatal storybook failures."""

    default_user_message = "Something went wrong while making the storybook. Try again later?"

    def __init__(self, message: str, *, user_message: str | None = None) -> None:
        super().__init__(message)
        self.user_message = user_message or self.default_user_message


class UpstreamCallFailure(StorybookError):
    """A text, image, or publish call failed or answered with a non-success status."""

    default_user_message = "I'm having trouble reaching my helpers. Try again later?"


class ResponseShapeViolation(StorybookError):
    """A call succeeded but its response failed a required structural check."""

    default_user_message = "Eh. I've got a foggy brain right now. I can't work like this. Goodbye."


class LocalIOFailure(StorybookError):
    """Creating, writing, or reading a local file failed."""

    default_user_message = "Crap. I misplaced my art. Try again later?"


class ConfigurationError(StorybookError):
    """A required setting is missing or malformed."""

    default_user_message = "I'm not set up properly yet. Check your .env file."


class PipelineCancelled(StorybookError):
    """Raised inside a worker that stopped because a sibling task failed."""

    default_user_message = "Stopping early."
