"""
LiteLLM-backed text synthesis used by every storybook prompt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, MutableMapping, Sequence

from litellm import completion

from .errors import ResponseShapeViolation, UpstreamCallFailure

ChatMessage = Mapping[str, Any]

logger = logging.getLogger(__name__)


@dataclass
class ChatResult:
    """
    Structured response returned from an LLM chat completion.
    """

    text: str
    raw: Any


CompletionCallable = Callable[..., ChatResult]


def call_chat_completion(
    *,
    model: str,
    messages: Sequence[ChatMessage],
    temperature: float | None = None,
    max_tokens: int | None = None,
    api_key: str | None = None,
    **extra_kwargs: Any,
) -> ChatResult:
    """
    Invoke LiteLLM's `completion` API and return the consolidated text.
    """
    payload: MutableMapping[str, Any] = {
        "model": model,
        "messages": list(messages),
    }

    if temperature is not None:
        payload["temperature"] = temperature

    if max_tokens is not None:
        payload["max_tokens"] = max_tokens

    if api_key is not None:
        payload["api_key"] = api_key

    payload.update(extra_kwargs)

    response = completion(**payload)

    try:
        message = response["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ResponseShapeViolation("Unexpected LiteLLM response format.") from exc

    return ChatResult(text=str(message or "").strip(), raw=response)


class LiteLLMTextSynthesizer:
    """
    Single-shot prompt completion: one user message in, free text out.

    No conversation state is carried between calls, so one instance can be
    shared by concurrent workers.
    """

    def __init__(
        self,
        *,
        model: str,
        api_key: str | None = None,
        completion_fn: CompletionCallable | None = None,
        temperature: float | None = None,
    ) -> None:
        self._model = model
        self._api_key = api_key
        self._completion_fn: CompletionCallable = completion_fn or call_chat_completion
        self._temperature = temperature

    @property
    def model(self) -> str:
        return self._model

    def complete(self, prompt: str, *, user_message: str | None = None) -> str:
        """
        Return the model's answer to ``prompt``.

        Raises :class:`UpstreamCallFailure` when the call fails or produces no
        text. ``user_message`` overrides the friendly message shown on exit.
        """
        logger.debug("Requesting completion from %s (%d chars).", self._model, len(prompt))
        try:
            result = self._completion_fn(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self._temperature,
                api_key=self._api_key,
            )
        except ResponseShapeViolation:
            raise
        except Exception as exc:
            raise UpstreamCallFailure(
                f"Text completion with {self._model} failed: {exc}",
                user_message=user_message,
            ) from exc

        if not result.text:
            raise UpstreamCallFailure(
                f"Text completion with {self._model} returned no content.",
                user_message=user_message,
            )
        return result.text
