"""
Integration with Replicate as an alternative storybook image backend.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable as IterableABC
from typing import Any, Callable, Sequence

import replicate
import requests

from storybook.common import ConfigurationError, ResponseShapeViolation, UpstreamCallFailure

from .artifacts import DEFAULT_RENDER_SETTINGS, ImageArtifact, RenderSettings
from .prompting import WeightedPrompt

logger = logging.getLogger(__name__)


def _build_sdxl_input(
    *,
    prompt: str,
    negative_prompt: str,
    settings: RenderSettings,
) -> dict[str, Any]:
    return {
        "prompt": prompt,
        "negative_prompt": negative_prompt,
        "width": settings.width,
        "height": settings.height,
        "num_inference_steps": settings.steps,
        "guidance_scale": settings.cfg_scale,
        "seed": settings.seed,
        "num_outputs": settings.samples,
    }


def _build_flux_input(
    *,
    prompt: str,
    negative_prompt: str,
    settings: RenderSettings,
) -> dict[str, Any]:
    # Flux has no negative prompt; fold the suppressed terms into the instruction.
    if negative_prompt:
        prompt = f"{prompt}. Avoid: {negative_prompt}"
    return {
        "prompt": prompt,
        "aspect_ratio": "16:9",
        "num_outputs": settings.samples,
        "seed": settings.seed,
        "output_format": "png",
    }


_MODEL_INPUT_BUILDERS: dict[str, Callable[..., dict[str, Any]]] = {
    "stability-ai/sdxl": _build_sdxl_input,
    "black-forest-labs/flux-schnell": _build_flux_input,
    "black-forest-labs/flux-dev": _build_flux_input,
}


def _resolve_input_builder(model_identifier: str) -> Callable[..., dict[str, Any]]:
    normalized_identifier = model_identifier.strip().lower()
    builder = _MODEL_INPUT_BUILDERS.get(normalized_identifier)
    if builder is None and ":" in normalized_identifier:
        base_identifier = normalized_identifier.split(":", maxsplit=1)[0]
        builder = _MODEL_INPUT_BUILDERS.get(base_identifier)
    if builder is None:
        supported_models = ", ".join(sorted(_MODEL_INPUT_BUILDERS))
        raise ConfigurationError(
            "Model identifier "
            f"'{model_identifier}' is not configured with a default input payload. "
            f"Supported models: {supported_models}."
        )
    return builder


def _build_replicate_input_payload(
    *,
    model_identifier: str,
    prompts: Sequence[WeightedPrompt],
    settings: RenderSettings,
) -> dict[str, Any]:
    builder = _resolve_input_builder(model_identifier)

    positive = ", ".join(prompt.text for prompt in prompts if prompt.weight > 0)
    negative = ", ".join(prompt.text for prompt in prompts if prompt.weight < 0)
    return builder(prompt=positive, negative_prompt=negative, settings=settings)


class ReplicateImageGenerator:
    """
    Convenience wrapper around the Replicate client for storybook illustrations.

    Parameters
    ----------
    api_token:
        Replicate API token.
    model_identifier:
        Model string in the ``owner/model[:version]`` format.
    client:
        Optional pre-configured :class:`replicate.Client`. Mainly useful for testing.
    """

    def __init__(
        self,
        *,
        api_token: str | None = None,
        model_identifier: str,
        client: replicate.Client | None = None,
        download_timeout: float = 60.0,
    ) -> None:
        if not api_token and not client:
            raise ValueError("Replicate API token is required.")
        if not model_identifier:
            raise ValueError("Replicate model identifier is required.")
        _resolve_input_builder(model_identifier)

        self._model_identifier = model_identifier
        self._client = client or replicate.Client(api_token=api_token)
        self._download_timeout = download_timeout

    @property
    def model_identifier(self) -> str:
        """Return the model identifier currently used."""
        return self._model_identifier

    def render(
        self,
        prompts: Sequence[WeightedPrompt],
        settings: RenderSettings = DEFAULT_RENDER_SETTINGS,
    ) -> list[ImageArtifact]:
        """
        Run the configured model and download every produced image.
        """
        replicate_input = _build_replicate_input_payload(
            model_identifier=self._model_identifier,
            prompts=prompts,
            settings=settings,
        )
        try:
            outputs = self._client.run(self._model_identifier, input=replicate_input)
        except Exception as exc:
            raise UpstreamCallFailure(
                f"Replicate run of {self._model_identifier} failed: {exc}",
                user_message="This art didn't turn out the way I wanted. Maybe we should try again later.",
            ) from exc

        return [
            ImageArtifact(image_bytes=self._read_output(item), seed=settings.seed)
            for item in _flatten_outputs(outputs)
        ]

    def _read_output(self, item: Any) -> bytes:
        if hasattr(item, "read"):
            return item.read()

        if isinstance(item, bytes):
            item = item.decode("utf-8", errors="ignore")
        url = str(item)
        if not url.lower().startswith(("http://", "https://")):
            raise ResponseShapeViolation(f"Unexpected Replicate output: {url!r}")
        try:
            response = requests.get(url, timeout=self._download_timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise UpstreamCallFailure(f"Could not download Replicate output {url}: {exc}") from exc
        return response.content


def _flatten_outputs(raw: Any) -> list[Any]:
    """
    Normalize Replicate outputs (single item, list, or nested iterables) into a flat list.
    """
    if raw is None:
        return []

    if isinstance(raw, (str, bytes)) or hasattr(raw, "read"):
        return [raw]

    if isinstance(raw, IterableABC):
        flattened: list[Any] = []
        for item in raw:
            flattened.extend(_flatten_outputs(item))
        return flattened

    return [raw]
