"""
Integration with the Stability AI REST API for text-to-image illustration.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Sequence

import requests

from storybook.common import ResponseShapeViolation, UpstreamCallFailure

from .artifacts import DEFAULT_RENDER_SETTINGS, ImageArtifact, RenderSettings
from .prompting import WeightedPrompt

STABILITY_API_HOST = "https://api.stability.ai"
STABILITY_CLIENT_ID = "storybook"

logger = logging.getLogger(__name__)


class StabilityImageGenerator:
    """
    Thin client for the Stability ``text-to-image`` endpoint.

    Parameters
    ----------
    api_key:
        Stability API key, sent as a bearer token.
    engine:
        Engine identifier, e.g. ``stable-diffusion-xl-1024-v1-0``.
    request_timeout:
        Seconds to wait for the render before giving up.
    session:
        Optional object exposing ``post`` (a :class:`requests.Session` or a
        test double). Defaults to the module-level :func:`requests.post`.
    """

    def __init__(
        self,
        *,
        api_key: str,
        engine: str,
        api_host: str = STABILITY_API_HOST,
        request_timeout: float = 120.0,
        session: Any | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("Stability API key is required.")
        self._api_key = api_key
        self._engine = engine
        self._api_host = api_host.rstrip("/")
        self._request_timeout = request_timeout
        self._session = session

    @property
    def endpoint(self) -> str:
        return f"{self._api_host}/v1/generation/{self._engine}/text-to-image"

    def render(
        self,
        prompts: Sequence[WeightedPrompt],
        settings: RenderSettings = DEFAULT_RENDER_SETTINGS,
    ) -> list[ImageArtifact]:
        """
        Render ``prompts`` and return the decoded artifacts.
        """
        body = {
            "steps": settings.steps,
            "width": settings.width,
            "height": settings.height,
            "seed": settings.seed,
            "cfg_scale": settings.cfg_scale,
            "samples": settings.samples,
            "text_prompts": [prompt.as_dict() for prompt in prompts],
        }
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Stability-Client-ID": STABILITY_CLIENT_ID,
            "Authorization": f"Bearer {self._api_key}",
        }

        post = self._session.post if self._session is not None else requests.post
        try:
            response = post(
                self.endpoint,
                json=body,
                headers=headers,
                timeout=self._request_timeout,
            )
        except requests.RequestException as exc:
            raise UpstreamCallFailure(f"Stability request failed: {exc}") from exc

        if response.status_code != 200:
            raise UpstreamCallFailure(
                f"Stability returned HTTP {response.status_code}: {response.text}",
                user_message="I messed this painting up. Sorry.",
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ResponseShapeViolation("Stability response is not valid JSON.") from exc

        return _parse_artifacts(payload)


def _parse_artifacts(payload: Any) -> list[ImageArtifact]:
    if not isinstance(payload, dict) or not isinstance(payload.get("artifacts"), list):
        raise ResponseShapeViolation("Stability response must contain an 'artifacts' list.")

    artifacts: list[ImageArtifact] = []
    for entry in payload["artifacts"]:
        try:
            image_bytes = base64.b64decode(entry["base64"], validate=True)
        except (KeyError, TypeError, binascii.Error) as exc:
            raise ResponseShapeViolation("Stability artifact has no decodable image.") from exc

        finish_reason = str(entry.get("finishReason", "SUCCESS"))
        if finish_reason != "SUCCESS":
            logger.warning("Stability artifact finished with %s.", finish_reason)
        artifacts.append(
            ImageArtifact(
                image_bytes=image_bytes,
                finish_reason=finish_reason,
                seed=entry.get("seed"),
            )
        )
    return artifacts
