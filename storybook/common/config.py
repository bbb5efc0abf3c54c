"""
Process configuration, resolved once at startup and passed to every component.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from .errors import ConfigurationError

DEFAULT_TEXT_MODEL = "gpt-3.5-turbo"
DEFAULT_STABILITY_ENGINE = "stable-diffusion-xl-1024-v1-0"
DEFAULT_IMAGES_ROOT = Path("./images")
DEFAULT_S3_KEY_PREFIX = "STORYBOOK_"
DEFAULT_PACING_RANGE = (2.0, 11.0)

IMAGE_BACKENDS = ("stability", "replicate")


@dataclass(frozen=True)
class StorybookSettings:
    """
    Immutable configuration for a storybook run.

    Attributes
    ----------
    openai_api_key:
        Key forwarded to LiteLLM for every text completion.
    final_slide_image:
        Public URL of the closing-slide artwork. Also used as the cover
        image until the cover pipeline replaces it.
    image_backend:
        ``"stability"`` or ``"replicate"``.
    max_workers:
        Upper bound on concurrent page workers. ``None`` runs one worker per
        paragraph.
    pacing_range:
        Inclusive bounds, in seconds, of the randomized wait each page worker
        takes before its first network call.
    """

    openai_api_key: str
    s3_bucket_name: str
    aws_region: str
    final_slide_image: str
    debug: bool = False
    text_model: str = DEFAULT_TEXT_MODEL
    image_backend: str = "stability"
    stability_api_key: str | None = None
    stability_engine: str = DEFAULT_STABILITY_ENGINE
    replicate_api_token: str | None = None
    replicate_model: str | None = None
    s3_key_prefix: str = DEFAULT_S3_KEY_PREFIX
    images_root: Path = DEFAULT_IMAGES_ROOT
    max_workers: int | None = None
    pacing_range: tuple[float, float] = DEFAULT_PACING_RANGE

    def __post_init__(self) -> None:
        if self.image_backend not in IMAGE_BACKENDS:
            raise ConfigurationError(
                f"Unknown image backend {self.image_backend!r}; "
                f"expected one of {', '.join(IMAGE_BACKENDS)}."
            )
        if self.image_backend == "stability" and not self.stability_api_key:
            raise ConfigurationError("STABILITY_API_KEY is required for the stability backend.")
        if self.image_backend == "replicate" and not (
            self.replicate_api_token and self.replicate_model
        ):
            raise ConfigurationError(
                "REPLICATE_API_TOKEN and REPLICATE_MODEL are required for the replicate backend."
            )
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1.")
        low, high = self.pacing_range
        if low < 0 or high < low:
            raise ConfigurationError(
                f"Invalid pacing range {self.pacing_range!r}; expected 0 <= min <= max."
            )

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        *,
        dotenv_path: str | Path | None = ".env",
    ) -> "StorybookSettings":
        """
        Build settings from environment variables.

        When ``env`` is omitted, ``dotenv_path`` is loaded into the process
        environment first (existing variables win) and ``os.environ`` is read.
        """
        if env is None:
            if dotenv_path is not None:
                load_dotenv(dotenv_path)
            env = os.environ

        pacing_min = _optional_float(env, "STORYBOOK_PACING_MIN")
        pacing_max = _optional_float(env, "STORYBOOK_PACING_MAX")
        pacing_range = (
            pacing_min if pacing_min is not None else DEFAULT_PACING_RANGE[0],
            pacing_max if pacing_max is not None else DEFAULT_PACING_RANGE[1],
        )

        return cls(
            openai_api_key=_require(env, "OPEN_AI_KEY", "OPENAI_API_KEY"),
            s3_bucket_name=_require(env, "S3_BUCKET_NAME"),
            aws_region=_require(env, "AWS_REGION"),
            final_slide_image=_require(env, "FINAL_SLIDE_IMAGE"),
            debug=env.get("DEBUG", "false").strip().lower() == "true",
            text_model=env.get("STORYBOOK_TEXT_MODEL") or DEFAULT_TEXT_MODEL,
            image_backend=(env.get("STORYBOOK_IMAGE_BACKEND") or "stability").strip().lower(),
            stability_api_key=env.get("STABILITY_API_KEY") or None,
            stability_engine=env.get("STABILITY_ENGINE") or DEFAULT_STABILITY_ENGINE,
            replicate_api_token=env.get("REPLICATE_API_TOKEN") or None,
            replicate_model=env.get("REPLICATE_MODEL") or None,
            s3_key_prefix=env.get("STORYBOOK_S3_KEY_PREFIX", DEFAULT_S3_KEY_PREFIX),
            images_root=Path(env.get("STORYBOOK_IMAGES_ROOT") or DEFAULT_IMAGES_ROOT),
            max_workers=_optional_int(env, "STORYBOOK_MAX_WORKERS"),
            pacing_range=pacing_range,
        )


def _require(env: Mapping[str, str], *names: str) -> str:
    for name in names:
        value = env.get(name, "").strip()
        if value:
            return value
    raise ConfigurationError(f"Missing required setting {' or '.join(names)}.")


def _optional_int(env: Mapping[str, str], name: str) -> int | None:
    raw = env.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}.") from exc


def _optional_float(env: Mapping[str, str], name: str) -> float | None:
    raw = env.get(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}.") from exc
