from pathlib import Path

import pytest

from storybook.common import ConfigurationError, StorybookSettings
from storybook.pipeline import StorybookOrchestrator

BASE_ENV = {
    "OPEN_AI_KEY": "sk-openai",
    "STABILITY_API_KEY": "sk-stability",
    "S3_BUCKET_NAME": "books",
    "AWS_REGION": "us-east-1",
    "FINAL_SLIDE_IMAGE": "https://example.com/final.png",
}


def test_settings_defaults():
    settings = StorybookSettings.from_env(BASE_ENV)

    assert settings.openai_api_key == "sk-openai"
    assert settings.debug is False
    assert settings.text_model == "gpt-3.5-turbo"
    assert settings.image_backend == "stability"
    assert settings.s3_key_prefix == "STORYBOOK_"
    assert settings.images_root == Path("./images")
    assert settings.max_workers is None
    assert settings.pacing_range == (2.0, 11.0)


def test_settings_overrides():
    env = dict(
        BASE_ENV,
        DEBUG="true",
        OPEN_AI_KEY="",
        OPENAI_API_KEY="sk-fallback",
        STORYBOOK_MAX_WORKERS="4",
        STORYBOOK_PACING_MIN="0",
        STORYBOOK_PACING_MAX="0.5",
        STORYBOOK_IMAGES_ROOT="/tmp/storybook",
    )

    settings = StorybookSettings.from_env(env)

    assert settings.debug is True
    assert settings.openai_api_key == "sk-fallback"
    assert settings.max_workers == 4
    assert settings.pacing_range == (0.0, 0.5)
    assert settings.images_root == Path("/tmp/storybook")


@pytest.mark.parametrize("missing", ["OPEN_AI_KEY", "S3_BUCKET_NAME", "AWS_REGION", "FINAL_SLIDE_IMAGE", "STABILITY_API_KEY"])
def test_settings_require_core_values(missing):
    env = {key: value for key, value in BASE_ENV.items() if key != missing}

    with pytest.raises(ConfigurationError):
        StorybookSettings.from_env(env)


@pytest.mark.parametrize(
    "overrides",
    [
        {"STORYBOOK_IMAGE_BACKEND": "dalle"},
        {"STORYBOOK_IMAGE_BACKEND": "replicate"},
        {"STORYBOOK_MAX_WORKERS": "0"},
        {"STORYBOOK_MAX_WORKERS": "many"},
        {"STORYBOOK_PACING_MIN": "5", "STORYBOOK_PACING_MAX": "1"},
    ],
)
def test_settings_reject_invalid_values(overrides):
    with pytest.raises(ConfigurationError):
        StorybookSettings.from_env(dict(BASE_ENV, **overrides))


def test_replicate_backend_settings():
    env = dict(
        BASE_ENV,
        STABILITY_API_KEY="",
        STORYBOOK_IMAGE_BACKEND="Replicate",
        REPLICATE_API_TOKEN="r8-token",
        REPLICATE_MODEL="stability-ai/sdxl",
    )

    settings = StorybookSettings.from_env(env)

    assert settings.image_backend == "replicate"
    assert settings.replicate_model == "stability-ai/sdxl"


def test_orchestrator_from_settings():
    orchestrator = StorybookOrchestrator.from_settings(StorybookSettings.from_env(BASE_ENV))
    assert isinstance(orchestrator, StorybookOrchestrator)


def test_from_settings_rejects_unsupported_replicate_model():
    env = dict(
        BASE_ENV,
        STORYBOOK_IMAGE_BACKEND="replicate",
        REPLICATE_API_TOKEN="r8-token",
        REPLICATE_MODEL="someone/unknown",
    )
    settings = StorybookSettings.from_env(env)

    with pytest.raises(ConfigurationError) as excinfo:
        StorybookOrchestrator.from_settings(settings)
    assert "someone/unknown" in str(excinfo.value)
    assert excinfo.value.user_message == "I'm not set up properly yet. Check your .env file."
