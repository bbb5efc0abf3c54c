import importlib.util
import sys
from pathlib import Path

import pytest

from storybook.common import LocalIOFailure, StorybookSettings

SCRIPT_PATH = Path(__file__).resolve().parents[1] / "scripts" / "run_storybook.py"

BASE_ENV = {
    "OPEN_AI_KEY": "sk-openai",
    "STABILITY_API_KEY": "sk-stability",
    "S3_BUCKET_NAME": "books",
    "AWS_REGION": "us-east-1",
    "FINAL_SLIDE_IMAGE": "https://example.com/final.png",
}


@pytest.fixture(name="cli")
def cli_fixture():
    spec = importlib.util.spec_from_file_location("run_storybook", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _use_settings(monkeypatch, cli, env):
    settings = StorybookSettings.from_env(env)

    class FixedSettings:
        @staticmethod
        def from_env(**kwargs):
            return settings

    monkeypatch.setattr(cli, "StorybookSettings", FixedSettings)


def test_incomplete_synopsis_file_exits_with_message(tmp_path, monkeypatch, capsys, cli):
    synopsis_path = tmp_path / "synopsis.yaml"
    synopsis_path.write_text("subject: fox\nname: Rosie\n", encoding="utf-8")
    _use_settings(monkeypatch, cli, BASE_ENV)
    monkeypatch.setattr(sys, "argv", ["run_storybook.py", "--synopsis", str(synopsis_path)])

    assert cli.main() == 1
    assert "I need a subject, a name, and a goal." in capsys.readouterr().out


def test_missing_synopsis_file_exits_with_message(tmp_path, monkeypatch, capsys, cli):
    _use_settings(monkeypatch, cli, BASE_ENV)
    monkeypatch.setattr(sys, "argv", ["run_storybook.py", "--synopsis", str(tmp_path / "nope.json")])

    assert cli.main() == 1
    assert "I need a subject, a name, and a goal." in capsys.readouterr().out


def test_unsupported_replicate_model_exits_before_writing(tmp_path, monkeypatch, capsys, cli):
    env = dict(
        BASE_ENV,
        STORYBOOK_IMAGE_BACKEND="replicate",
        REPLICATE_API_TOKEN="r8-token",
        REPLICATE_MODEL="someone/unknown",
    )
    _use_settings(monkeypatch, cli, env)
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "run_storybook.py",
            "--subject", "fox",
            "--name", "Rosie",
            "--goal", "find her way home",
            "--output-story", str(tmp_path / "story.yaml"),
            "--output-deck", str(tmp_path / "deck.json"),
        ],
    )

    assert cli.main() == 1
    assert "I'm not set up properly yet. Check your .env file." in capsys.readouterr().out
    assert not (tmp_path / "deck.json").exists()


def test_write_outputs_reports_local_failures(tmp_path, make_orchestrator, synopsis, cli):
    result = make_orchestrator().run(synopsis)
    missing_dir = tmp_path / "missing"

    with pytest.raises(LocalIOFailure):
        cli.write_outputs(result, missing_dir / "story.yaml", missing_dir / "deck.json")


def test_write_outputs_writes_story_and_deck(tmp_path, make_orchestrator, synopsis, cli):
    result = make_orchestrator().run(synopsis)

    cli.write_outputs(result, tmp_path / "story.yaml", tmp_path / "deck.json")

    assert "Rosie's Long Walk" in (tmp_path / "story.yaml").read_text(encoding="utf-8")
    assert '"requests"' in (tmp_path / "deck.json").read_text(encoding="utf-8")
