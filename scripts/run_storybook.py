"""
CLI to write and illustrate a storybook, then emit its deck script.

Usage:
    python scripts/run_storybook.py \
        --subject fox --name Rosie --goal "find her way home" \
        --output-story story_package.yaml \
        --output-deck deck.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict

import yaml

from tqdm.auto import tqdm

# Ensure project root is on the Python path when running as a script.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from storybook import StorybookOrchestrator, StorybookResult  # noqa: E402
from storybook.common import LocalIOFailure, StorybookError, StorybookSettings  # noqa: E402
from storybook.story_generation import Synopsis, collect_synopsis  # noqa: E402

logger = logging.getLogger("storybook.cli")


class ProgressTracker:
    """
    Prints the storyteller's running commentary and a page progress bar.
    """

    def __init__(self) -> None:
        self._page_bar: tqdm | None = None

    def __call__(self, stage: str, payload: Dict[str, Any]) -> None:
        match stage:
            case "story:generating":
                self._write("Let me think about how this story will go...")
            case "story:generated":
                self._write("Okay. I think I have an idea.")
                self._write("Let me edit it real quick...")
            case "pages:enriching":
                total = payload.get("total_pages", 0)
                self._write("Sweet. I think this could use some creative touches. Give me a moment...")
                self._page_bar = tqdm(total=total, desc="Illustrated pages", unit="page")
            case "page:done":
                message = payload.get("message")
                if message:
                    self._write(message)
                if self._page_bar is not None:
                    self._page_bar.update(1)
            case "cover:ready":
                self.close()
                self._write("I think I've thought of a pretty good title")
                self._write(f'"{payload.get("title", "")}"')
            case "deck:assembling":
                self._write("Ah! That's perfect! Let me just put the finishing touches on it...")
            case "pipeline:complete":
                self._write("\nWe've done it.")
                self.close()

    def close(self) -> None:
        if self._page_bar is not None:
            self._page_bar.close()
            self._page_bar = None

    @staticmethod
    def _write(message: str) -> None:
        tqdm.write(message)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Write, illustrate, and lay out a storybook.")
    parser.add_argument("--subject", default=None, help="Kind of animal the story is about.")
    parser.add_argument("--name", default=None, help="The protagonist's name.")
    parser.add_argument(
        "--goal",
        default=None,
        help='What the protagonist is trying to do ("<name> is trying to ...").',
    )
    parser.add_argument(
        "--synopsis",
        default=None,
        help="Path to a YAML/JSON file with subject, name, and goal.",
    )
    parser.add_argument(
        "--output-story",
        default="story_package.yaml",
        help="Output YAML file for the finished story package.",
    )
    parser.add_argument(
        "--output-deck",
        default="deck.json",
        help="Output JSON file for the deck script.",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Dotenv file loaded before reading settings (default: .env).",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Override the number of concurrent page workers.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Enable debug logging and full tracebacks.",
    )
    return parser.parse_args()


def load_synopsis_mapping(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text)
    elif suffix == ".json":
        data = json.loads(text)
    else:
        raise ValueError("Unsupported synopsis file format. Use YAML or JSON.")

    if not isinstance(data, dict):
        raise ValueError("Synopsis file must deserialize to a mapping.")
    return data


def resolve_synopsis(args: argparse.Namespace) -> Synopsis:
    if args.synopsis:
        return Synopsis.from_mapping(load_synopsis_mapping(Path(args.synopsis)))
    if args.subject or args.name or args.goal:
        return Synopsis.from_mapping(
            {"subject": args.subject, "name": args.name, "goal": args.goal}
        )
    return collect_synopsis()


def write_outputs(result: StorybookResult, story_path: Path, deck_path: Path) -> None:
    try:
        story_path.write_text(result.story.to_yaml(), encoding="utf-8")
        deck_path.write_text(result.deck.to_json(), encoding="utf-8")
    except OSError as exc:
        raise LocalIOFailure(
            f"Could not write storybook outputs: {exc}",
            user_message="Crap. I misplaced the finished book. Check the output paths and try again?",
        ) from exc


def print_banner() -> None:
    banner_path = PROJECT_ROOT / "banner.txt"
    if banner_path.exists():
        print(banner_path.read_text(encoding="utf-8"))


def main() -> int:
    args = parse_args()

    try:
        settings = StorybookSettings.from_env(dotenv_path=args.env_file)
        if args.max_workers is not None:
            settings = replace(settings, max_workers=args.max_workers)
    except StorybookError as exc:
        print(exc.user_message)
        print(exc)
        return 1

    debug = args.debug or settings.debug
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print_banner()
    try:
        synopsis = resolve_synopsis(args)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print("Hmm. I can't make a story out of that. I need a subject, a name, and a goal.")
        print(exc)
        return 1

    tracker = ProgressTracker()
    try:
        orchestrator = StorybookOrchestrator.from_settings(settings)
        result = orchestrator.run(synopsis, progress_callback=tracker)
    except StorybookError as exc:
        if debug:
            logger.exception("Storybook run failed.")
        print(exc.user_message)
        return 1
    finally:
        tracker.close()

    story_path = Path(args.output_story)
    deck_path = Path(args.output_deck)
    try:
        write_outputs(result, story_path, deck_path)
    except LocalIOFailure as exc:
        if debug:
            logger.exception("Writing storybook outputs failed.")
        print(exc.user_message)
        return 1

    print(f"Saved story package to {story_path}")
    print(f"Saved deck script for {result.deck.title!r} to {deck_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
