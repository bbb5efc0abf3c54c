"""
Re-assemble the deck script from a saved storybook package YAML.

Usage:
    python scripts/assemble_deck.py \
        --package story_package.yaml \
        --closing-image https://example.com/final.png \
        --output deck.json
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Ensure project root is on the Python path.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from storybook import Story, assemble_deck  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Convert a storybook package YAML into a deck script JSON."
    )
    parser.add_argument(
        "--package",
        required=True,
        help="Path to the story package YAML (output of run_storybook.py).",
    )
    parser.add_argument(
        "--output",
        required=True,
        help="Destination JSON file path.",
    )
    parser.add_argument(
        "--closing-image",
        default=None,
        help="Public URL of the closing-slide image (default: FINAL_SLIDE_IMAGE).",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    load_dotenv()

    closing_image = args.closing_image or os.environ.get("FINAL_SLIDE_IMAGE")
    if not closing_image:
        print("A closing image URL is required (--closing-image or FINAL_SLIDE_IMAGE).")
        return 1

    story = Story.from_yaml(args.package)
    if not story.is_complete:
        print(f"Story {story.id} is not fully illustrated; refusing to assemble a partial deck.")
        return 1

    deck = assemble_deck(story, closing_image_url=closing_image)
    Path(args.output).write_text(deck.to_json(), encoding="utf-8")

    print(f"Wrote {len(deck.operations)} operations for {deck.title!r} to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
