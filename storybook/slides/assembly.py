"""
Slide assembly engine: a completed story in, an ordered deck script out.

Assembly is a pure function of the story and the closing image URL. Object
identifiers come from fixed literals and page positions only, never from
user text, so they are unique by construction.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from . import styles
from .operations import (
    CreateImage,
    CreateShape,
    CreateSlide,
    DEFAULT_PLACEHOLDER_ID,
    DeleteObject,
    InsertText,
    LayoutOperation,
    Size,
    Transform,
    UpdateParagraphStyle,
    UpdateShapeStyle,
    UpdateTextStyle,
    validate_operations,
)

if TYPE_CHECKING:
    from storybook.pipeline.models import Page, Story

TITLE_SLIDE_ID = "titleSlide"
TITLE_IMAGE_ID = "titlecoverimage"
TITLE_BACKGROUND_ID = "titlebackground"

FINAL_SLIDE_ID = "finalSlide"
FINAL_IMAGE_ID = "finalImage"
MADE_WITH_ID = "madeWith"
PRODUCT_NAME_ID = "storyBook"


def page_slide_id(index: int) -> str:
    return f"{index}_SLIDE"


def page_image_id(index: int) -> str:
    return f"{index}_IMAGE"


def page_paragraph_id(index: int) -> str:
    return f"{index}_PARAGRAPH"


@dataclass(frozen=True)
class DeckScript:
    """The presentation title and the ordered operations that build it."""

    title: str
    operations: tuple[LayoutOperation, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "requests": [operation.to_request() for operation in self.operations],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


def assemble_deck(story: Story, *, closing_image_url: str) -> DeckScript:
    """
    Translate a completed story into the deck script.

    Raises :class:`ValueError` when a page has no public image URL; that is a
    caller bug, since only fully published stories may be assembled.
    """
    for index, page in enumerate(story.pages):
        if not page.public_image_url:
            raise ValueError(f"Page {index} has no public image URL; the story is incomplete.")

    operations: list[LayoutOperation] = []
    operations.extend(build_title_slide(story))
    for index, page in enumerate(story.pages):
        operations.extend(build_page_slide(index, page))
    operations.extend(build_closing_slide(closing_image_url))

    validate_operations(operations)
    return DeckScript(title=story.title, operations=tuple(operations))


def build_title_slide(story: Story) -> list[LayoutOperation]:
    return [
        CreateSlide(object_id=TITLE_SLIDE_ID),
        DeleteObject(object_id=DEFAULT_PLACEHOLDER_ID),
        CreateImage(
            object_id=TITLE_IMAGE_ID,
            url=story.cover_image_url,
            page_object_id=TITLE_SLIDE_ID,
            transform=styles.FULL_BLEED_IMAGE,
        ),
        CreateShape(
            object_id=TITLE_BACKGROUND_ID,
            shape_type="TEXT_BOX",
            page_object_id=TITLE_SLIDE_ID,
            size=styles.TITLE_BACKGROUND_SIZE,
        ),
        UpdateShapeStyle(
            object_id=TITLE_BACKGROUND_ID,
            fill=styles.TITLE_BACKGROUND_FILL,
            outline=styles.TITLE_BACKGROUND_OUTLINE,
            content_alignment=styles.TITLE_CONTENT_ALIGNMENT,
        ),
        InsertText(object_id=TITLE_BACKGROUND_ID, text=story.title),
        UpdateParagraphStyle(object_id=TITLE_BACKGROUND_ID, alignment=styles.TITLE_ALIGNMENT),
        UpdateTextStyle(
            object_id=TITLE_BACKGROUND_ID,
            bold=True,
            font_size=styles.TITLE_FONT_SIZE,
            font_family=styles.DECORATIVE_FONT,
            foreground=styles.TITLE_FOREGROUND,
        ),
    ]


def build_page_slide(index: int, page: Page) -> list[LayoutOperation]:
    slide_id = page_slide_id(index)
    paragraph_id = page_paragraph_id(index)
    return [
        CreateSlide(object_id=slide_id),
        CreateImage(
            object_id=page_image_id(index),
            url=page.public_image_url or "",
            page_object_id=slide_id,
            transform=styles.FULL_BLEED_IMAGE,
        ),
        CreateShape(
            object_id=paragraph_id,
            shape_type="TEXT_BOX",
            page_object_id=slide_id,
            size=styles.PARAGRAPH_BOX_SIZE,
            transform=styles.PARAGRAPH_BOX_TRANSFORM,
        ),
        UpdateShapeStyle(
            object_id=paragraph_id,
            fill=styles.PARAGRAPH_BOX_FILL,
            outline=styles.PARAGRAPH_BOX_OUTLINE,
            content_alignment=styles.PARAGRAPH_CONTENT_ALIGNMENT,
        ),
        InsertText(object_id=paragraph_id, text=page.paragraph_text),
        UpdateParagraphStyle(object_id=paragraph_id, alignment=styles.PARAGRAPH_ALIGNMENT),
        UpdateTextStyle(
            object_id=paragraph_id,
            bold=True,
            font_size=styles.PARAGRAPH_FONT_SIZE,
            foreground=styles.PARAGRAPH_FOREGROUND,
        ),
    ]


def build_closing_slide(closing_image_url: str) -> list[LayoutOperation]:
    """
    Fixed attribution slide. Its insertion index places it first in the deck
    no matter where it appears in the emitted sequence.
    """
    operations: list[LayoutOperation] = [
        CreateSlide(
            object_id=FINAL_SLIDE_ID,
            insertion_index=styles.CLOSING_SLIDE_INSERTION_INDEX,
        ),
        CreateImage(
            object_id=FINAL_IMAGE_ID,
            url=closing_image_url,
            page_object_id=FINAL_SLIDE_ID,
            transform=styles.FULL_BLEED_IMAGE,
        ),
        *_caption(
            MADE_WITH_ID,
            styles.MADE_WITH_TEXT,
            size=styles.MADE_WITH_SIZE,
            transform=styles.MADE_WITH_TRANSFORM,
            bold=False,
            font_size=styles.MADE_WITH_FONT_SIZE,
            font_family=styles.CAPTION_FONT,
        ),
        *_caption(
            PRODUCT_NAME_ID,
            styles.PRODUCT_NAME_TEXT,
            size=styles.PRODUCT_NAME_SIZE,
            transform=styles.PRODUCT_NAME_TRANSFORM,
            bold=True,
            font_size=styles.PRODUCT_NAME_FONT_SIZE,
            font_family=styles.DECORATIVE_FONT,
        ),
    ]
    for object_id, label, offset_y in styles.LINK_BUTTONS:
        operations.extend(_link_button(object_id, label, offset_y))
    return operations


def _caption(
    object_id: str,
    text: str,
    *,
    size: Size,
    transform: Transform,
    bold: bool,
    font_size: float,
    font_family: str,
) -> list[LayoutOperation]:
    return [
        CreateShape(
            object_id=object_id,
            shape_type="TEXT_BOX",
            page_object_id=FINAL_SLIDE_ID,
            size=size,
            transform=transform,
        ),
        InsertText(object_id=object_id, text=text),
        UpdateParagraphStyle(object_id=object_id, alignment="START"),
        UpdateTextStyle(
            object_id=object_id,
            bold=bold,
            font_size=font_size,
            font_family=font_family,
        ),
    ]


def _link_button(object_id: str, label: str, offset_y: float) -> list[LayoutOperation]:
    return [
        CreateShape(
            object_id=object_id,
            shape_type=styles.LINK_BUTTON_SHAPE,
            page_object_id=FINAL_SLIDE_ID,
            size=styles.LINK_BUTTON_SIZE,
            transform=Transform(translate_x=styles.LINK_BUTTON_X, translate_y=offset_y),
        ),
        UpdateShapeStyle(
            object_id=object_id,
            fill=styles.LINK_BUTTON_FILL,
            link_url=styles.PROJECT_URL,
        ),
        InsertText(object_id=object_id, text=label),
        UpdateParagraphStyle(object_id=object_id, alignment=styles.LINK_BUTTON_ALIGNMENT),
        UpdateTextStyle(
            object_id=object_id,
            bold=False,
            font_size=styles.LINK_BUTTON_FONT_SIZE,
            font_family=styles.CAPTION_FONT,
        ),
    ]
