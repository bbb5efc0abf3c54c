"""
Narrative store: the story, its pages, and their enrichment progress.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any, Mapping

import yaml

from storybook.story_generation import Synopsis, extract_paragraphs

DEFAULT_TITLE = "Storybook Story"


class PageStage(IntEnum):
    """Enrichment stages a page moves through, strictly in this order."""

    TEXT_ONLY = 0
    BRIEF_DERIVED = 1
    PROMPT_DERIVED = 2
    IMAGE_RENDERED = 3
    PUBLISHED = 4


@dataclass
class Page:
    """
    One paragraph of narrative plus its illustration and publication metadata.

    Fields are filled in by a single owning worker through the ``record_*``
    methods, each of which advances :attr:`stage` by exactly one step.
    """

    paragraph_text: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    illustration_brief: str | None = None
    image_prompt: str | None = None
    local_image_path: Path | None = None
    public_image_url: str | None = None
    stage: PageStage = PageStage.TEXT_ONLY

    def record_brief(self, brief: str) -> None:
        self._advance(PageStage.BRIEF_DERIVED)
        self.illustration_brief = brief

    def record_image_prompt(self, prompt: str) -> None:
        self._advance(PageStage.PROMPT_DERIVED)
        self.image_prompt = prompt

    def record_image(self, local_path: Path) -> None:
        self._advance(PageStage.IMAGE_RENDERED)
        self.local_image_path = local_path

    def record_publication(self, url: str) -> None:
        self._advance(PageStage.PUBLISHED)
        self.public_image_url = url

    @property
    def is_published(self) -> bool:
        return self.stage is PageStage.PUBLISHED

    def _advance(self, target: PageStage) -> None:
        if target != self.stage + 1:
            raise RuntimeError(
                f"Page {self.id} cannot move from {self.stage.name} to {target.name}."
            )
        self.stage = target

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "paragraph_text": self.paragraph_text,
            "illustration_brief": self.illustration_brief,
            "image_prompt": self.image_prompt,
            "local_image_path": str(self.local_image_path) if self.local_image_path else None,
            "public_image_url": self.public_image_url,
            "stage": self.stage.name.lower(),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Page":
        try:
            paragraph_text = str(payload["paragraph_text"]).strip()
            stage = PageStage[str(payload.get("stage", "text_only")).upper()]
            page_id = uuid.UUID(str(payload["id"])) if payload.get("id") else uuid.uuid4()
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Invalid page entry: {payload}") from exc

        local_path = payload.get("local_image_path")
        return cls(
            paragraph_text=paragraph_text,
            id=page_id,
            illustration_brief=payload.get("illustration_brief"),
            image_prompt=payload.get("image_prompt"),
            local_image_path=Path(local_path) if local_path else None,
            public_image_url=payload.get("public_image_url"),
            stage=stage,
        )


@dataclass
class Story:
    """
    Aggregated state of one storybook run.

    ``pages`` is allocated once, one slot per paragraph, before any enrichment
    starts; worker ``i`` only ever touches ``pages[i]``.
    """

    synopsis: Synopsis
    cover_image_url: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    narrative_text: str = ""
    paragraphs: list[str] = field(default_factory=list)
    pages: list[Page] = field(default_factory=list)
    title: str = DEFAULT_TITLE
    title_ready: bool = False
    cover_ready: bool = False

    def record_narrative(self, narrative_text: str) -> None:
        """
        Store the narrative, segment it into paragraphs, and allocate page slots.
        """
        if self.paragraphs:
            raise RuntimeError(f"Story {self.id} already has paragraphs.")
        self.narrative_text = narrative_text
        self.paragraphs = extract_paragraphs(narrative_text)
        self.allocate_pages()

    def allocate_pages(self) -> None:
        self.pages = [Page(paragraph_text=paragraph) for paragraph in self.paragraphs]

    def record_title(self, title: str) -> None:
        self.title = title
        self.title_ready = True

    def record_cover(self, url: str) -> None:
        self.cover_image_url = url
        self.cover_ready = True

    @property
    def is_complete(self) -> bool:
        return (
            self.title_ready
            and self.cover_ready
            and len(self.pages) == len(self.paragraphs)
            and all(page.is_published for page in self.pages)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "synopsis": self.synopsis.as_dict(),
            "title": self.title,
            "title_ready": self.title_ready,
            "cover_image_url": self.cover_image_url,
            "cover_ready": self.cover_ready,
            "narrative_text": self.narrative_text,
            "pages": [page.to_dict() for page in self.pages],
        }

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, allow_unicode=True)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Story":
        if "synopsis" not in payload:
            raise ValueError("Story payload must include 'synopsis'.")
        if "cover_image_url" not in payload:
            raise ValueError("Story payload must include 'cover_image_url'.")

        narrative_text = str(payload.get("narrative_text", ""))
        pages = [Page.from_dict(entry) for entry in payload.get("pages", [])]
        paragraphs = extract_paragraphs(narrative_text)
        if len(pages) != len(paragraphs):
            raise ValueError(
                f"Story payload has {len(pages)} pages for {len(paragraphs)} paragraphs."
            )

        return cls(
            synopsis=Synopsis.from_mapping(payload["synopsis"]),
            cover_image_url=str(payload["cover_image_url"]),
            id=uuid.UUID(str(payload["id"])) if payload.get("id") else uuid.uuid4(),
            narrative_text=narrative_text,
            paragraphs=paragraphs,
            pages=pages,
            title=str(payload.get("title") or DEFAULT_TITLE),
            title_ready=bool(payload.get("title_ready", False)),
            cover_ready=bool(payload.get("cover_ready", False)),
        )

    @classmethod
    def from_yaml(cls, source: str | Path) -> "Story":
        path = Path(source)
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        if not isinstance(data, Mapping):
            raise ValueError("Story package YAML must deserialize to a mapping.")
        return cls.from_dict(data)
