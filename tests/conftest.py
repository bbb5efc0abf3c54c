import random
import threading
from pathlib import Path

import pytest

from storybook.ai_generation import ImageArtifact
from storybook.common import UpstreamCallFailure
from storybook.pipeline import StorybookOrchestrator, Story
from storybook.story_generation import Synopsis


FAKE_PNG = b"\x89PNG\r\n\x1a\nfake-image"
CLOSING_IMAGE_URL = "https://example.com/final.png"

NARRATIVE = (
    "Rosie the fox wakes up far from home.\n"
    "\n"
    "   Rosie climbs the second hill and sees the river.   \n"
    "Rosie follows the river back to her den.\n"
)


class FakeTextSynthesizer:
    """Answers each storybook prompt template with canned text."""

    def __init__(self, narrative=NARRATIVE, title_response='TITLE: "Rosie\'s Long Walk"'):
        self.narrative = narrative
        self.title_response = title_response
        self.prompts = []
        self._lock = threading.Lock()

    def complete(self, prompt, *, user_message=None):
        with self._lock:
            self.prompts.append(prompt)
        if prompt.startswith("Write me a short story"):
            return self.narrative
        if prompt.startswith("The following is an excerpt"):
            paragraph = prompt.split('\n\n"', 1)[1].rstrip('"')
            return f"A painting of this moment: {paragraph}"
        if prompt.startswith("Give me a potential title"):
            return self.title_response
        if prompt.startswith("briefly describe"):
            return "A small fox looking over a wide river valley at sunset."
        raise AssertionError(f"Unexpected prompt: {prompt!r}")


class FakeImageGenerator:
    """Returns one fake PNG per render, optionally failing on matching prompts."""

    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.calls = []
        self._lock = threading.Lock()

    def render(self, prompts, settings=None):
        with self._lock:
            self.calls.append(list(prompts))
        if self.fail_on and any(self.fail_on in prompt.text for prompt in prompts):
            raise UpstreamCallFailure("render failed", user_message="I messed this painting up. Sorry.")
        return [ImageArtifact(image_bytes=FAKE_PNG)]


class FakePublisher:
    def __init__(self):
        self.published = []
        self._lock = threading.Lock()

    def publish(self, local_path):
        local_path = Path(local_path)
        assert local_path.read_bytes() == FAKE_PNG
        with self._lock:
            self.published.append(local_path)
        return f"https://bucket.s3.us-east-1.amazonaws.com/STORYBOOK_{local_path.parent.name}_{local_path.name}"


@pytest.fixture(name="synopsis")
def synopsis_fixture():
    return Synopsis(subject="fox", name="Rosie", goal="find her way home")


@pytest.fixture(name="text_synthesizer")
def text_synthesizer_fixture():
    return FakeTextSynthesizer()


@pytest.fixture(name="image_generator")
def image_generator_fixture():
    return FakeImageGenerator()


@pytest.fixture(name="publisher")
def publisher_fixture():
    return FakePublisher()


@pytest.fixture(name="make_orchestrator")
def make_orchestrator_fixture(tmp_path, text_synthesizer, image_generator, publisher):
    """Build an orchestrator wired to the fakes with pacing disabled."""

    def factory(**overrides):
        options = dict(
            text_synthesizer=text_synthesizer,
            image_generator=image_generator,
            publisher=publisher,
            closing_image_url=CLOSING_IMAGE_URL,
            images_root=tmp_path / "images",
            pacing_range=(0.0, 0.0),
            rng=random.Random(7),
        )
        options.update(overrides)
        return StorybookOrchestrator(**options)

    return factory


@pytest.fixture(name="make_published_story")
def make_published_story_fixture(synopsis):
    """Build a fully enriched story without touching any service."""

    def factory(page_count=3, title="Rosie's Long Walk"):
        story = Story(synopsis=synopsis, cover_image_url=CLOSING_IMAGE_URL)
        story.record_narrative("\n".join(f"Paragraph number {i}." for i in range(page_count)))
        for index, page in enumerate(story.pages):
            page.record_brief(f"brief {index}")
            page.record_image_prompt(f"prompt {index}")
            page.record_image(Path(f"images/{story.id}/{index}.png"))
            page.record_publication(f"https://cdn.example.com/{index}.png")
        story.record_title(title)
        story.record_cover("https://cdn.example.com/cover.png")
        return story

    return factory
