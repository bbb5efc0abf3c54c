"""
Prompt templates for every text completion the storybook pipeline requests.
"""

from __future__ import annotations

from .synopsis import Synopsis


def build_story_prompt(synopsis: Synopsis) -> str:
    """
    Ask for the full narrative. Each paragraph later becomes one slide.
    """
    return (
        "Write me a short story in the style of a children's book about a "
        f"{synopsis.subject} named {synopsis.name}. {synopsis.name} is trying to "
        f"{synopsis.goal}. There should be a rising action, a climax, falling action, "
        "and a resolution. The story does not need to have a happy ending."
    )


def build_illustration_brief_prompt(synopsis: Synopsis, paragraph: str) -> str:
    """
    Ask for a two-sentence illustration idea for one paragraph.

    The protagonist's name is withheld from the answer so the brief stays
    something an image model can draw.
    """
    return f"""The following is an excerpt from a childrens story about a(n) {synopsis.subject} named
{synopsis.name} who is trying to {synopsis.goal}. Do not refer to {synopsis.name} by name. Given this excerpt write a brief
(two sentence max) description of an illustration that would go well with
this text.

"{paragraph}\""""


def build_title_prompt(synopsis: Synopsis, narrative_text: str) -> str:
    """
    Ask for a title in the strict ``TITLE: "<title>"`` format.
    """
    return f"""Give me a potential title for the following short story about {synopsis.name},
a {synopsis.subject} who is trying to {synopsis.goal}.
Do not give me a title with a subtitle. Format your response the following way:
TITLE: "[title goes here]"
"{narrative_text}\""""


def build_cover_concept_prompt(synopsis: Synopsis) -> str:
    return (
        "briefly describe a potential idea for the cover a childrens book about a "
        f"{synopsis.subject} named {synopsis.name} who is trying to {synopsis.goal}"
    )
