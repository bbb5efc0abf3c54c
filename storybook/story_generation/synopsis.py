"""
The story premise collected from the user: who the story is about and what they want.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping


def _coerce_required_str(data: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = data.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    raise ValueError(f"Synopsis data must include a non-empty '{keys[0]}' field.")


@dataclass(frozen=True)
class Synopsis:
    """
    Canonical representation of the story seed.

    Attributes
    ----------
    subject:
        Kind of protagonist, e.g. ``"fox"``. Image prompts refer to the hero as
        "the <subject>" because image models cannot draw a proper name.
    name:
        The protagonist's proper name.
    goal:
        What the protagonist is trying to do, phrased to complete
        "<name> is trying to ...".
    """

    subject: str
    name: str
    goal: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Synopsis":
        """
        Build a synopsis from a dict-like object (e.g., parsed JSON/YAML).
        """
        return cls(
            subject=_coerce_required_str(data, "subject", "animal"),
            name=_coerce_required_str(data, "name"),
            goal=_coerce_required_str(data, "goal", "aspiration"),
        )

    def as_dict(self) -> dict[str, str]:
        return {"subject": self.subject, "name": self.name, "goal": self.goal}


def collect_synopsis(
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> Synopsis:
    """
    Interview the user for the three story seeds.
    """
    write("Hello! Welcome to story book. Let's write a story together.")
    write("Let's write a story about an animal.")
    write("What kind of Animal should we write about?\n")
    subject = _ask(read)

    write(f"\nAh! {subject}! That's perfect!")
    write(f"And what should we name this {subject}?\n")
    name = _ask(read)

    write(f"\nA {subject} named {name}. Interesting.")
    write(f"What are {name}'s aspirations? Finish the sentence:")
    write(f'"{name} is trying to..."\n')
    goal = _ask(read)

    write(f"\nOkay. {name} is trying to {goal}.\n")
    return Synopsis(subject=subject, name=name, goal=goal)


def _ask(read: Callable[[str], str]) -> str:
    while True:
        answer = read("").strip()
        if answer:
            return answer
