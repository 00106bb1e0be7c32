"""
Patient Profile - Biographical facts of the simulated patient.
Renders the scripted personal answers that take priority over the knowledge base.
"""

from dataclasses import dataclass
from typing import Tuple

from ..core.config import PatientConfig


@dataclass(frozen=True)
class PersonalFact:
    """A high-priority canned answer triggered by any of its cues."""
    topic: str
    cues: Tuple[str, ...]
    answer: str


@dataclass(frozen=True)
class PatientProfile:
    """Who the trainee is interviewing."""
    name: str = "Mariem"
    age: int = 45
    residence: str = "United Arab Emirates"
    family_situation: str = "I live with my family, we are very close."
    occupation: str = "I work in an office."
    condition: str = "dry, itchy, red and inflamed skin on my arms and neck"
    traits: Tuple[str, ...] = ("anxious", "concerned", "frustrated", "hopeful")

    @classmethod
    def from_config(cls, config: PatientConfig) -> 'PatientProfile':
        return cls(
            name=config.name,
            age=config.age,
            residence=config.residence,
            family_situation=config.family_situation,
            occupation=config.occupation,
            condition=config.condition,
            traits=tuple(config.traits),
        )

    def personal_facts(self) -> Tuple[PersonalFact, ...]:
        """Scripted personal answers in evaluation order."""
        return (
            PersonalFact("name", ("name", "call"), f"I'm {self.name}."),
            PersonalFact("age", ("how old", "your age", "years old"), f"I'm {self.age} years old."),
            PersonalFact(
                "residence",
                ("where do you live", "where are you from", "where you live", "reside"),
                f"I live in the {self.residence} with my family.",
            ),
            PersonalFact(
                "family",
                ("married", "husband", "wife", "children", "kids", "siblings"),
                self.family_situation,
            ),
            PersonalFact(
                "occupation",
                ("occupation", "for a living", "profession", "your career"),
                self.occupation,
            ),
        )

    def describe(self) -> str:
        """Short persona description for display and logs."""
        traits = ", ".join(self.traits[:-1])
        if len(self.traits) > 1:
            traits += f" and {self.traits[-1]}"
        elif self.traits:
            traits = self.traits[0]

        description = f"{self.name}, {self.age}, lives in the {self.residence} and has {self.condition}."
        if traits:
            description += f" Comes across as {traits}."
        return description
