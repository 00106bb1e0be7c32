"""
Response Resolver - Picks the patient's answer for a doctor's free-text input.

Matching is deterministic and order-sensitive:

1. personal facts (name, age, residence, family, occupation)
2. first knowledge entry with a keyword contained in the input
3. first knowledge entry whose question contains, or is contained in, the input
4. a clarification request with topic ``unrecognized``
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .knowledge_base import KnowledgeEntry, MARIEM_KNOWLEDGE_BASE
from ..models.patient import PatientProfile, PersonalFact

logger = logging.getLogger(__name__)

UNRECOGNIZED_TOPIC = "unrecognized"
PERSONAL_TOPIC = "personal"

DEFAULT_ANSWER = (
    "I'm not sure I understand that question, doctor. Could you explain it differently? "
    "I want to make sure I give you the right information to help me."
)

FALLBACK_ANSWERS: Tuple[str, ...] = (
    DEFAULT_ANSWER,
    "I'm really not sure about that, doctor. I'm just so worried about my skin and I really need your help.",
    "I'm sorry, I don't understand. Could you explain that in simpler terms? I'm really anxious about all of this.",
    "I'm just so frustrated with this whole situation. I hope you can help me figure out what's going on.",
    "I'm really concerned about my skin condition. It's been affecting my life so much and I need answers.",
    "I'm not sure what you mean. I'm just a regular person dealing with these skin problems and I need your expertise.",
    "I'm really hoping you can help me understand this better. I'm so worried about what's happening to my skin.",
)

# Which phase produced a resolution
PHASE_PERSONAL = "personal"
PHASE_KEYWORD = "keyword"
PHASE_QUESTION = "question"
PHASE_DEFAULT = "default"


@dataclass(frozen=True)
class Resolution:
    """The answer chosen for one input."""
    answer: str
    topic: str
    phase: str = PHASE_DEFAULT
    entry: Optional[KnowledgeEntry] = None

    @property
    def matched(self) -> bool:
        return self.phase != PHASE_DEFAULT


def normalize(text: Optional[str]) -> str:
    """Lower-case and trim; no other cleanup."""
    return (text or "").strip().lower()


class ResponseResolver:
    """Resolves doctor input against personal facts and an ordered knowledge base."""

    def __init__(self,
                 knowledge_base: Sequence[KnowledgeEntry] = MARIEM_KNOWLEDGE_BASE,
                 profile: Optional[PatientProfile] = None,
                 rng=None):
        self.knowledge_base: Tuple[KnowledgeEntry, ...] = tuple(knowledge_base)
        self.profile = profile or PatientProfile()
        self.personal_facts: Tuple[PersonalFact, ...] = self.profile.personal_facts()
        # Anything with a ``choice`` method; None keeps the canonical fallback
        self.rng = rng

        logger.debug(f"Resolver ready with {len(self.knowledge_base)} entries for {self.profile.name}")

    def resolve(self, input_text: Optional[str]) -> Resolution:
        """Return the best answer for ``input_text``. Never raises."""
        question = normalize(input_text)
        if not question:
            return self._fallback()

        for fact in self.personal_facts:
            for cue in fact.cues:
                if cue in question:
                    logger.debug(f"Personal fact '{fact.topic}' matched cue: \"{cue}\"")
                    return Resolution(fact.answer, PERSONAL_TOPIC, PHASE_PERSONAL)

        for entry in self.knowledge_base:
            for keyword in entry.keywords:
                if keyword.lower() in question:
                    logger.debug(f"Found keyword match: \"{keyword}\" -> {entry.category}")
                    return Resolution(entry.answer, entry.category, PHASE_KEYWORD, entry)

        for entry in self.knowledge_base:
            entry_question = entry.question.strip().lower()
            if not entry_question:
                continue
            if entry_question in question or question in entry_question:
                logger.debug(f"Found question match: \"{entry.question}\"")
                return Resolution(entry.answer, entry.category, PHASE_QUESTION, entry)

        logger.debug(f"No match for input: \"{question}\"")
        return self._fallback()

    def _fallback(self) -> Resolution:
        answer = self.rng.choice(FALLBACK_ANSWERS) if self.rng is not None else DEFAULT_ANSWER
        return Resolution(answer, UNRECOGNIZED_TOPIC, PHASE_DEFAULT)
