"""
Knowledge Base - Canned question/answer entries for the simulated patient.
Entry order is the matching priority: earlier entries win ties.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import yaml

from .mood import MoodLabel

logger = logging.getLogger(__name__)


class KnowledgeBaseError(ValueError):
    """Raised when a knowledge base file or entry is malformed."""


@dataclass(frozen=True)
class KnowledgeEntry:
    """One answer the patient can give and the cues that trigger it."""
    question: str
    answer: str
    category: str
    keywords: Tuple[str, ...]
    mood: Optional[MoodLabel] = None  # overrides answer-text classification

    def __post_init__(self):
        if not self.answer or not self.answer.strip():
            raise KnowledgeBaseError(f"Entry '{self.question}' has an empty answer")
        # Accept any sequence but always store an immutable tuple
        object.__setattr__(self, 'keywords', tuple(self.keywords))
        if not self.keywords or not all(k and k.strip() for k in self.keywords):
            raise KnowledgeBaseError(f"Entry '{self.question}' needs at least one non-empty keyword")


MARIEM_KNOWLEDGE_BASE: Tuple[KnowledgeEntry, ...] = (
    # Personal information
    KnowledgeEntry(
        question="What's your name?",
        answer="I'm Mariem.",
        category="personal",
        keywords=("name", "call", "what's your name", "what is your name"),
    ),
    KnowledgeEntry(
        question="How old are you?",
        answer="I'm 45 years old.",
        category="personal",
        keywords=("age", "old", "how old", "years old"),
    ),
    KnowledgeEntry(
        question="Where do you live?",
        answer="I live in the United Arab Emirates with my family.",
        category="personal",
        keywords=("where", "live", "location", "uae", "emirates"),
    ),

    # Main problem
    KnowledgeEntry(
        question="What's your problem?",
        answer=(
            "Hi doctor, I'm Mariem. I've been dealing with some really frustrating skin issues for quite "
            "a while now. My skin gets so dry and itchy, and sometimes it's red and inflamed, especially "
            "on my arms and neck. It's been really bothering me and I'm not sure what's going on."
        ),
        category="main_problem",
        keywords=("problem", "issue", "what's wrong", "what brings you", "what is your problem"),
    ),

    # Symptom details
    KnowledgeEntry(
        question="When did this start?",
        answer=(
            "It started a few months ago, but it's been getting progressively worse. I've tried "
            "moisturizing, but it doesn't seem to help much. The itching gets really bad, especially at "
            "night. I'm really worried about this - it's affecting my sleep and I'm embarrassed to wear "
            "short sleeves."
        ),
        category="symptoms",
        keywords=(
            "when did this start", "when did symptoms start", "when symptoms started",
            "when did it start", "started", "begin",
        ),
    ),
    KnowledgeEntry(
        question="Can you describe your symptoms?",
        answer=(
            "My skin gets really dry, itchy, and sometimes it's red and inflamed, especially on my arms "
            "and neck. The itching gets really bad, especially at night. Sometimes I wake up scratching "
            "and I'm afraid I'm making it worse. It's really affecting my quality of life."
        ),
        category="symptoms",
        keywords=("describe symptoms", "symptoms", "what symptoms", "how does it look", "describe your skin"),
    ),
    KnowledgeEntry(
        question="How have your symptoms changed over time?",
        answer=(
            "It started a few months ago, but it's been getting progressively worse. At first it was "
            "just a little dry, but now it's constantly itchy and inflamed. I'm really worried about "
            "where this is heading if we don't figure out what's causing it."
        ),
        category="symptoms",
        keywords=("changed over time", "getting worse", "progression", "how has it changed", "worse"),
    ),

    # Family history
    KnowledgeEntry(
        question="Do you have any family members with allergies or asthma?",
        answer=(
            "Actually, yes. My mother has asthma. Do you think that could be related to what's happening "
            "with my skin? I'm really hoping this isn't something serious."
        ),
        category="family_history",
        keywords=("family", "allergies", "asthma", "mother", "family history", "anyone in your family"),
    ),

    # Previous experience
    KnowledgeEntry(
        question="Have you had similar skin issues before?",
        answer=(
            "I've had a few rashes before, but I never really thought about it as something long-term. "
            "This feels different though - it's more persistent and really uncomfortable. I'm so "
            "frustrated because nothing I try seems to help."
        ),
        category="previous_experience",
        keywords=("before", "similar", "previous", "had this before", "experienced this before", "past"),
    ),

    # Treatment attempts
    KnowledgeEntry(
        question="What have you tried so far to treat your symptoms?",
        answer=(
            "I've tried moisturizing, but it doesn't seem to help much. I've also tried some "
            "over-the-counter creams, but they only provide temporary relief. I'm really frustrated "
            "because I feel like I'm not getting anywhere with this."
        ),
        category="treatment",
        keywords=("tried", "what have you tried", "treatment attempts", "what did you try", "creams", "moisturizing"),
    ),

    # Impact on life
    KnowledgeEntry(
        question="How do these symptoms affect your daily life?",
        answer=(
            "The itching gets really bad, especially at night, and it's been bothering me a lot. I can't "
            "sleep properly, I'm embarrassed to wear certain clothes, and I'm constantly worried about "
            "people noticing. It's really taking a toll on me emotionally."
        ),
        category="impact",
        keywords=("affect daily life", "daily life", "impact on life", "how does this affect", "daily activities"),
    ),

    # Sleep
    KnowledgeEntry(
        question="How does this affect your sleep?",
        answer=(
            "I wake up multiple times during the night because of the itching. Sometimes I scratch in my "
            "sleep and wake up with scratches. I'm exhausted during the day because I'm not getting "
            "proper rest. It's really affecting my daily life."
        ),
        category="sleep",
        keywords=("sleep", "night", "affect sleep", "sleep issues", "wake up"),
    ),

    # Clothing
    KnowledgeEntry(
        question="How does this affect your clothing choices?",
        answer=(
            "I avoid wearing short sleeves or anything that shows my arms and neck. I'm embarrassed "
            "about people seeing the redness and inflammation. I used to love wearing certain clothes, "
            "but now I feel like I have to cover up all the time."
        ),
        category="clothing",
        keywords=("clothing", "clothes", "what you wear", "clothing choices", "cover up"),
    ),

    # Emotional impact
    KnowledgeEntry(
        question="How has this affected you emotionally?",
        answer=(
            "It's been really hard on me. I feel self-conscious all the time, and the constant itching "
            "is driving me crazy. I'm worried about what people think when they see my skin, and I'm "
            "frustrated that I can't seem to fix it myself."
        ),
        category="emotional",
        keywords=("emotionally", "emotional impact", "how do you feel", "frustrated", "worried"),
    ),

    # Treatment concerns
    KnowledgeEntry(
        question="What are your concerns about treatment options?",
        answer=(
            "I've heard about corticosteroids, but I'm a bit concerned about using them too much. Are "
            "they safe for long-term use? I'm worried about side effects, but I'm also desperate for "
            "some relief from this itching."
        ),
        category="treatment_concerns",
        keywords=("treatment concerns", "treatment options", "concerns about treatment", "steroids", "side effects"),
    ),

    # Long-term outlook
    KnowledgeEntry(
        question="What are your concerns about the long-term nature of this condition?",
        answer=(
            "Will this condition go away, or is it something I'll have to manage long-term? I'm really "
            "hoping this isn't something I'll have to deal with forever. It's been so hard on me "
            "emotionally."
        ),
        category="long_term",
        keywords=("long term", "forever", "permanent", "manage long term", "go away"),
    ),

    # Hope for relief
    KnowledgeEntry(
        question="What are you hoping to get from this visit?",
        answer=(
            "I'm really hoping you can help me figure out what's causing this and give me some relief. "
            "I want to be able to sleep through the night without itching, and I want to feel confident "
            "about my skin again. I'm desperate for some answers."
        ),
        category="hope",
        keywords=("hoping", "hope for relief", "what do you hope", "what are you hoping", "relief"),
    ),

    # Work
    KnowledgeEntry(
        question="How does this affect your work?",
        answer=(
            "I work in an office, but this skin problem is making it difficult to focus sometimes because "
            "of the itching. I'm constantly distracted and worried about people noticing my skin condition."
        ),
        category="work",
        keywords=("work", "job", "office", "focus", "distracted"),
    ),

    # Triggers
    KnowledgeEntry(
        question="What makes your symptoms worse?",
        answer=(
            "I notice it gets worse when I'm stressed, and sometimes certain fabrics make it itch more. "
            "Temperature changes seem to affect it too. I've tried to avoid wool and synthetic fabrics, "
            "but it doesn't seem to make much difference."
        ),
        category="triggers",
        keywords=("worse", "triggers", "what makes it worse", "stress", "fabrics"),
    ),

    # Greeting. Kept last: "hi" is a substring of many words ("this", "which"),
    # so it only answers input that nothing above claimed.
    KnowledgeEntry(
        question="Hello",
        answer="Hi doctor.",
        category="greeting",
        keywords=("hello", "hey", "hi"),
        mood=MoodLabel.ANXIOUS,
    ),
)


def get_entries_by_category(category: str,
                            entries: Sequence[KnowledgeEntry] = MARIEM_KNOWLEDGE_BASE) -> List[KnowledgeEntry]:
    """All entries of ``category`` in declaration order."""
    return [entry for entry in entries if entry.category == category]


def get_categories(entries: Sequence[KnowledgeEntry] = MARIEM_KNOWLEDGE_BASE) -> List[str]:
    """Distinct categories in first-seen order."""
    return list(dict.fromkeys(entry.category for entry in entries))


def _entry_from_dict(index: int, data: Dict[str, Any]) -> KnowledgeEntry:
    if not isinstance(data, dict):
        raise KnowledgeBaseError(f"Entry #{index} must be a mapping, got {type(data).__name__}")

    missing = [key for key in ('question', 'answer', 'category', 'keywords') if key not in data]
    if missing:
        raise KnowledgeBaseError(f"Entry #{index} is missing {', '.join(missing)}")

    keywords = data['keywords']
    if isinstance(keywords, str) or not isinstance(keywords, (list, tuple)):
        raise KnowledgeBaseError(f"Entry #{index} keywords must be a list")

    mood = data.get('mood')
    try:
        mood = MoodLabel(mood) if mood else None
    except ValueError:
        raise KnowledgeBaseError(f"Entry #{index} has unknown mood '{mood}'") from None

    return KnowledgeEntry(
        question=str(data['question']),
        answer=str(data['answer']),
        category=str(data['category']),
        keywords=tuple(str(k) for k in keywords),
        mood=mood,
    )


def load_knowledge_base(path: Union[str, Path]) -> Tuple[KnowledgeEntry, ...]:
    """
    Load an ordered knowledge base from a YAML file.

    The file holds either a list of entries or a mapping with an ``entries``
    list. Order in the file is matching priority.
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise KnowledgeBaseError(f"Could not read knowledge base {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get('entries')
    if not isinstance(data, list) or not data:
        raise KnowledgeBaseError(f"Knowledge base {path} has no entries")

    entries = tuple(_entry_from_dict(i, item) for i, item in enumerate(data))
    logger.info(f"Loaded {len(entries)} knowledge entries from {path}")
    return entries
