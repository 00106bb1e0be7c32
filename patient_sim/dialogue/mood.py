"""
Mood Classifier - Derives the patient's coarse emotional label from an answer.
"""

from enum import Enum
from typing import Tuple


class MoodLabel(str, Enum):
    """Coarse emotional state shown alongside a patient answer."""
    ANXIOUS = "anxious"
    WORRIED = "worried"
    FRUSTRATED = "frustrated"
    HOPEFUL = "hopeful"
    RELIEVED = "relieved"
    CONCERNED = "concerned"


INITIAL_MOOD = MoodLabel.ANXIOUS
DEFAULT_MOOD = MoodLabel.CONCERNED

# Checked in order; the first group with any cue present in the text wins.
MOOD_CUES: Tuple[Tuple[MoodLabel, Tuple[str, ...]], ...] = (
    (MoodLabel.HOPEFUL, ("hope", "relief", "better")),
    (MoodLabel.FRUSTRATED, ("frustrated", "embarrassed", "angry")),
    (MoodLabel.WORRIED, ("worried", "concerned", "scared")),
    (MoodLabel.RELIEVED, ("relieved", "thankful")),
    (MoodLabel.ANXIOUS, ("anxious", "nervous")),
)


def classify(answer_text: str) -> MoodLabel:
    """Return the mood implied by ``answer_text``, ``concerned`` when no cue is found."""
    text = (answer_text or "").lower()
    for mood, cues in MOOD_CUES:
        for cue in cues:
            if cue in text:
                return mood
    return DEFAULT_MOOD
