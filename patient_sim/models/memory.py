"""
Conversation Memory - Bounded log of the turns in one training session.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, Optional, Tuple

from ..dialogue.mood import MoodLabel, INITIAL_MOOD

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50

# Topics that count as the patient having described the complaint
SYMPTOM_TOPICS = frozenset({"main_problem", "symptoms"})


@dataclass(frozen=True)
class ConversationTurn:
    """One doctor input and the patient's reply."""
    user_text: str
    answer_text: str
    topic: str
    mood: MoodLabel
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_text': self.user_text,
            'answer_text': self.answer_text,
            'topic': self.topic,
            'mood': self.mood.value,
            'timestamp': self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class MemorySnapshot:
    """Read-only copy of the memory at one point in time."""
    turns: Tuple[ConversationTurn, ...]
    current_mood: MoodLabel
    has_shared_symptoms: bool
    capacity: int

    @property
    def topics(self) -> Tuple[str, ...]:
        return tuple(turn.topic for turn in self.turns)

    @property
    def last_interaction(self) -> Optional[datetime]:
        return self.turns[-1].timestamp if self.turns else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'turns': [turn.to_dict() for turn in self.turns],
            'current_mood': self.current_mood.value,
            'has_shared_symptoms': self.has_shared_symptoms,
            'capacity': self.capacity,
        }


class ConversationMemory:
    """FIFO-bounded turn log owned by a single session."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Memory capacity must be at least 1, got {capacity}")

        self.capacity = capacity
        self._turns: Deque[ConversationTurn] = deque(maxlen=capacity)
        self._current_mood: MoodLabel = INITIAL_MOOD
        self._has_shared_symptoms = False
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._turns)

    @property
    def current_mood(self) -> MoodLabel:
        return self._current_mood

    @property
    def has_shared_symptoms(self) -> bool:
        return self._has_shared_symptoms

    def append_turn(self, turn: ConversationTurn):
        """Record a turn; the oldest turn is dropped once capacity is reached."""
        with self._lock:
            if len(self._turns) == self.capacity:
                logger.debug(f"Memory full ({self.capacity}), evicting oldest turn")
            self._turns.append(turn)
            self._current_mood = turn.mood
            if turn.topic in SYMPTOM_TOPICS:
                self._has_shared_symptoms = True

    def reset(self):
        """Forget every turn and return to the initial mood."""
        with self._lock:
            self._turns.clear()
            self._current_mood = INITIAL_MOOD
            self._has_shared_symptoms = False
        logger.info("Conversation memory cleared")

    def snapshot(self) -> MemorySnapshot:
        with self._lock:
            return MemorySnapshot(
                turns=tuple(self._turns),
                current_mood=self._current_mood,
                has_shared_symptoms=self._has_shared_symptoms,
                capacity=self.capacity,
            )

    def summary(self, max_turns: int = 10) -> str:
        """Recent turns as ``Doctor:`` / ``Patient:`` lines."""
        turns = self.snapshot().turns
        if not turns:
            return "No conversation yet."

        lines = []
        for turn in turns[-max_turns:]:
            answer = turn.answer_text[:100] + "..." if len(turn.answer_text) > 100 else turn.answer_text
            lines.append(f"Doctor: {turn.user_text}")
            lines.append(f"Patient ({turn.mood.value}): {answer}")
        return "\n".join(lines)
