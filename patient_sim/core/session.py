"""
Patient Session - Runs one clinical-interview training session.

Resolves the doctor's input, tracks the patient's mood in conversation
memory, hands the answer to speech, and exposes the stabilized talking
signal the avatar renderer animates from.
"""

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from .config import Config
from .event_bus import EventBus, PATIENT_RESPONSE, TALKING_STATE_CHANGED, SPEECH_FAILED, MEMORY_RESET
from ..animation.talking_state import TalkingStateSynchronizer
from ..dialogue.knowledge_base import KnowledgeEntry, MARIEM_KNOWLEDGE_BASE, load_knowledge_base
from ..dialogue.mood import MoodLabel, classify
from ..dialogue.resolver import Resolution, ResponseResolver
from ..models.memory import ConversationMemory, ConversationTurn, MemorySnapshot
from ..models.patient import PatientProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnResult:
    """Outcome of one doctor input."""
    answer: str
    topic: str
    mood: MoodLabel
    spoken: bool
    speech_error: Optional[str] = None
    turn: Optional[ConversationTurn] = None


class PatientSession:
    """Composes resolver, mood, memory, speech and talking state for one session."""

    def __init__(self,
                 config: Optional[Config] = None,
                 knowledge_base: Optional[Sequence[KnowledgeEntry]] = None,
                 speech=None,
                 fallback_speech=None,
                 event_bus: Optional[EventBus] = None,
                 rng=None,
                 clock: Callable[[], float] = time.monotonic):
        self.config = config or Config()
        self.profile = PatientProfile.from_config(self.config.patient)

        if knowledge_base is None:
            if self.config.patient.knowledge_file:
                knowledge_base = load_knowledge_base(self.config.patient.knowledge_file)
            else:
                knowledge_base = MARIEM_KNOWLEDGE_BASE

        if rng is None and self.config.patient.randomize_fallback:
            rng = random.Random()

        self.resolver = ResponseResolver(knowledge_base, self.profile, rng)
        self.memory = ConversationMemory(self.config.memory.capacity)
        self.event_bus = event_bus or EventBus()
        self.talking = TalkingStateSynchronizer(
            extend_window=self.config.talking.extend_window,
            hold_window=self.config.talking.hold_window,
            base_frequency=self.config.talking.base_frequency,
            clock=clock,
            on_change=self._on_talking_change,
        )

        # Speech paths, tried in order
        self.speech = speech
        self.fallback_speech = fallback_speech

        self.error_count = 0
        self._loop: Optional[asyncio.AbstractEventLoop] = None

        logger.info(f"Patient session created for {self.profile.name} "
                    f"({len(self.resolver.knowledge_base)} knowledge entries)")

    async def start(self):
        """Enable events and let talking deadlines fire on the running loop."""
        self._loop = asyncio.get_running_loop()
        await self.event_bus.initialize()
        self.talking.attach_loop(self._loop)
        logger.info("Patient session started")

    # ------------------------------------------------------------------
    # Dialogue
    # ------------------------------------------------------------------

    def resolve(self, text: str) -> Resolution:
        return self.resolver.resolve(text)

    def classify(self, answer_text: str) -> MoodLabel:
        return classify(answer_text)

    def mood_for(self, resolution: Resolution) -> MoodLabel:
        """Pinned entry mood if any, otherwise the mood read from the answer."""
        if resolution.entry is not None and resolution.entry.mood is not None:
            return resolution.entry.mood
        return classify(resolution.answer)

    def append_turn(self, turn: ConversationTurn):
        self.memory.append_turn(turn)

    def reset_memory(self):
        self.memory.reset()
        self.event_bus.publish(MEMORY_RESET)

    def get_memory_snapshot(self) -> MemorySnapshot:
        return self.memory.snapshot()

    async def handle_input(self, text: str) -> Optional[TurnResult]:
        """Answer one doctor message. Blank input is ignored."""
        if not text or not text.strip():
            return None

        user_text = text.strip()
        resolution = self.resolve(user_text)
        mood = self.mood_for(resolution)

        turn = ConversationTurn(
            user_text=user_text,
            answer_text=resolution.answer,
            topic=resolution.topic,
            mood=mood,
        )
        self.append_turn(turn)
        logger.info(f"Doctor: {user_text!r} -> topic={resolution.topic} mood={mood.value}")

        await self.event_bus.emit(PATIENT_RESPONSE, resolution.answer, resolution.topic, mood)

        spoken, error = await self._speak(resolution.answer)
        if not spoken and error:
            await self.event_bus.emit(SPEECH_FAILED, resolution.answer, error)

        return TurnResult(
            answer=resolution.answer,
            topic=resolution.topic,
            mood=mood,
            spoken=spoken,
            speech_error=error,
            turn=turn,
        )

    async def _speak(self, text: str) -> Tuple[bool, Optional[str]]:
        """Try each speech path in turn; failure never aborts the turn."""
        error: Optional[str] = None

        for path in (self.speech, self.fallback_speech):
            if path is None:
                continue
            name = getattr(path, 'name', type(path).__name__)
            try:
                result = await path.speak(text)
                if result.success:
                    return True, None
                error = result.error or f"{name} speech failed"
            except Exception as e:
                error = str(e)
            self.error_count += 1
            logger.error(f"Speech failed with {name}: {error}")

        return False, error

    # ------------------------------------------------------------------
    # Talking state
    # ------------------------------------------------------------------

    def on_raw_speaking_change(self, speaking: bool, now: Optional[float] = None) -> bool:
        return self.talking.on_raw_speaking_change(speaking, now)

    def poll_talking(self, now: Optional[float] = None) -> bool:
        return self.talking.poll(now)

    def current_amplitude(self, t: float) -> float:
        return self.talking.current_amplitude(t)

    def _on_talking_change(self, speaking: bool):
        loop = self._loop
        if loop is not None and not loop.is_closed():
            # Speech engines report from their own threads
            loop.call_soon_threadsafe(self.event_bus.publish, TALKING_STATE_CHANGED, speaking)
        else:
            self.event_bus.publish(TALKING_STATE_CHANGED, speaking)

    async def shutdown(self):
        """Stop timers and speech paths."""
        self.talking.detach_loop()
        for path in (self.speech, self.fallback_speech):
            if path is not None and hasattr(path, 'shutdown'):
                try:
                    await path.shutdown()
                except Exception as e:
                    logger.error(f"Error shutting down speech: {e}")
        await self.event_bus.shutdown()
        self._loop = None
        logger.info("Patient session shutdown complete")
