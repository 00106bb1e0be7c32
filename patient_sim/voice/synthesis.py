"""
Voice Synthesis - Speech paths the session hands patient answers to.
Supports any async speak function (e.g. a cloud TTS client) and a local
pyttsx3 engine whose utterance callbacks drive the talking-state signal.
"""

import logging
import asyncio
import threading
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import pyttsx3

from ..core.config import VoiceConfig

logger = logging.getLogger(__name__)


class SpeechSynthesisFailure(Exception):
    """Raised by a speech path that could not voice the text."""


@dataclass(frozen=True)
class SpeechResult:
    success: bool
    error: Optional[str] = None


SpeakingCallback = Callable[[bool], None]


class CallableSpeech:
    """Adapts an async ``speak(text)`` function returning SpeechResult or bool."""

    def __init__(self, speak: Callable[[str], Awaitable], name: str = "external"):
        self._speak = speak
        self.name = name

    async def speak(self, text: str) -> SpeechResult:
        try:
            result = await self._speak(text)
        except Exception as e:
            raise SpeechSynthesisFailure(f"{self.name} speech failed: {e}") from e

        if isinstance(result, SpeechResult):
            return result
        return SpeechResult(success=bool(result), error=None if result else f"{self.name} speech failed")

    async def shutdown(self):
        pass


class LocalVoiceSynthesis:
    """Offline text-to-speech using pyttsx3."""

    def __init__(self, config: VoiceConfig, on_speaking_change: Optional[SpeakingCallback] = None):
        self.config = config
        self.on_speaking_change = on_speaking_change
        self.name = "pyttsx3"

        self.engine: Optional[pyttsx3.Engine] = None
        self.is_speaking = False
        self._lock = threading.Lock()

    def initialize(self):
        """Create and configure the pyttsx3 engine."""
        try:
            self.engine = pyttsx3.init()

            if self.config.tts_voice != "default":
                for voice in self.engine.getProperty('voices'):
                    if self.config.tts_voice.lower() in voice.name.lower():
                        self.engine.setProperty('voice', voice.id)
                        break

            self.engine.setProperty('rate', self.config.tts_rate)
            self.engine.setProperty('volume', self.config.tts_volume)

            self.engine.connect('started-utterance', self._on_start)
            self.engine.connect('finished-utterance', self._on_end)

            logger.info("pyttsx3 voice initialized")

        except Exception as e:
            logger.error(f"Failed to initialize pyttsx3: {e}")
            raise SpeechSynthesisFailure(f"pyttsx3 unavailable: {e}") from e

    def _set_speaking(self, speaking: bool):
        self.is_speaking = speaking
        if self.on_speaking_change:
            try:
                self.on_speaking_change(speaking)
            except Exception as e:
                logger.error(f"Error in speaking listener: {e}")

    def _on_start(self, name):
        self._set_speaking(True)

    def _on_end(self, name, completed):
        self._set_speaking(False)

    def _run_and_wait(self, text: str):
        with self._lock:
            self.engine.say(text)
            self.engine.runAndWait()

    async def speak(self, text: str) -> SpeechResult:
        """Speak ``text`` without blocking the event loop."""
        if not text.strip():
            return SpeechResult(success=False, error="Nothing to say")

        if self.engine is None:
            self.initialize()

        try:
            await asyncio.to_thread(self._run_and_wait, text)
            return SpeechResult(success=True)
        except Exception as e:
            self._set_speaking(False)
            logger.error(f"pyttsx3 playback error: {e}")
            raise SpeechSynthesisFailure(f"pyttsx3 playback failed: {e}") from e

    async def shutdown(self):
        if self.engine is not None:
            try:
                self.engine.stop()
            except Exception as e:
                logger.error(f"Error stopping pyttsx3: {e}")
            self.engine = None
