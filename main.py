#!/usr/bin/env python3
"""
Patient Simulator - Console entry point
Interview a simulated patient from the terminal for clinical-interview training.

Commands:
- /history  show the recent conversation
- /reset    clear the session memory
- /quit     end the session

Python: 3.10+
"""

import sys
import argparse
import asyncio
import logging
from pathlib import Path
from typing import Optional

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from patient_sim.core.config import Config, load_config
from patient_sim.core.event_bus import SPEECH_FAILED
from patient_sim.core.session import PatientSession
from patient_sim.utils.logger import setup_logging

logger = logging.getLogger(__name__)


def check_python_version():
    """Ensure compatible Python version."""
    if sys.version_info < (3, 10):
        print("Python 3.10 or higher is required!")
        print(f"Current version: {sys.version}")
        sys.exit(1)


def build_session(config: Config) -> PatientSession:
    """Create a session and attach the configured voice."""
    session = PatientSession(config)

    if config.voice.tts_engine == "pyttsx3":
        try:
            from patient_sim.voice.synthesis import LocalVoiceSynthesis
            session.speech = LocalVoiceSynthesis(config.voice, on_speaking_change=session.on_raw_speaking_change)
        except Exception as e:
            logger.warning(f"Local voice unavailable, continuing text-only: {e}")
    else:
        logger.info(f"Voice engine '{config.voice.tts_engine}' is text-only in the console")

    return session


async def run_console(session: PatientSession):
    """Read doctor input until /quit or EOF."""
    await session.start()
    session.event_bus.subscribe(SPEECH_FAILED, lambda answer, error: print(f"  (voice unavailable: {error})"))

    profile = session.profile
    print(f"Interviewing {profile.name}. {profile.describe()}")
    print("Type /history, /reset or /quit.\n")

    try:
        while True:
            try:
                text = await asyncio.to_thread(input, "Doctor> ")
            except EOFError:
                break

            command = text.strip().lower()
            if command in ("/quit", "/exit"):
                break
            if command == "/reset":
                session.reset_memory()
                print("Session cleared.\n")
                continue
            if command == "/history":
                print(session.memory.summary() + "\n")
                continue

            result = await session.handle_input(text)
            if result is None:
                continue
            print(f"{profile.name} [{result.mood.value}, {result.topic}]: {result.answer}\n")
    finally:
        await session.shutdown()


def main(argv: Optional[list] = None):
    """Main application entry point."""
    parser = argparse.ArgumentParser(description="Simulated patient for clinical-interview training")
    parser.add_argument("--config", default=None, help="YAML config file (default: configs/config.yaml)")
    parser.add_argument("--no-voice", action="store_true", help="Text only, skip speech synthesis")
    args = parser.parse_args(argv)

    check_python_version()

    config = load_config(args.config)
    if args.no_voice:
        config.voice.tts_engine = "none"

    setup_logging(config.log_level, str(config.log_dir), console=config.debug)
    logger.info(f"Starting {config.app_name} {config.version}")

    try:
        asyncio.run(run_console(build_session(config)))
    except KeyboardInterrupt:
        logger.info("Session interrupted by user")
        print("\nGoodbye!")
    except Exception as e:
        logger.error(f"Application error: {e}", exc_info=True)
        print(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
