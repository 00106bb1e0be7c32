"""
Event Bus - Session event system for component communication.
Carries patient responses, talking-state changes and session resets
between the core and its external collaborators.
"""

import logging
import asyncio
from typing import Dict, List, Callable, Set
from collections import defaultdict

logger = logging.getLogger(__name__)

# Event names
PATIENT_RESPONSE = "patient_response"
TALKING_STATE_CHANGED = "talking_state_changed"
SPEECH_FAILED = "speech_failed"
MEMORY_RESET = "memory_reset"


class EventBus:
    """Event bus with async emit and a synchronous publish for timer callbacks."""

    def __init__(self):
        self.listeners: Dict[str, List[Callable]] = defaultdict(list)
        self.running = False
        self._pending: Set[asyncio.Task] = set()

    async def initialize(self):
        """Initialize the event bus."""
        self.running = True
        logger.info("Event bus initialized")

    def subscribe(self, event_name: str, callback: Callable):
        """Subscribe to an event."""
        self.listeners[event_name].append(callback)
        logger.debug(f"Subscribed to event: {event_name}")

    def unsubscribe(self, event_name: str, callback: Callable):
        """Unsubscribe from an event."""
        if callback in self.listeners[event_name]:
            self.listeners[event_name].remove(callback)
            logger.debug(f"Unsubscribed from event: {event_name}")

    async def emit(self, event_name: str, *args, **kwargs):
        """Emit an event to all listeners, awaiting coroutine listeners."""
        if not self.running:
            return

        listeners = list(self.listeners.get(event_name, []))
        if listeners:
            logger.debug(f"Emitting event: {event_name} to {len(listeners)} listeners")

            for callback in listeners:
                try:
                    if asyncio.iscoroutinefunction(callback):
                        await callback(*args, **kwargs)
                    else:
                        callback(*args, **kwargs)
                except Exception as e:
                    logger.error(f"Error in event listener for {event_name}: {e}")

    def publish(self, event_name: str, *args, **kwargs):
        """
        Deliver an event from synchronous code.

        Plain listeners run immediately. Coroutine listeners are scheduled on
        the running loop; without one they are skipped with a warning.
        """
        if not self.running:
            return

        for callback in list(self.listeners.get(event_name, [])):
            try:
                if asyncio.iscoroutinefunction(callback):
                    self._schedule(event_name, callback(*args, **kwargs))
                else:
                    callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in event listener for {event_name}: {e}")

    def _schedule(self, event_name: str, coro):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            logger.warning(f"No running loop for async listener of {event_name}; skipped")
            return

        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def shutdown(self):
        """Shutdown the event bus."""
        self.running = False
        for task in list(self._pending):
            task.cancel()
        self._pending.clear()
        self.listeners.clear()
        logger.info("Event bus shutdown")
