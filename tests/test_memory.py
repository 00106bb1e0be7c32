#!/usr/bin/env python3
"""
Conversation memory tests: capacity bound, FIFO eviction, reset and snapshots.
"""

import threading

import pytest

from patient_sim.dialogue.mood import MoodLabel
from patient_sim.models.memory import ConversationMemory, ConversationTurn


def _turn(i, topic="sleep", mood=MoodLabel.WORRIED):
    return ConversationTurn(user_text=f"question {i}", answer_text=f"answer {i}", topic=topic, mood=mood)


def test_new_memory_is_empty_and_anxious():
    memory = ConversationMemory()
    snapshot = memory.snapshot()
    assert snapshot.turns == ()
    assert snapshot.current_mood is MoodLabel.ANXIOUS
    assert snapshot.has_shared_symptoms is False
    assert snapshot.capacity == 50
    assert snapshot.last_interaction is None


def test_capacity_is_never_exceeded_and_oldest_go_first():
    memory = ConversationMemory()
    for i in range(120):
        memory.append_turn(_turn(i))

    turns = memory.snapshot().turns
    assert len(turns) == 50
    assert turns[0].user_text == "question 70"
    assert turns[-1].user_text == "question 119"


def test_current_mood_follows_last_turn():
    memory = ConversationMemory()
    memory.append_turn(_turn(1, mood=MoodLabel.FRUSTRATED))
    memory.append_turn(_turn(2, mood=MoodLabel.HOPEFUL))
    assert memory.current_mood is MoodLabel.HOPEFUL


def test_shared_symptoms_flag_is_sticky_until_reset():
    memory = ConversationMemory()
    memory.append_turn(_turn(1, topic="greeting"))
    assert not memory.has_shared_symptoms
    memory.append_turn(_turn(2, topic="symptoms"))
    memory.append_turn(_turn(3, topic="work"))
    assert memory.has_shared_symptoms


def test_reset_restores_initial_state():
    memory = ConversationMemory()
    for i in range(5):
        memory.append_turn(_turn(i, topic="main_problem", mood=MoodLabel.RELIEVED))

    memory.reset()

    snapshot = memory.snapshot()
    assert snapshot.turns == ()
    assert snapshot.current_mood is MoodLabel.ANXIOUS
    assert snapshot.has_shared_symptoms is False


def test_snapshot_is_a_copy():
    memory = ConversationMemory()
    memory.append_turn(_turn(1))
    snapshot = memory.snapshot()
    memory.append_turn(_turn(2))
    assert len(snapshot.turns) == 1
    assert snapshot.topics == ("sleep",)


def test_snapshot_to_dict():
    memory = ConversationMemory(capacity=3)
    memory.append_turn(_turn(1, topic="symptoms"))
    data = memory.snapshot().to_dict()
    assert data['current_mood'] == "worried"
    assert data['has_shared_symptoms'] is True
    assert data['turns'][0]['topic'] == "symptoms"
    assert data['capacity'] == 3


def test_invalid_capacity():
    with pytest.raises(ValueError):
        ConversationMemory(capacity=0)


def test_summary():
    memory = ConversationMemory()
    assert memory.summary() == "No conversation yet."
    memory.append_turn(_turn(1))
    assert memory.summary() == "Doctor: question 1\nPatient (worried): answer 1"


def test_concurrent_appends_respect_capacity():
    memory = ConversationMemory(capacity=50)

    def writer(offset):
        for i in range(100):
            memory.append_turn(_turn(offset + i))

    threads = [threading.Thread(target=writer, args=(n * 1000,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(memory) == 50
