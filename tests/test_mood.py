#!/usr/bin/env python3
"""
Mood classifier tests.
"""

from patient_sim.dialogue.knowledge_base import get_entries_by_category
from patient_sim.dialogue.mood import MoodLabel, classify, INITIAL_MOOD


def test_hope_cues():
    assert classify("I'm really hoping for some relief") is MoodLabel.HOPEFUL
    assert classify("It feels BETTER today") is MoodLabel.HOPEFUL


def test_first_group_wins():
    # frustrated is checked before worried
    assert classify("I'm worried and frustrated") is MoodLabel.FRUSTRATED


def test_worried():
    assert classify("I'm scared it will spread") is MoodLabel.WORRIED


def test_relieved_is_not_taken_for_relief():
    assert classify("I'm so relieved, thank you") is MoodLabel.RELIEVED


def test_anxious():
    assert classify("I get nervous at appointments") is MoodLabel.ANXIOUS


def test_default_is_concerned():
    assert classify("Hi doctor.") is MoodLabel.CONCERNED
    assert classify("") is MoodLabel.CONCERNED


def test_sleep_answer_mood():
    sleep_answer = get_entries_by_category("sleep")[0].answer
    assert classify(sleep_answer) is MoodLabel.CONCERNED


def test_initial_mood():
    assert INITIAL_MOOD is MoodLabel.ANXIOUS
    assert MoodLabel("worried") is MoodLabel.WORRIED
