#!/usr/bin/env python3
"""
Knowledge base content and loader tests.
"""

import pytest

from patient_sim.dialogue.knowledge_base import (
    KnowledgeBaseError, KnowledgeEntry, MARIEM_KNOWLEDGE_BASE,
    get_categories, get_entries_by_category, load_knowledge_base,
)
from patient_sim.dialogue.mood import MoodLabel


def test_built_in_entries_are_valid():
    assert len(MARIEM_KNOWLEDGE_BASE) == 20
    for entry in MARIEM_KNOWLEDGE_BASE:
        assert entry.answer.strip()
        assert entry.keywords
        assert all(keyword == keyword.lower() for keyword in entry.keywords)


def test_categories_in_declaration_order():
    categories = get_categories()
    assert categories[:3] == ["personal", "main_problem", "symptoms"]
    assert categories[-1] == "greeting"
    assert len(get_entries_by_category("symptoms")) == 3
    assert get_entries_by_category("nonexistent") == []


def test_greeting_is_pinned_anxious():
    (greeting,) = get_entries_by_category("greeting")
    assert greeting.answer == "Hi doctor."
    assert greeting.mood is MoodLabel.ANXIOUS


def test_entry_validation():
    with pytest.raises(KnowledgeBaseError):
        KnowledgeEntry(question="q", answer="  ", category="c", keywords=("k",))
    with pytest.raises(KnowledgeBaseError):
        KnowledgeEntry(question="q", answer="a", category="c", keywords=())
    with pytest.raises(KnowledgeBaseError):
        KnowledgeEntry(question="q", answer="a", category="c", keywords=("k", ""))

    entry = KnowledgeEntry(question="q", answer="a", category="c", keywords=["k"])
    assert entry.keywords == ("k",)


def test_load_list_file(tmp_path):
    path = tmp_path / "kb.yaml"
    path.write_text(
        "- question: Do you smoke?\n"
        "  answer: No, never.\n"
        "  category: habits\n"
        "  keywords: [smoke, cigarettes]\n"
        "- question: Hello\n"
        "  answer: Hello doctor.\n"
        "  category: greeting\n"
        "  keywords: [hello]\n"
        "  mood: anxious\n"
    )

    entries = load_knowledge_base(path)
    assert [e.category for e in entries] == ["habits", "greeting"]
    assert entries[0].keywords == ("smoke", "cigarettes")
    assert entries[0].mood is None
    assert entries[1].mood is MoodLabel.ANXIOUS


def test_load_mapping_file(tmp_path):
    path = tmp_path / "kb.yaml"
    path.write_text(
        "entries:\n"
        "  - question: Any pets?\n"
        "    answer: A cat.\n"
        "    category: home\n"
        "    keywords: [pets]\n"
    )
    (entry,) = load_knowledge_base(str(path))
    assert entry.answer == "A cat."


@pytest.mark.parametrize("content", [
    "",
    "- just a string\n",
    "- question: q\n  answer: a\n  category: c\n",
    "- question: q\n  answer: a\n  category: c\n  keywords: single\n",
    "- question: q\n  answer: a\n  category: c\n  keywords: [k]\n  mood: ecstatic\n",
    "- question: q\n  answer: ''\n  category: c\n  keywords: [k]\n",
    "entries: [unclosed\n",
])
def test_malformed_files_are_rejected(tmp_path, content):
    path = tmp_path / "kb.yaml"
    path.write_text(content)
    with pytest.raises(KnowledgeBaseError):
        load_knowledge_base(path)


def test_missing_file(tmp_path):
    with pytest.raises(KnowledgeBaseError):
        load_knowledge_base(tmp_path / "absent.yaml")
