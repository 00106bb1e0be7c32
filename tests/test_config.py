#!/usr/bin/env python3
"""
Configuration loading tests.
"""

import pytest
import yaml
from pydantic import ValidationError

from patient_sim.core.config import Config, TalkingConfig, VoiceConfig, deep_merge, load_config, save_config

ENV_VARS = (
    'PATIENT_SIM_LOG_LEVEL', 'PATIENT_SIM_DEBUG', 'PATIENT_SIM_TTS_ENGINE',
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = Config()
    assert config.patient.name == "Mariem"
    assert config.patient.age == 45
    assert config.memory.capacity == 50
    assert config.talking.extend_window == 5.0
    assert config.talking.hold_window == 3.0
    assert config.talking.base_frequency == 8.0
    assert config.voice.tts_engine == "pyttsx3"


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(str(tmp_path / "absent.yaml"))
    assert config == Config()


def test_yaml_overrides_nested_values(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        'patient': {'name': "Layla", 'age': 30},
        'talking': {'hold_window': 1.5},
    }))

    config = load_config(str(path))
    assert config.patient.name == "Layla"
    assert config.patient.age == 30
    assert config.patient.residence == "United Arab Emirates"
    assert config.talking.hold_window == 1.5
    assert config.talking.extend_window == 5.0


def test_environment_wins_over_file(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({'log_level': "INFO", 'voice': {'tts_engine': "pyttsx3", 'tts_rate': 150}}))
    monkeypatch.setenv('PATIENT_SIM_LOG_LEVEL', "DEBUG")
    monkeypatch.setenv('PATIENT_SIM_DEBUG', "yes")
    monkeypatch.setenv('PATIENT_SIM_TTS_ENGINE', "none")

    config = load_config(str(path))
    assert config.log_level == "DEBUG"
    assert config.debug is True
    assert config.voice.tts_engine == "none"
    assert config.voice.tts_rate == 150


def test_voice_settings_are_all_consumed_locally():
    assert set(VoiceConfig.model_fields) == {"tts_engine", "tts_voice", "tts_rate", "tts_volume"}


def test_save_then_load(tmp_path):
    config = Config()
    config.patient.name = "Noor"
    config.memory.capacity = 10
    path = tmp_path / "nested" / "saved.yaml"

    save_config(config, str(path))

    assert load_config(str(path)) == config


def test_windows_must_be_positive():
    with pytest.raises(ValidationError):
        TalkingConfig(hold_window=0)
    with pytest.raises(ValidationError):
        Config(memory={'capacity': 0})


def test_deep_merge():
    merged = deep_merge({'a': {'b': 1, 'c': 2}, 'd': 1}, {'a': {'c': 3}})
    assert merged == {'a': {'b': 1, 'c': 3}, 'd': 1}
