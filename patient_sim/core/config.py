"""
Configuration management for the patient simulator.
Handles loading and validation of session settings.
"""

import os
from pathlib import Path
from typing import Dict, Any, Optional, List
from pydantic import BaseModel, Field
from dotenv import load_dotenv
import yaml

# Load environment variables
load_dotenv()

DEFAULT_CONFIG_FILE = "configs/config.yaml"


class PatientConfig(BaseModel):
    """Simulated patient persona."""
    name: str = "Mariem"
    age: int = Field(default=45, ge=0)
    residence: str = "United Arab Emirates"
    family_situation: str = "I live with my family, we are very close."
    occupation: str = "I work in an office."
    condition: str = "dry, itchy, red and inflamed skin on my arms and neck"
    traits: List[str] = [
        "anxious", "concerned", "frustrated", "hopeful", "genuine", "vulnerable"
    ]

    # Optional YAML knowledge base replacing the built-in one
    knowledge_file: Optional[str] = None

    # Pick randomly among fallback phrasings instead of the canonical one
    randomize_fallback: bool = False


class MemoryConfig(BaseModel):
    """Conversation memory limits."""
    capacity: int = Field(default=50, ge=1)


class TalkingConfig(BaseModel):
    """Talking-state smoothing and mouth motion settings (seconds)."""
    extend_window: float = Field(default=5.0, gt=0)
    hold_window: float = Field(default=3.0, gt=0)
    base_frequency: float = Field(default=8.0, gt=0)


class VoiceConfig(BaseModel):
    """Voice synthesis configuration."""
    tts_engine: str = "pyttsx3"  # pyttsx3, none
    tts_voice: str = "default"
    tts_rate: int = 180
    tts_volume: float = Field(default=0.9, ge=0.0, le=1.0)


class Config(BaseModel):
    """Main application configuration."""
    app_name: str = "Patient Simulator"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    # Component configurations
    patient: PatientConfig = Field(default_factory=PatientConfig)
    memory: MemoryConfig = Field(default_factory=MemoryConfig)
    talking: TalkingConfig = Field(default_factory=TalkingConfig)
    voice: VoiceConfig = Field(default_factory=VoiceConfig)


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries, values from ``override`` win."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            base[key] = deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _env_overrides() -> Dict[str, Any]:
    env_overrides: Dict[str, Any] = {}

    if os.getenv('PATIENT_SIM_LOG_LEVEL'):
        env_overrides['log_level'] = os.getenv('PATIENT_SIM_LOG_LEVEL')
    if os.getenv('PATIENT_SIM_DEBUG'):
        env_overrides['debug'] = _env_flag(os.getenv('PATIENT_SIM_DEBUG'))

    # Voice Configuration
    if os.getenv('PATIENT_SIM_TTS_ENGINE'):
        env_overrides.setdefault('voice', {})['tts_engine'] = os.getenv('PATIENT_SIM_TTS_ENGINE')

    return env_overrides


def load_config(config_file: Optional[str] = None) -> Config:
    """Load configuration from file or environment variables."""

    if config_file is None:
        config_file = DEFAULT_CONFIG_FILE

    config_path = Path(config_file)

    # Load from YAML if exists
    config_data: Dict[str, Any] = {}
    if config_path.exists() and config_path.suffix in ['.yaml', '.yml']:
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

    final_config = deep_merge(config_data, _env_overrides())

    return Config(**final_config)


def save_config(config: Config, config_file: str = DEFAULT_CONFIG_FILE):
    """Save configuration to YAML file."""
    config_path = Path(config_file)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    config_dict = config.model_dump(mode="json")

    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.dump(config_dict, f, default_flow_style=False, indent=2, sort_keys=False)
