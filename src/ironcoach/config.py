"""
Coach Configuration

Defaults for the command-line coach. Loads config/ironcoach.yaml if
available, then applies IRONCOACH_* environment overrides (a .env file is
honoured). The coaching functions never read configuration themselves.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv

from .biomechanics import Difficulty, EquipmentType, TrainingGoal

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / 'config' / 'ironcoach.yaml'

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def load_config_yaml(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from YAML file, return empty dict if not found."""
    config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if config_path.exists():
        with open(config_path) as f:
            loaded = yaml.safe_load(f)
        if loaded is None:
            return {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{config_path} must contain a mapping, got {type(loaded).__name__}")
        return loaded
    return {}


def _enum_value(enum_cls, value, setting: str):
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        valid = ', '.join(member.value for member in enum_cls)
        raise ValueError(f"Invalid {setting} '{value}' (expected one of: {valid})")


def _access_tags(value) -> Tuple[str, ...]:
    if isinstance(value, str):
        value = value.split(',')
    return tuple(tag.strip().lower() for tag in value if str(tag).strip())


@dataclass
class CoachConfig:
    """Lifter defaults and logging for the coach CLI.

    Loads from config/ironcoach.yaml if available, else uses defaults.
    """

    log_level: str = 'WARNING'

    # Lifter defaults
    goal: TrainingGoal = TrainingGoal.STRENGTH
    experience: Difficulty = Difficulty.BEGINNER
    equipment: EquipmentType = EquipmentType.BARBELL
    equipment_access: Tuple[str, ...] = field(default_factory=lambda: ('full-gym',))

    @classmethod
    def from_yaml(cls, config_path: Optional[Path] = None, use_env: bool = True) -> 'CoachConfig':
        """
        Load config from YAML file, then environment.

        Args:
            config_path: YAML file to read (default: config/ironcoach.yaml)
            use_env: Apply IRONCOACH_* overrides (and load .env)

        Raises:
            ValueError: On unknown goal/experience/equipment or log level
        """
        yaml_config = load_config_yaml(config_path)

        logging_section = yaml_config.get('logging') or {}
        lifter = yaml_config.get('lifter') or {}

        settings = {
            'log_level': logging_section.get('level', cls.log_level),
            'goal': lifter.get('goal', cls.goal.value),
            'experience': lifter.get('experience', cls.experience.value),
            'equipment': lifter.get('equipment', cls.equipment.value),
            'equipment_access': lifter.get('equipment_access', ['full-gym']),
        }

        if use_env:
            load_dotenv()
            settings['log_level'] = os.getenv('IRONCOACH_LOG_LEVEL', settings['log_level'])
            settings['goal'] = os.getenv('IRONCOACH_GOAL', settings['goal'])
            settings['experience'] = os.getenv('IRONCOACH_EXPERIENCE', settings['experience'])
            settings['equipment'] = os.getenv('IRONCOACH_EQUIPMENT', settings['equipment'])
            settings['equipment_access'] = os.getenv(
                'IRONCOACH_EQUIPMENT_ACCESS', settings['equipment_access']
            )

        log_level = str(settings['log_level']).upper()
        if log_level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level '{settings['log_level']}'")

        return cls(
            log_level=log_level,
            goal=_enum_value(TrainingGoal, settings['goal'], 'goal'),
            experience=_enum_value(Difficulty, settings['experience'], 'experience'),
            equipment=_enum_value(EquipmentType, settings['equipment'], 'equipment'),
            equipment_access=_access_tags(settings['equipment_access']),
        )
