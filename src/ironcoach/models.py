"""
Training State Models

Performance records, per-exercise progression state and the suggestions
computed from them. Persistence belongs to the caller; these objects only
convert to and from plain dictionaries.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from .diagnostics import SafetyClampApplied


class FormQuality(Enum):
    """Self-reported technique quality for a session."""
    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    POOR = "poor"

    @property
    def score(self) -> int:
        return FORM_QUALITY_SCORES[self]


FORM_QUALITY_SCORES = {
    FormQuality.EXCELLENT: 4,
    FormQuality.GOOD: 3,
    FormQuality.ACCEPTABLE: 2,
    FormQuality.POOR: 1,
}


class ProgressionType(Enum):
    """Axis a suggestion changes."""
    WEIGHT = "weight"
    REPS = "reps"
    SETS = "sets"
    REST = "rest"


class Confidence(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def _parse_enum(enum_cls, value, field_name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        valid = ', '.join(member.value for member in enum_cls)
        raise ValueError(f"Invalid {field_name} '{value}' (expected one of: {valid})")


def _parse_date(value) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


@dataclass(frozen=True)
class PerformanceRecord:
    """
    One tracked session of working sets for an exercise.

    completed is False when any prescribed set or rep was missed.
    """
    exercise_id: str
    date: date
    weight: float
    reps: int
    sets: int
    form_quality: FormQuality
    rpe: Optional[float] = None
    rest_seconds: int = 0
    was_progression: bool = False
    completed: bool = True
    notes: Optional[str] = None

    @property
    def is_failure(self) -> bool:
        """A session that was neither a progression nor completed."""
        return not self.was_progression and not self.completed

    def to_dict(self) -> Dict[str, Any]:
        return {
            'exercise_id': self.exercise_id,
            'date': self.date.isoformat(),
            'weight': self.weight,
            'reps': self.reps,
            'sets': self.sets,
            'rpe': self.rpe,
            'form_quality': self.form_quality.value,
            'rest_seconds': self.rest_seconds,
            'was_progression': self.was_progression,
            'completed': self.completed,
            'notes': self.notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PerformanceRecord':
        return cls(
            exercise_id=str(data['exercise_id']),
            date=_parse_date(data['date']),
            weight=float(data['weight']),
            reps=int(data['reps']),
            sets=int(data['sets']),
            rpe=float(data['rpe']) if data.get('rpe') is not None else None,
            form_quality=_parse_enum(FormQuality, data.get('form_quality', 'good'), 'form_quality'),
            rest_seconds=int(data.get('rest_seconds', 0)),
            was_progression=bool(data.get('was_progression', False)),
            completed=bool(data.get('completed', True)),
            notes=data.get('notes'),
        )


@dataclass(frozen=True)
class ProgressionRecord:
    """Append-only log entry for an applied change."""
    date: date
    type: ProgressionType
    from_value: Any
    to_value: Any
    reason: str
    successful: bool
    is_deload: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date.isoformat(),
            'type': self.type.value,
            'from_value': self.from_value,
            'to_value': self.to_value,
            'reason': self.reason,
            'successful': self.successful,
            'is_deload': self.is_deload,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProgressionRecord':
        return cls(
            date=_parse_date(data['date']),
            type=_parse_enum(ProgressionType, data['type'], 'type'),
            from_value=data.get('from_value'),
            to_value=data.get('to_value'),
            reason=data.get('reason', ''),
            successful=bool(data.get('successful', True)),
            is_deload=bool(data.get('is_deload', False)),
        )


@dataclass
class ProgressionSuggestion:
    """A recommended change, always explained."""
    type: ProgressionType
    current_value: Any
    suggested_value: Any
    reason: str
    confidence: Confidence
    implementation_notes: str
    notices: List[SafetyClampApplied] = field(default_factory=list)
    is_deload: bool = False   # Weight reduction, not a progression

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type.value,
            'current_value': self.current_value,
            'suggested_value': self.suggested_value,
            'reason': self.reason,
            'confidence': self.confidence.value,
            'implementation_notes': self.implementation_notes,
            'notices': [n.to_dict() for n in self.notices],
            'is_deload': self.is_deload,
        }


@dataclass
class ExerciseProgression:
    """
    Running progression state for one user/exercise pair.

    recent_performance is newest first. progression_history is append-only.
    started_on anchors the progression clock until the first applied change.
    """
    exercise_id: str
    exercise_name: str
    current_weight: float
    current_rep_range: str
    current_sets: int
    weeks_since_last_progression: int = 0
    total_sessions: int = 0
    successful_sessions: int = 0
    recent_performance: List[PerformanceRecord] = field(default_factory=list)
    progression_history: List[ProgressionRecord] = field(default_factory=list)
    last_progression_date: Optional[date] = None
    next_suggestion: Optional[ProgressionSuggestion] = None
    started_on: Optional[date] = None

    @property
    def success_rate(self) -> float:
        if self.total_sessions <= 0:
            return 0.0
        return self.successful_sessions / self.total_sessions

    def to_dict(self) -> Dict[str, Any]:
        return {
            'exercise_id': self.exercise_id,
            'exercise_name': self.exercise_name,
            'current_weight': self.current_weight,
            'current_rep_range': self.current_rep_range,
            'current_sets': self.current_sets,
            'weeks_since_last_progression': self.weeks_since_last_progression,
            'total_sessions': self.total_sessions,
            'successful_sessions': self.successful_sessions,
            'recent_performance': [r.to_dict() for r in self.recent_performance],
            'progression_history': [r.to_dict() for r in self.progression_history],
            'last_progression_date': (
                self.last_progression_date.isoformat() if self.last_progression_date else None
            ),
            'next_suggestion': self.next_suggestion.to_dict() if self.next_suggestion else None,
            'started_on': self.started_on.isoformat() if self.started_on else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExerciseProgression':
        """
        Build from a plain dictionary (e.g. a YAML or JSON document).

        Raises:
            ValueError: On unknown enum values or missing required keys
        """
        required = ('exercise_name', 'current_weight', 'current_rep_range', 'current_sets')
        missing = [key for key in required if key not in data]
        if missing:
            raise ValueError(f"Missing progression fields: {', '.join(missing)}")

        return cls(
            exercise_id=str(data.get('exercise_id', data['exercise_name'])),
            exercise_name=data['exercise_name'],
            current_weight=float(data['current_weight']),
            current_rep_range=str(data['current_rep_range']),
            current_sets=int(data['current_sets']),
            weeks_since_last_progression=int(data.get('weeks_since_last_progression', 0)),
            total_sessions=int(data.get('total_sessions', 0)),
            successful_sessions=int(data.get('successful_sessions', 0)),
            recent_performance=[
                PerformanceRecord.from_dict(r) for r in data.get('recent_performance') or []
            ],
            progression_history=[
                ProgressionRecord.from_dict(r) for r in data.get('progression_history') or []
            ],
            last_progression_date=_parse_date(data.get('last_progression_date')),
            started_on=_parse_date(data.get('started_on')),
        )
