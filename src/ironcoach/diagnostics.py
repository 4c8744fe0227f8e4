"""
Diagnostics

Non-fatal outcomes returned alongside results. Nothing in the coaching core
raises for bad user input; callers receive one of these objects instead.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a user-entered weight/reps pair."""
    is_valid: bool
    message: Optional[str] = None
    suggested_weight: Optional[float] = None
    suggested_reps: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_valid': self.is_valid,
            'message': self.message,
            'suggested_weight': self.suggested_weight,
            'suggested_reps': self.suggested_reps,
        }


@dataclass(frozen=True)
class UnmappedExerciseWarning:
    """An exercise name had no entry in the taxonomy."""
    exercise_name: str
    inferred_category: str
    inferred_equipment: str
    message: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': 'unmapped_exercise',
            'exercise_name': self.exercise_name,
            'inferred_category': self.inferred_category,
            'inferred_equipment': self.inferred_equipment,
            'message': self.message,
        }


@dataclass(frozen=True)
class SafetyClampApplied:
    """
    A weight was reduced or raised by a safety bound.

    rule is one of: relative_ceiling, relative_floor, equipment_ceiling,
    equipment_floor, experience_ceiling.
    """
    rule: str
    requested_weight: float
    limited_weight: float
    limit: float
    exercise_name: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict)

    @property
    def message(self) -> str:
        direction = 'capped' if self.limited_weight < self.requested_weight else 'raised'
        target = f" for {self.exercise_name}" if self.exercise_name else ''
        return (
            f"Weight {direction} from {self.requested_weight:g}kg to "
            f"{self.limited_weight:g}kg{target} for safety ({self.rule.replace('_', ' ')})"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': 'safety_clamp',
            'rule': self.rule,
            'requested_weight': self.requested_weight,
            'limited_weight': self.limited_weight,
            'limit': self.limit,
            'exercise_name': self.exercise_name,
            'message': self.message,
        }
