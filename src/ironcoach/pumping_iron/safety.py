"""
Weight Safety Limits

Internal Codename: PUMPING-IRON
Keeps propagated and progressed weights inside conservative bounds.

Every weight carried from one exercise to another passes through
clamp_weight():
- Relative band around the assessed weight (70%-115%)
- Absolute equipment bounds (these win over the relative band)
- Rounded to the nearest 2.5kg without crossing the bounds
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..biomechanics import Difficulty, EquipmentType, ExerciseDefinition
from ..diagnostics import SafetyClampApplied
from ..normalizer import find_exercise_definition

logger = logging.getLogger(__name__)


RELATIVE_CEILING = 1.15
RELATIVE_FLOOR = 0.70
PLATE_INCREMENT = 2.5  # kg
TOLERANCE = 1e-9     # float noise in products like 100 * 1.15

# (floor, ceiling) in kg; bodyweight means added load
EQUIPMENT_LIMITS: Dict[EquipmentType, Tuple[float, float]] = {
    EquipmentType.BARBELL: (20.0, 150.0),
    EquipmentType.DUMBBELL: (5.0, 40.0),
    EquipmentType.MACHINE: (10.0, 100.0),
    EquipmentType.BODYWEIGHT: (0.0, 50.0),
}

# Unmapped pairs lean toward underestimating
DEFAULT_ADJUSTMENT_FACTOR = 0.80

# Factors deliberately sit well below naive biomechanical ratios
EXERCISE_ADJUSTMENT_FACTORS: Dict[str, Dict[str, float]] = {
    'bench press': {
        'incline bench press': 0.85,
        'dumbbell bench press': 0.72,
        'incline dumbbell press': 0.70,
    },
    'overhead press': {
        'military press': 1.0,
        'dumbbell shoulder press': 0.72,
    },
    'squat': {
        'back squat': 1.0,
        'front squat': 0.80,
        'goblet squat': 0.70,
        'bulgarian split squat': 0.50,
        'leg press': 1.15,
    },
    'deadlift': {
        'romanian deadlift': 0.85,
        'sumo deadlift': 0.95,
        'hip thrust': 1.10,
    },
    'bent-over row': {
        'barbell row': 1.0,
        'dumbbell row': 0.72,
        'seated cable row': 1.10,
    },
}

# Names sharing another entry's factor row
EXERCISE_ALIASES = {
    'barbell bench press': 'bench press',
    'military press': 'overhead press',
    'back squat': 'squat',
    'barbell row': 'bent-over row',
}

EQUIPMENT_ADJUSTMENT_FACTORS: Dict[Tuple[EquipmentType, EquipmentType], float] = {
    (EquipmentType.BARBELL, EquipmentType.DUMBBELL): 0.72,
    (EquipmentType.MACHINE, EquipmentType.BARBELL): 0.80,
    (EquipmentType.MACHINE, EquipmentType.DUMBBELL): 0.80,
    (EquipmentType.BARBELL, EquipmentType.MACHINE): 1.10,
    (EquipmentType.DUMBBELL, EquipmentType.MACHINE): 1.10,
}

# Absolute ceilings (kg) for the major compound lifts
EXPERIENCE_LIMITS: Dict[str, Dict[Difficulty, float]] = {
    'bench press': {
        Difficulty.BEGINNER: 60.0,
        Difficulty.INTERMEDIATE: 100.0,
        Difficulty.ADVANCED: 140.0,
    },
    'squat': {
        Difficulty.BEGINNER: 80.0,
        Difficulty.INTERMEDIATE: 130.0,
        Difficulty.ADVANCED: 180.0,
    },
    'deadlift': {
        Difficulty.BEGINNER: 100.0,
        Difficulty.INTERMEDIATE: 160.0,
        Difficulty.ADVANCED: 220.0,
    },
    'overhead press': {
        Difficulty.BEGINNER: 40.0,
        Difficulty.INTERMEDIATE: 60.0,
        Difficulty.ADVANCED: 85.0,
    },
    'row': {
        Difficulty.BEGINNER: 60.0,
        Difficulty.INTERMEDIATE: 90.0,
        Difficulty.ADVANCED: 120.0,
    },
}

# Checked in order; the first keyword found in the name selects the row
EXPERIENCE_LIFT_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ('deadlift', 'deadlift'),
    ('squat', 'squat'),
    ('bench', 'bench press'),
    ('overhead press', 'overhead press'),
    ('military press', 'overhead press'),
    ('shoulder press', 'overhead press'),
    ('row', 'row'),
)


@dataclass(frozen=True)
class ClampResult:
    """A limited weight and the bounds that changed it."""
    weight: float
    notices: List[SafetyClampApplied] = field(default_factory=list)

    @property
    def was_clamped(self) -> bool:
        return bool(self.notices)


@dataclass(frozen=True)
class WeightAdjustment:
    """Weight carried from an assessed exercise onto another exercise."""
    from_exercise: str
    to_exercise: str
    assessed_weight: float
    factor: float
    raw_weight: float
    weight: float
    notices: List[SafetyClampApplied] = field(default_factory=list)


def _round_to_increment(weight: float) -> float:
    return math.floor(weight / PLATE_INCREMENT + 0.5) * PLATE_INCREMENT


def _floor_to_increment(weight: float) -> float:
    return math.floor(weight / PLATE_INCREMENT + TOLERANCE) * PLATE_INCREMENT


def clamp_weight(
    adjusted_weight: float,
    original_weight: float,
    equipment_type: EquipmentType,
    exercise_name: Optional[str] = None
) -> ClampResult:
    """
    Clamp an adjusted weight to the relative band and equipment bounds.

    Args:
        adjusted_weight: Weight after the adjustment factor
        original_weight: Weight the user actually reported
        equipment_type: Equipment of the exercise receiving the weight
        exercise_name: Used in notices only

    Returns:
        ClampResult with the final weight and any SafetyClampApplied notices
    """
    equipment_floor, equipment_ceiling = EQUIPMENT_LIMITS[equipment_type]
    relative_ceiling = original_weight * RELATIVE_CEILING
    relative_floor = original_weight * RELATIVE_FLOOR

    # (rule, weight before the bound, bound)
    applied: List[Tuple[str, float, float]] = []
    weight = adjusted_weight

    if weight > relative_ceiling:
        applied.append(('relative_ceiling', weight, relative_ceiling))
        weight = relative_ceiling
    elif weight < relative_floor:
        applied.append(('relative_floor', weight, relative_floor))
        weight = relative_floor

    if weight > equipment_ceiling:
        applied.append(('equipment_ceiling', weight, equipment_ceiling))
        weight = equipment_ceiling
    elif weight < equipment_floor:
        applied.append(('equipment_floor', weight, equipment_floor))
        weight = equipment_floor

    upper = min(relative_ceiling, equipment_ceiling)
    rounded = _round_to_increment(weight)
    if rounded > upper + TOLERANCE:
        rounded = _floor_to_increment(upper)
    rounded = max(rounded, equipment_floor)

    notices = [
        SafetyClampApplied(
            rule=rule,
            requested_weight=before,
            limited_weight=rounded,
            limit=limit,
            exercise_name=exercise_name,
            context={'equipment_type': equipment_type.value, 'original_weight': original_weight},
        )
        for rule, before, limit in applied
    ]
    for notice in notices:
        logger.info(notice.message)

    return ClampResult(weight=rounded, notices=notices)


def apply_safety_limits(
    adjusted_weight: float,
    original_weight: float,
    equipment_type: EquipmentType
) -> float:
    """
    Limit an adjusted weight to safe bounds.

    Args:
        adjusted_weight: Weight after the adjustment factor
        original_weight: Weight the user actually reported
        equipment_type: Equipment of the exercise receiving the weight

    Returns:
        Safe weight in kg, a multiple of 2.5
    """
    return clamp_weight(adjusted_weight, original_weight, equipment_type).weight


def _factor_row_key(exercise_name: str) -> str:
    name = exercise_name.strip().lower()
    definition = find_exercise_definition(exercise_name)
    if name not in EXERCISE_ADJUSTMENT_FACTORS and name not in EXERCISE_ALIASES and definition:
        name = definition.name.lower()
    return EXERCISE_ALIASES.get(name, name)


def get_adjustment_factor(
    from_exercise: str,
    to_exercise: str,
    to_definition: Optional[ExerciseDefinition] = None
) -> float:
    """
    Multiplier applied when carrying a weight from one exercise to another.

    Resolution order: named exercise pair, equipment pair, default.

    Args:
        from_exercise: Assessed exercise name
        to_exercise: Target exercise name
        to_definition: Target exercise definition, if already resolved

    Returns:
        Adjustment factor
    """
    row = EXERCISE_ADJUSTMENT_FACTORS.get(_factor_row_key(from_exercise), {})
    target = to_exercise.strip().lower()
    if target in row:
        return row[target]
    if to_definition is not None and to_definition.name.lower() in row:
        return row[to_definition.name.lower()]

    from_definition = find_exercise_definition(from_exercise)
    if to_definition is None:
        to_definition = find_exercise_definition(to_exercise)
    if from_definition is not None and to_definition is not None:
        pair = (from_definition.equipment_type, to_definition.equipment_type)
        if pair in EQUIPMENT_ADJUSTMENT_FACTORS:
            return EQUIPMENT_ADJUSTMENT_FACTORS[pair]

    return DEFAULT_ADJUSTMENT_FACTOR


def _clamp_equipment(
    from_exercise: str,
    to_definition: Optional[ExerciseDefinition]
) -> EquipmentType:
    """
    Equipment whose absolute bounds apply to the carried weight.

    A bodyweight target carried from a loaded lift is an equivalent total
    load rather than added plates, so it keeps the assessed lift's bounds.
    """
    from_definition = find_exercise_definition(from_exercise)
    if to_definition is None:
        return from_definition.equipment_type if from_definition else EquipmentType.DUMBBELL
    if (
        to_definition.equipment_type == EquipmentType.BODYWEIGHT
        and from_definition is not None
        and from_definition.equipment_type != EquipmentType.BODYWEIGHT
    ):
        return from_definition.equipment_type
    return to_definition.equipment_type


def adjust_weight(
    assessed_weight: float,
    from_exercise: str,
    to_exercise: str,
    to_definition: Optional[ExerciseDefinition] = None
) -> WeightAdjustment:
    """
    Carry an assessed weight onto another exercise, with diagnostics.

    Args:
        assessed_weight: Weight the user reported for from_exercise (kg)
        from_exercise: Assessed exercise name
        to_exercise: Target exercise name
        to_definition: Target exercise definition

    Returns:
        WeightAdjustment
    """
    if from_exercise.strip().lower() == to_exercise.strip().lower():
        return WeightAdjustment(
            from_exercise=from_exercise,
            to_exercise=to_exercise,
            assessed_weight=assessed_weight,
            factor=1.0,
            raw_weight=assessed_weight,
            weight=assessed_weight,
        )

    factor = get_adjustment_factor(from_exercise, to_exercise, to_definition)
    raw_weight = assessed_weight * factor
    equipment = _clamp_equipment(from_exercise, to_definition)
    result = clamp_weight(raw_weight, assessed_weight, equipment, exercise_name=to_exercise)

    logger.debug(
        f"Adjusted {from_exercise} {assessed_weight:g}kg -> {to_exercise} "
        f"{result.weight:g}kg (factor {factor:.2f})"
    )

    return WeightAdjustment(
        from_exercise=from_exercise,
        to_exercise=to_exercise,
        assessed_weight=assessed_weight,
        factor=factor,
        raw_weight=raw_weight,
        weight=result.weight,
        notices=result.notices,
    )


def adjust_weight_for_exercise(
    assessed_weight: float,
    from_exercise: str,
    to_exercise: str,
    to_definition: Optional[ExerciseDefinition] = None
) -> float:
    """
    Carry an assessed weight onto another exercise.

    Identity when both names match (case-insensitive); otherwise a
    conservative factor followed by the safety limits.

    Returns:
        Weight in kg
    """
    return adjust_weight(assessed_weight, from_exercise, to_exercise, to_definition).weight


def _experience_row(exercise_name: str) -> Optional[str]:
    name_lower = exercise_name.lower()
    for keyword, lift in EXPERIENCE_LIFT_KEYWORDS:
        if keyword in name_lower:
            return lift
    return None


def limit_for_experience(
    weight: float,
    experience: Difficulty,
    exercise_name: str
) -> ClampResult:
    """
    Cap a weight by the experience ceiling for major compound lifts.

    Never raises a weight. Exercises outside the table pass through.

    Args:
        weight: Proposed weight (kg)
        experience: Lifter's experience level
        exercise_name: Exercise name

    Returns:
        ClampResult
    """
    lift = _experience_row(exercise_name)
    if lift is None:
        return ClampResult(weight=weight)

    ceiling = EXPERIENCE_LIMITS[lift][experience]
    if weight <= ceiling:
        return ClampResult(weight=weight)

    notice = SafetyClampApplied(
        rule='experience_ceiling',
        requested_weight=weight,
        limited_weight=ceiling,
        limit=ceiling,
        exercise_name=exercise_name,
        context={'experience': experience.value, 'lift': lift},
    )
    logger.info(notice.message)
    return ClampResult(weight=ceiling, notices=[notice])


def apply_experience_limits(
    weight: float,
    experience: Difficulty,
    exercise_name: str
) -> float:
    """Cap a weight by the experience ceiling for its lift, if any."""
    return limit_for_experience(weight, experience, exercise_name).weight
