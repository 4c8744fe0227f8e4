"""
Exercise Taxonomy

Defines movement categories, equipment types and the static exercise table
used to classify free-text exercise names.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple


class MovementCategory(Enum):
    """Biomechanical grouping used to decide substitutability."""
    HORIZONTAL_PUSH = "horizontal-push"
    VERTICAL_PUSH = "vertical-push"
    HORIZONTAL_PULL = "horizontal-pull"
    VERTICAL_PULL = "vertical-pull"
    KNEE_DOMINANT = "knee-dominant"    # Squat pattern
    HIP_DOMINANT = "hip-dominant"      # Hinge pattern
    SINGLE_LEG = "single-leg"
    ACCESSORY = "accessory"
    CORE = "core"


class EquipmentType(Enum):
    """Loading implement for an exercise."""
    BARBELL = "barbell"
    DUMBBELL = "dumbbell"
    MACHINE = "machine"
    BODYWEIGHT = "bodyweight"


class Difficulty(Enum):
    """Exercise difficulty, also used as the lifter's experience level."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class TrainingGoal(Enum):
    """Primary training adaptation."""
    STRENGTH = "strength"
    HYPERTROPHY = "hypertrophy"
    ENDURANCE = "endurance"


@dataclass(frozen=True)
class ExerciseDefinition:
    """Static classification of a single exercise."""
    name: str
    movement_category: MovementCategory
    equipment_type: EquipmentType
    primary_muscles: FrozenSet[str]
    is_compound: bool
    difficulty: Difficulty


def _exercise(
    name: str,
    category: MovementCategory,
    equipment: EquipmentType,
    muscles: Tuple[str, ...],
    is_compound: bool,
    difficulty: Difficulty
) -> ExerciseDefinition:
    return ExerciseDefinition(
        name=name,
        movement_category=category,
        equipment_type=equipment,
        primary_muscles=frozenset(muscles),
        is_compound=is_compound,
        difficulty=difficulty,
    )


_HPUSH = MovementCategory.HORIZONTAL_PUSH
_VPUSH = MovementCategory.VERTICAL_PUSH
_HPULL = MovementCategory.HORIZONTAL_PULL
_VPULL = MovementCategory.VERTICAL_PULL
_KNEE = MovementCategory.KNEE_DOMINANT
_HIP = MovementCategory.HIP_DOMINANT
_SINGLE = MovementCategory.SINGLE_LEG
_ACC = MovementCategory.ACCESSORY
_CORE = MovementCategory.CORE

_BB = EquipmentType.BARBELL
_DB = EquipmentType.DUMBBELL
_MC = EquipmentType.MACHINE
_BW = EquipmentType.BODYWEIGHT

_BEG = Difficulty.BEGINNER
_INT = Difficulty.INTERMEDIATE
_ADV = Difficulty.ADVANCED


# Order matters: fuzzy lookups resolve to the first matching entry.
EXERCISE_DATABASE: Tuple[ExerciseDefinition, ...] = (
    # Horizontal push
    _exercise("Bench Press", _HPUSH, _BB, ("chest", "triceps", "front-delts"), True, _INT),
    _exercise("Barbell Bench Press", _HPUSH, _BB, ("chest", "triceps", "front-delts"), True, _INT),
    _exercise("Dumbbell Bench Press", _HPUSH, _DB, ("chest", "triceps", "front-delts"), True, _INT),
    _exercise("Incline Bench Press", _HPUSH, _BB, ("upper-chest", "triceps", "front-delts"), True, _INT),
    _exercise("Incline Dumbbell Press", _HPUSH, _DB, ("upper-chest", "triceps", "front-delts"), True, _INT),
    _exercise("Push-up", _HPUSH, _BW, ("chest", "triceps", "front-delts"), True, _BEG),
    _exercise("Dips", _HPUSH, _BW, ("chest", "triceps", "front-delts"), True, _INT),

    # Vertical push
    _exercise("Overhead Press", _VPUSH, _BB, ("shoulders", "triceps", "core"), True, _INT),
    _exercise("Military Press", _VPUSH, _BB, ("shoulders", "triceps", "core"), True, _INT),
    _exercise("Dumbbell Shoulder Press", _VPUSH, _DB, ("shoulders", "triceps"), True, _BEG),
    _exercise("Pike Push-up", _VPUSH, _BW, ("shoulders", "triceps"), True, _INT),

    # Horizontal pull
    _exercise("Bent-over Row", _HPULL, _BB, ("lats", "rhomboids", "rear-delts", "biceps"), True, _INT),
    _exercise("Barbell Row", _HPULL, _BB, ("lats", "rhomboids", "rear-delts", "biceps"), True, _INT),
    _exercise("Dumbbell Row", _HPULL, _DB, ("lats", "rhomboids", "rear-delts", "biceps"), True, _BEG),
    _exercise("Seated Cable Row", _HPULL, _MC, ("lats", "rhomboids", "rear-delts", "biceps"), True, _BEG),

    # Vertical pull
    _exercise("Pull-up", _VPULL, _BW, ("lats", "rhomboids", "rear-delts", "biceps"), True, _ADV),
    _exercise("Chin-up", _VPULL, _BW, ("lats", "rhomboids", "biceps"), True, _ADV),
    _exercise("Lat Pulldown", _VPULL, _MC, ("lats", "rhomboids", "rear-delts", "biceps"), True, _BEG),
    _exercise("Assisted Pull-up", _VPULL, _MC, ("lats", "rhomboids", "rear-delts", "biceps"), True, _INT),

    # Knee dominant
    _exercise("Squat", _KNEE, _BB, ("quads", "glutes", "core"), True, _INT),
    _exercise("Back Squat", _KNEE, _BB, ("quads", "glutes", "core"), True, _INT),
    _exercise("Front Squat", _KNEE, _BB, ("quads", "core"), True, _ADV),
    _exercise("Goblet Squat", _KNEE, _DB, ("quads", "glutes", "core"), True, _BEG),
    _exercise("Bodyweight Squat", _KNEE, _BW, ("quads", "glutes"), True, _BEG),
    _exercise("Leg Press", _KNEE, _MC, ("quads", "glutes"), True, _BEG),

    # Hip dominant
    _exercise("Deadlift", _HIP, _BB, ("hamstrings", "glutes", "erectors", "core"), True, _INT),
    _exercise("Romanian Deadlift", _HIP, _BB, ("hamstrings", "glutes", "erectors"), True, _INT),
    _exercise("Sumo Deadlift", _HIP, _BB, ("hamstrings", "glutes", "quads", "core"), True, _INT),
    _exercise("Hip Thrust", _HIP, _BB, ("glutes", "hamstrings"), True, _BEG),
    _exercise("Glute Bridge", _HIP, _BW, ("glutes", "hamstrings"), True, _BEG),

    # Single leg
    _exercise("Bulgarian Split Squat", _SINGLE, _BW, ("quads", "glutes"), True, _INT),
    _exercise("Walking Lunges", _SINGLE, _BW, ("quads", "glutes"), True, _BEG),
    _exercise("Step-ups", _SINGLE, _BW, ("quads", "glutes"), True, _BEG),
    _exercise("Single Leg RDL", _SINGLE, _BW, ("hamstrings", "glutes", "core"), True, _INT),

    # Accessory
    _exercise("Bicep Curls", _ACC, _DB, ("biceps",), False, _BEG),
    _exercise("Barbell Curls", _ACC, _BB, ("biceps",), False, _BEG),
    _exercise("Tricep Pushdowns", _ACC, _MC, ("triceps",), False, _BEG),
    _exercise("Lateral Raises", _ACC, _DB, ("side-delts",), False, _BEG),
    _exercise("Calf Raises", _ACC, _BW, ("calves",), False, _BEG),

    # Core
    _exercise("Plank", _CORE, _BW, ("core",), False, _BEG),
    _exercise("Dead Bug", _CORE, _BW, ("core",), False, _BEG),
    _exercise("Russian Twists", _CORE, _BW, ("obliques",), False, _BEG),
)


# Fundamental patterns first
PRIORITY_ORDER: Tuple[MovementCategory, ...] = (
    MovementCategory.KNEE_DOMINANT,
    MovementCategory.HIP_DOMINANT,
    MovementCategory.HORIZONTAL_PUSH,
    MovementCategory.VERTICAL_PUSH,
    MovementCategory.HORIZONTAL_PULL,
    MovementCategory.VERTICAL_PULL,
    MovementCategory.SINGLE_LEG,
    MovementCategory.ACCESSORY,
    MovementCategory.CORE,
)


# Keyword -> category, checked in order for names missing from the table
CATEGORY_KEYWORDS: Tuple[Tuple[str, MovementCategory], ...] = (
    ("split squat", MovementCategory.SINGLE_LEG),
    ("lunge", MovementCategory.SINGLE_LEG),
    ("step-up", MovementCategory.SINGLE_LEG),
    ("step up", MovementCategory.SINGLE_LEG),
    ("single leg", MovementCategory.SINGLE_LEG),
    ("squat", MovementCategory.KNEE_DOMINANT),
    ("leg press", MovementCategory.KNEE_DOMINANT),
    ("leg extension", MovementCategory.KNEE_DOMINANT),
    ("deadlift", MovementCategory.HIP_DOMINANT),
    ("rdl", MovementCategory.HIP_DOMINANT),
    ("hip thrust", MovementCategory.HIP_DOMINANT),
    ("bridge", MovementCategory.HIP_DOMINANT),
    ("good morning", MovementCategory.HIP_DOMINANT),
    ("swing", MovementCategory.HIP_DOMINANT),
    ("overhead", MovementCategory.VERTICAL_PUSH),
    ("shoulder press", MovementCategory.VERTICAL_PUSH),
    ("military", MovementCategory.VERTICAL_PUSH),
    ("pulldown", MovementCategory.VERTICAL_PULL),
    ("pull-up", MovementCategory.VERTICAL_PULL),
    ("pull up", MovementCategory.VERTICAL_PULL),
    ("pullup", MovementCategory.VERTICAL_PULL),
    ("chin", MovementCategory.VERTICAL_PULL),
    ("row", MovementCategory.HORIZONTAL_PULL),
    ("face pull", MovementCategory.HORIZONTAL_PULL),
    ("bench", MovementCategory.HORIZONTAL_PUSH),
    ("chest press", MovementCategory.HORIZONTAL_PUSH),
    ("push-up", MovementCategory.HORIZONTAL_PUSH),
    ("push up", MovementCategory.HORIZONTAL_PUSH),
    ("pushup", MovementCategory.HORIZONTAL_PUSH),
    ("dip", MovementCategory.HORIZONTAL_PUSH),
    ("fly", MovementCategory.HORIZONTAL_PUSH),
    ("plank", MovementCategory.CORE),
    ("crunch", MovementCategory.CORE),
    ("twist", MovementCategory.CORE),
    ("dead bug", MovementCategory.CORE),
    ("sit-up", MovementCategory.CORE),
    ("leg raise", MovementCategory.CORE),
)

EQUIPMENT_KEYWORDS: Tuple[Tuple[str, EquipmentType], ...] = (
    ("barbell", EquipmentType.BARBELL),
    ("dumbbell", EquipmentType.DUMBBELL),
    ("kettlebell", EquipmentType.DUMBBELL),
    ("goblet", EquipmentType.DUMBBELL),
    ("machine", EquipmentType.MACHINE),
    ("cable", EquipmentType.MACHINE),
    ("smith", EquipmentType.MACHINE),
    ("pulldown", EquipmentType.MACHINE),
    ("leg press", EquipmentType.MACHINE),
    ("bodyweight", EquipmentType.BODYWEIGHT),
    ("push-up", EquipmentType.BODYWEIGHT),
    ("pull-up", EquipmentType.BODYWEIGHT),
    ("plank", EquipmentType.BODYWEIGHT),
)


def get_exercises_by_category(category: MovementCategory) -> List[ExerciseDefinition]:
    """
    Get every table entry in a movement category, in table order.

    Args:
        category: MovementCategory enum

    Returns:
        List of ExerciseDefinition
    """
    return [ex for ex in EXERCISE_DATABASE if ex.movement_category == category]


def infer_movement_category(exercise_name: str) -> Optional[MovementCategory]:
    """
    Guess a movement category from keywords in an exercise name.

    Args:
        exercise_name: Free-text exercise name

    Returns:
        MovementCategory, or None when no keyword matches
    """
    name_lower = exercise_name.lower()
    for keyword, category in CATEGORY_KEYWORDS:
        if keyword in name_lower:
            return category
    return None


def infer_equipment_type(exercise_name: str) -> Optional[EquipmentType]:
    """Guess the equipment from keywords in an exercise name."""
    name_lower = exercise_name.lower()
    for keyword, equipment in EQUIPMENT_KEYWORDS:
        if keyword in name_lower:
            return equipment
    return None
