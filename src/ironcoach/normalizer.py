"""
Exercise name matching.

Internal Codename: SKYNET-READER
Map messy, free-text exercise names onto the static exercise table.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from .biomechanics import (
    EXERCISE_DATABASE,
    Difficulty,
    EquipmentType,
    ExerciseDefinition,
    MovementCategory,
    infer_equipment_type,
    infer_movement_category,
)
from .diagnostics import UnmappedExerciseWarning

logger = logging.getLogger(__name__)


def normalize_exercise_name_for_matching(name: str) -> str:
    """
    Normalize exercise name for matching against the exercise table.

    Steps:
    - Remove parentheticals and weight indicators
    - Lowercase
    - Collapse whitespace
    - Strip leading/trailing punctuation
    """
    # Remove parentheticals (includes schemes like "(5x5)" and "(each side)")
    name = re.sub(r'\([^)]*\)', '', name)

    # Remove weight indicators
    name = re.sub(r'\d+(\.\d+)?\s*(lb|kg|lbs|kgs)\b', '', name, flags=re.IGNORECASE)

    name = name.lower()

    # Remove leading/trailing special chars
    name = re.sub(r'^[\W_]+|[\W_]+$', '', name)

    # Replace multiple spaces/underscores with single space
    name = re.sub(r'[\s_]+', ' ', name)

    return name.strip()


def find_exercise_definition(exercise_name: str) -> Optional[ExerciseDefinition]:
    """
    Look up an exercise in the table.

    Exact (case-insensitive) match first, then substring containment in
    either direction. When several entries contain the name, the first in
    table order wins; that is not guaranteed to be the closest match.

    Returns:
        ExerciseDefinition if found, None otherwise
    """
    normalized = normalize_exercise_name_for_matching(exercise_name or '')
    if not normalized:
        return None

    # Direct match
    for exercise in EXERCISE_DATABASE:
        if exercise.name.lower() == normalized:
            return exercise

    # Partial match
    for exercise in EXERCISE_DATABASE:
        candidate = exercise.name.lower()
        if candidate in normalized or normalized in candidate:
            return exercise

    return None


@dataclass(frozen=True)
class ResolvedExercise:
    """A definition for any exercise name, plus a warning when it was guessed."""
    definition: ExerciseDefinition
    warning: Optional[UnmappedExerciseWarning] = None

    @property
    def is_mapped(self) -> bool:
        return self.warning is None


def resolve_exercise(
    exercise_name: str,
    default_equipment: EquipmentType = EquipmentType.DUMBBELL
) -> ResolvedExercise:
    """
    Resolve an exercise name, degrading to a generic definition if unknown.

    Unknown names get a category inferred from keywords (accessory when
    nothing matches) and are reported with an UnmappedExerciseWarning.

    Args:
        exercise_name: Free-text exercise name
        default_equipment: Equipment assumed when the name gives no hint

    Returns:
        ResolvedExercise
    """
    definition = find_exercise_definition(exercise_name)
    if definition is not None:
        return ResolvedExercise(definition=definition)

    category = infer_movement_category(exercise_name) or MovementCategory.ACCESSORY
    equipment = infer_equipment_type(exercise_name) or default_equipment
    is_compound = category not in (MovementCategory.ACCESSORY, MovementCategory.CORE)

    generic = ExerciseDefinition(
        name=exercise_name.strip(),
        movement_category=category,
        equipment_type=equipment,
        primary_muscles=frozenset(),
        is_compound=is_compound,
        difficulty=Difficulty.BEGINNER,
    )

    article = 'an' if category.value[0] in 'aeiou' else 'a'
    warning = UnmappedExerciseWarning(
        exercise_name=exercise_name,
        inferred_category=category.value,
        inferred_equipment=equipment.value,
        message=(
            f"'{exercise_name}' is not in the exercise table; "
            f"treating it as {article} {category.value} {equipment.value} exercise"
        ),
    )
    logger.warning(warning.message)

    return ResolvedExercise(definition=generic, warning=warning)
