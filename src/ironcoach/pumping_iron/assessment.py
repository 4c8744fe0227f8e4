"""
Strength Assessment Builder

Internal Codename: PUMPING-IRON
Picks the fewest exercises a user must self-assess to cover a program.

One assessed lift per movement category informs every program exercise
in that category; weights are carried across through the safety limits.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..biomechanics import (
    PRIORITY_ORDER,
    Difficulty,
    EquipmentType,
    ExerciseDefinition,
    MovementCategory,
    TrainingGoal,
)
from ..diagnostics import SafetyClampApplied, UnmappedExerciseWarning
from ..normalizer import resolve_exercise
from .protocol import GOAL_TARGET_REPS, ExerciseProtocol, create_exercise_protocol
from .safety import adjust_weight, limit_for_experience

logger = logging.getLogger(__name__)


MINUTES_PER_ASSESSED_EXERCISE = 2.5
FALLBACK_EXERCISES = ('Squat', 'Bench Press', 'Deadlift', 'Overhead Press')

# Equipment access tags that make every exercise feasible
FULL_ACCESS_TAGS = ('full-gym', 'advanced')
BASIC_ACCESS_TAG = 'basic'

CATEGORY_DESCRIPTIONS = {
    MovementCategory.HORIZONTAL_PUSH: 'Horizontal pushing strength assessment',
    MovementCategory.VERTICAL_PUSH: 'Overhead pushing strength assessment',
    MovementCategory.HORIZONTAL_PULL: 'Horizontal pulling strength assessment',
    MovementCategory.VERTICAL_PULL: 'Vertical pulling strength assessment',
    MovementCategory.KNEE_DOMINANT: 'Knee-dominant leg strength assessment',
    MovementCategory.HIP_DOMINANT: 'Hip-dominant posterior chain assessment',
    MovementCategory.SINGLE_LEG: 'Unilateral leg strength assessment',
    MovementCategory.ACCESSORY: 'Accessory movement strength assessment',
    MovementCategory.CORE: 'Core stability assessment',
}

PLACEHOLDER_WEIGHTS = {
    'Bench Press': 'e.g., 60',
    'Squat': 'e.g., 80',
    'Deadlift': 'e.g., 100',
    'Overhead Press': 'e.g., 40',
    'Bent-over Row': 'e.g., 60',
    'Pull-up': 'Bodyweight',
    'Dips': 'Bodyweight',
    'Bulgarian Split Squat': 'Bodyweight + 10kg',
    'Hip Thrust': 'e.g., 80',
}
DEFAULT_PLACEHOLDER = 'e.g., 50'

EXERCISE_TIPS = {
    'Squat': [
        'Weight for 6-8 full-depth squats with good form',
        'Descend below parallel if mobility allows',
        'Choose a weight that challenges you but maintains technique',
    ],
    'Deadlift': [
        'Weight you can deadlift from the floor for 5-6 reps',
        'Focus on proper hip hinge and neutral spine',
        'Should be challenging but allow perfect form',
    ],
    'Pull-up': [
        'If you can do bodyweight pull-ups, enter your bodyweight',
        'If you need assistance, use assisted pull-up machine weight',
        'Focus on full range of motion',
    ],
}


@dataclass(frozen=True)
class UserContext:
    """What the selector needs to know about the lifter."""
    experience: Difficulty = Difficulty.BEGINNER
    equipment_access: Tuple[str, ...] = ('full-gym',)
    goal: TrainingGoal = TrainingGoal.STRENGTH


@dataclass(frozen=True)
class AssessmentExercise:
    """One exercise the user is asked to self-assess."""
    id: str
    name: str
    category: MovementCategory
    description: str
    equipment: EquipmentType
    placeholder: str
    tips: List[str]
    represents_exercises: List[str]
    priority: int   # 1 = highest

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category.value,
            'description': self.description,
            'equipment': self.equipment.value,
            'placeholder': self.placeholder,
            'tips': list(self.tips),
            'represents_exercises': list(self.represents_exercises),
            'priority': self.priority,
        }


@dataclass
class Assessment:
    assessment_exercises: List[AssessmentExercise]
    program_exercises: List[str]
    estimated_completion_minutes: float
    warnings: List[UnmappedExerciseWarning] = field(default_factory=list)


@dataclass(frozen=True)
class AssessedLift:
    """A user's answer for one assessment exercise."""
    weight: float
    experience: Difficulty
    goal: TrainingGoal


@dataclass
class ProgramProtocols:
    """Protocols for a program plus every diagnostic raised building them."""
    protocols: Dict[str, ExerciseProtocol] = field(default_factory=dict)
    diagnostics: List[Union[SafetyClampApplied, UnmappedExerciseWarning]] = field(default_factory=list)


def _equipment_score(definition: ExerciseDefinition, access: Sequence[str]) -> float:
    if any(tag in access for tag in FULL_ACCESS_TAGS):
        return 3
    if BASIC_ACCESS_TAG in access and definition.equipment_type in (
        EquipmentType.DUMBBELL, EquipmentType.BODYWEIGHT
    ):
        return 3
    if definition.equipment_type == EquipmentType.BODYWEIGHT:
        return 2
    if definition.equipment_type == EquipmentType.BARBELL:
        return -1
    return 0


def _difficulty_score(definition: ExerciseDefinition, experience: Difficulty) -> float:
    if definition.difficulty == experience:
        return 2
    if definition.difficulty == Difficulty.BEGINNER and experience != Difficulty.ADVANCED:
        return 1
    if definition.difficulty == Difficulty.INTERMEDIATE:
        return 1
    return 0


def score_representative(definition: ExerciseDefinition, user: UserContext) -> float:
    """
    Suitability of an exercise as its category's assessment lift.

    Sum of:
    - Equipment feasibility for the user's access (-1 to 3)
    - Difficulty match against experience (0 to 2)
    - Compound bonus (2)
    - Free-weight preference: barbell 1, dumbbell 0.5
    """
    score = _equipment_score(definition, user.equipment_access)
    score += _difficulty_score(definition, user.experience)
    if definition.is_compound:
        score += 2
    if definition.equipment_type == EquipmentType.BARBELL:
        score += 1
    elif definition.equipment_type == EquipmentType.DUMBBELL:
        score += 0.5
    return score


def select_representative(
    category: MovementCategory,
    exercises: Sequence[ExerciseDefinition],
    user: UserContext
) -> Optional[ExerciseDefinition]:
    """
    Pick the exercise that best represents a category for this user.

    Args:
        category: Movement category being assessed
        exercises: Candidates (other categories are ignored)
        user: Lifter context

    Returns:
        Highest-scoring candidate (first one on ties), or None
    """
    best = None
    best_score = None
    for definition in exercises:
        if definition.movement_category != category:
            continue
        score = score_representative(definition, user)
        if best_score is None or score > best_score:
            best, best_score = definition, score
    return best


def extract_program_exercises(plan: Dict[str, Any]) -> List[str]:
    """
    Collect exercise names (and alternatives) from a generated program.

    Expects rotationCycles -> workouts -> exercises -> name / alternatives.
    De-duplicated in first-seen order.
    """
    names: List[str] = []

    def add(name):
        if name and name not in names:
            names.append(name)

    for cycle in plan.get('rotationCycles') or []:
        for workout in cycle.get('workouts') or []:
            for exercise in workout.get('exercises') or []:
                add(exercise.get('name'))
                for alternative in exercise.get('alternatives') or []:
                    add(alternative)

    return names


def _slug(name: str) -> str:
    return re.sub(r'\s+', '-', name.strip().lower())


def _tips_for(definition: ExerciseDefinition) -> List[str]:
    if definition.name in EXERCISE_TIPS:
        return list(EXERCISE_TIPS[definition.name])
    return [
        f'Enter a weight you can comfortably {definition.name.lower()} for 6-8 repetitions',
        'Use strict form with controlled movement',
        'This should feel moderately challenging, not your maximum',
    ]


def _group_by_category(
    program_exercises: Sequence[str]
) -> Tuple[Dict[MovementCategory, List[Tuple[str, ExerciseDefinition]]], List[UnmappedExerciseWarning]]:
    groups: Dict[MovementCategory, List[Tuple[str, ExerciseDefinition]]] = {}
    warnings = []
    for name in program_exercises:
        resolved = resolve_exercise(name)
        if not resolved.is_mapped:
            warnings.append(resolved.warning)
        category = resolved.definition.movement_category
        groups.setdefault(category, []).append((name, resolved.definition))
    return groups, warnings


def _build_assessment(
    program_exercises: Sequence[str],
    user: UserContext
) -> Tuple[List[AssessmentExercise], List[UnmappedExerciseWarning]]:
    groups, warnings = _group_by_category(program_exercises)
    selected = []

    for category in PRIORITY_ORDER:
        members = groups.get(category)
        if not members:
            continue
        representative = select_representative(category, [d for _, d in members], user)
        if representative is None:
            continue

        represents: List[str] = []
        for name, _ in members:
            if name not in represents:
                represents.append(name)

        selected.append(AssessmentExercise(
            id=_slug(representative.name),
            name=representative.name,
            category=category,
            description=CATEGORY_DESCRIPTIONS[category],
            equipment=representative.equipment_type,
            placeholder=PLACEHOLDER_WEIGHTS.get(representative.name, DEFAULT_PLACEHOLDER),
            tips=_tips_for(representative),
            represents_exercises=represents,
            priority=len(selected) + 1,
        ))

    return selected, warnings


def select_assessment_exercises(
    program_exercises: Sequence[str],
    user: UserContext
) -> List[AssessmentExercise]:
    """
    Choose one assessment exercise per category present in the program.

    Categories are walked in PRIORITY_ORDER. Names missing from the
    exercise table join their inferred category (and are logged).

    Args:
        program_exercises: Exercise names from the program
        user: Lifter context

    Returns:
        Assessment exercises, priority 1 first
    """
    selected, _ = _build_assessment(program_exercises, user)
    return selected


def estimated_assessment_minutes(exercise_count: int) -> float:
    return exercise_count * MINUTES_PER_ASSESSED_EXERCISE


def create_assessment(program_exercises: Sequence[str], user: UserContext) -> Assessment:
    """Assessment for a program, with warnings for exercises it could not map."""
    selected, warnings = _build_assessment(program_exercises, user)
    return Assessment(
        assessment_exercises=selected,
        program_exercises=list(program_exercises),
        estimated_completion_minutes=estimated_assessment_minutes(len(selected)),
        warnings=warnings,
    )


def create_fallback_assessment(user: UserContext) -> Assessment:
    """Basic four-lift assessment for when no program is available."""
    return create_assessment(list(FALLBACK_EXERCISES), user)


def _find_assessment_for(
    exercise_name: str,
    assessment_exercises: Sequence[AssessmentExercise]
) -> Optional[AssessmentExercise]:
    for assessment in assessment_exercises:
        if exercise_name in assessment.represents_exercises or assessment.name == exercise_name:
            return assessment
    return None


def generate_all_protocols(
    assessed: Dict[str, AssessedLift],
    assessment_exercises: Sequence[AssessmentExercise],
    program_exercises: Sequence[str]
) -> ProgramProtocols:
    """
    Build a protocol for every program exercise covered by an assessed lift.

    Weights are carried over with adjust_weight() and then capped by the
    experience limits. Unmapped names use their generic inferred
    definition. Exercises with no assessed representative are left out.

    Args:
        assessed: Assessed lifts keyed by assessment exercise name
        assessment_exercises: Output of select_assessment_exercises()
        program_exercises: Every exercise name in the program

    Returns:
        ProgramProtocols keyed by program exercise name
    """
    result = ProgramProtocols()

    for exercise_name in program_exercises:
        resolved = resolve_exercise(exercise_name)
        if not resolved.is_mapped:
            result.diagnostics.append(resolved.warning)

        assessment = _find_assessment_for(exercise_name, assessment_exercises)
        if assessment is None or assessment.name not in assessed:
            logger.debug(f"No assessed lift covers {exercise_name}")
            continue

        lift = assessed[assessment.name]
        definition = resolved.definition

        adjustment = adjust_weight(lift.weight, assessment.name, exercise_name, definition)
        limited = limit_for_experience(adjustment.weight, lift.experience, exercise_name)
        result.diagnostics.extend(adjustment.notices)
        result.diagnostics.extend(limited.notices)

        result.protocols[exercise_name] = create_exercise_protocol(
            exercise_name,
            limited.weight,
            GOAL_TARGET_REPS[lift.goal],
            definition.equipment_type,
            lift.goal,
            sorted(definition.primary_muscles),
        )

    logger.info(
        f"Generated {len(result.protocols)} protocols from "
        f"{len(assessed)} assessed lifts"
    )
    return result
