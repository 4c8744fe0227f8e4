"""
Set Protocol Calculator

Internal Codename: PUMPING-IRON
Turns a comfortable working weight into a warm-up ramp and working sets.

Warm-up ladder (percent of working weight):
- Movement prep: empty bar, 8-10 reps (barbell only)
- Activation: 50%, 6-8 reps (only if heavier than the empty bar)
- Progressive loading: 65%, 4-5 reps
- Neural prep: 80%, 2-3 reps
- Potentiation: 90%, 1-2 reps (strength goal only)

Rest periods follow Willardson & Burkett (2005).
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Literal, Optional, Sequence, Union

from ..biomechanics import EquipmentType, TrainingGoal
from ..diagnostics import ValidationResult


class WarmupStage(Enum):
    """Phase of the warm-up ramp."""
    MOVEMENT_PREP = "movement-prep"
    ACTIVATION = "activation"
    POTENTIATION = "potentiation"


class SetKind(Enum):
    WARMUP = "warmup"
    WORKING = "working"


EQUIPMENT_EMPTY_WEIGHTS = {
    EquipmentType.BARBELL: 20,  # kg
    EquipmentType.DUMBBELL: 0,
    EquipmentType.MACHINE: 0,
    EquipmentType.BODYWEIGHT: 0,
}

# Working weight assumed when the input is at or below the empty weight
MINIMUM_LOAD_ABOVE_EMPTY = 10

# Seconds, by goal. Warm-up rest is keyed by stage intensity.
REST_PERIODS = {
    TrainingGoal.STRENGTH: {
        "warmup": {"light": 30, "moderate": 60, "heavy": 90, "potentiation": 180},
        "working": 180,
    },
    TrainingGoal.HYPERTROPHY: {
        "warmup": {"light": 30, "moderate": 45, "heavy": 60, "potentiation": 90},
        "working": 90,
    },
    TrainingGoal.ENDURANCE: {
        "warmup": {"light": 20, "moderate": 30, "heavy": 45, "potentiation": 60},
        "working": 60,
    },
}

# Target RPE for working sets 1-3
WORKING_SET_RPE = {
    TrainingGoal.STRENGTH: (8, 9, 9),
    TrainingGoal.HYPERTROPHY: (7, 8, 9),
    TrainingGoal.ENDURANCE: (6, 7, 8),
}

# Default reps when a goal, not a rep target, is known
GOAL_TARGET_REPS = {
    TrainingGoal.STRENGTH: 6,
    TrainingGoal.HYPERTROPHY: 10,
    TrainingGoal.ENDURANCE: 15,
}

SET_EXECUTION_SECONDS = 45

MIN_REPS = 3
MAX_REPS = 20
LOW_REP_THRESHOLD = 5
LOW_REP_MIN_WEIGHT = 40
LOW_REP_SUGGESTED_WEIGHT = 50


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def _stage_weight(working_weight: float, fraction: float) -> int:
    # Tiny loads would otherwise round up to the working weight itself
    ceiling = math.ceil(working_weight) - 1
    return max(0, min(round_half_up(working_weight * fraction), ceiling))


@dataclass(frozen=True)
class WarmupSet:
    """A warm-up set. Derived from the working weight, never user input."""
    id: str
    weight: float
    rep_range: str
    percentage_of_working: int
    rest_seconds: int
    stage: WarmupStage
    description: str
    kind: Literal["warmup"] = "warmup"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'kind': self.kind,
            'weight': self.weight,
            'rep_range': self.rep_range,
            'percentage_of_working': self.percentage_of_working,
            'rest_seconds': self.rest_seconds,
            'stage': self.stage.value,
            'description': self.description,
        }


@dataclass(frozen=True)
class WorkingSet:
    """A working set at full working weight."""
    id: str
    weight: float
    rep_range: str
    rest_seconds: int
    description: str
    target_rpe: Optional[int] = None
    kind: Literal["working"] = "working"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'kind': self.kind,
            'weight': self.weight,
            'rep_range': self.rep_range,
            'rest_seconds': self.rest_seconds,
            'target_rpe': self.target_rpe,
            'description': self.description,
        }


ProtocolSet = Union[WarmupSet, WorkingSet]


@dataclass(frozen=True)
class ExerciseProtocol:
    """Complete warm-up + working protocol for one exercise."""
    exercise_name: str
    equipment_type: EquipmentType
    working_weight: float
    target_reps: int
    goal: TrainingGoal
    warmup_sets: List[WarmupSet]
    working_sets: List[WorkingSet]
    total_estimated_minutes: int
    muscle_activation: List[str] = field(default_factory=list)
    form_cues: List[str] = field(default_factory=list)

    @property
    def sets(self) -> Iterator[ProtocolSet]:
        """All sets in execution order: warm-ups, then working sets."""
        yield from self.warmup_sets
        yield from self.working_sets

    @property
    def total_sets(self) -> int:
        return len(self.warmup_sets) + len(self.working_sets)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'exercise_name': self.exercise_name,
            'equipment_type': self.equipment_type.value,
            'working_weight': self.working_weight,
            'target_reps': self.target_reps,
            'goal': self.goal.value,
            'warmup_sets': [s.to_dict() for s in self.warmup_sets],
            'working_sets': [s.to_dict() for s in self.working_sets],
            'total_estimated_minutes': self.total_estimated_minutes,
            'muscle_activation': list(self.muscle_activation),
            'form_cues': list(self.form_cues),
        }


def effective_working_weight(working_weight: float, equipment_type: EquipmentType) -> float:
    """
    Raise a working weight at or below the empty weight to a usable minimum.

    Args:
        working_weight: User's comfortable working weight (kg)
        equipment_type: Equipment being used

    Returns:
        Working weight used for every calculation
    """
    empty_weight = EQUIPMENT_EMPTY_WEIGHTS[equipment_type]
    if working_weight <= empty_weight:
        return empty_weight + MINIMUM_LOAD_ABOVE_EMPTY
    return working_weight


def calculate_warmup_sets(
    working_weight: float,
    equipment_type: EquipmentType = EquipmentType.BARBELL,
    goal: TrainingGoal = TrainingGoal.STRENGTH
) -> List[WarmupSet]:
    """
    Calculate the warm-up ramp for a working weight.

    Weights are non-decreasing and stay below the working weight.

    Args:
        working_weight: User's comfortable working weight (kg)
        equipment_type: Equipment being used
        goal: Training goal

    Returns:
        List of WarmupSet in execution order
    """
    empty_weight = EQUIPMENT_EMPTY_WEIGHTS[equipment_type]
    rest = REST_PERIODS[goal]["warmup"]
    working_weight = effective_working_weight(working_weight, equipment_type)

    warmup_sets: List[WarmupSet] = []

    # Stage 1: Movement preparation (empty bar)
    if empty_weight > 0:
        warmup_sets.append(WarmupSet(
            id='warmup-1',
            weight=empty_weight,
            rep_range='8-10',
            percentage_of_working=round_half_up(empty_weight / working_weight * 100),
            rest_seconds=rest["light"],
            stage=WarmupStage.MOVEMENT_PREP,
            description='Movement preparation',
        ))

    # Stage 2: Muscle activation
    fifty_percent = _stage_weight(working_weight, 0.5)
    if fifty_percent > empty_weight:
        warmup_sets.append(WarmupSet(
            id='warmup-2',
            weight=fifty_percent,
            rep_range='6-8',
            percentage_of_working=50,
            rest_seconds=rest["moderate"],
            stage=WarmupStage.ACTIVATION,
            description='50% working weight - muscle activation',
        ))

    # Stages 3-5 never drop below an earlier stage (light loads on an empty bar)
    ladder = [
        ('warmup-3', 0.65, '4-5', rest["moderate"], WarmupStage.ACTIVATION,
         '65% working weight - progressive loading'),
        ('warmup-4', 0.8, '2-3', rest["heavy"], WarmupStage.POTENTIATION,
         '80% working weight - neural preparation'),
    ]
    if goal == TrainingGoal.STRENGTH:
        ladder.append(
            ('warmup-5', 0.9, '1-2', rest["potentiation"], WarmupStage.POTENTIATION,
             '90% working weight - potentiation')
        )

    for set_id, fraction, rep_range, rest_seconds, stage, description in ladder:
        weight = _stage_weight(working_weight, fraction)
        if warmup_sets:
            weight = max(weight, warmup_sets[-1].weight)
        warmup_sets.append(WarmupSet(
            id=set_id,
            weight=weight,
            rep_range=rep_range,
            percentage_of_working=round_half_up(fraction * 100),
            rest_seconds=rest_seconds,
            stage=stage,
            description=description,
        ))

    return warmup_sets


def calculate_working_sets(
    working_weight: float,
    target_reps: int,
    goal: TrainingGoal = TrainingGoal.STRENGTH
) -> List[WorkingSet]:
    """
    Calculate three straight working sets.

    Later sets push RPE up and narrow the rep window to model fatigue.

    Args:
        working_weight: Working weight (kg)
        target_reps: Target reps for the first set
        goal: Training goal

    Returns:
        List of three WorkingSet
    """
    rest_seconds = REST_PERIODS[goal]["working"]
    rpe_1, rpe_2, rpe_3 = WORKING_SET_RPE[goal]

    if goal == TrainingGoal.STRENGTH:
        reps_2 = str(target_reps)
        reps_3 = f"{max(1, target_reps - 1)}-{target_reps}"
    else:
        reps_2 = f"{max(1, target_reps - 2)}-{target_reps}"
        reps_3 = f"{max(1, target_reps - 3)}-{max(1, target_reps - 1)}"

    return [
        WorkingSet(
            id='working-1',
            weight=working_weight,
            rep_range=str(target_reps),
            rest_seconds=rest_seconds,
            description=f'Working set 1 - {target_reps} reps',
            target_rpe=rpe_1,
        ),
        WorkingSet(
            id='working-2',
            weight=working_weight,
            rep_range=reps_2,
            rest_seconds=rest_seconds,
            description='Working set 2 - maintain quality',
            target_rpe=rpe_2,
        ),
        WorkingSet(
            id='working-3',
            weight=working_weight,
            rep_range=reps_3,
            rest_seconds=rest_seconds,
            description='Working set 3 - to near failure',
            target_rpe=rpe_3,
        ),
    ]


def estimate_total_minutes(sets: Sequence[ProtocolSet]) -> int:
    """Rest plus execution time for a list of sets, in whole minutes."""
    rest_seconds = sum(s.rest_seconds for s in sets)
    execution_seconds = len(sets) * SET_EXECUTION_SECONDS
    return round_half_up((rest_seconds + execution_seconds) / 60)


def create_exercise_protocol(
    exercise_name: str,
    working_weight: float,
    target_reps: int,
    equipment_type: EquipmentType = EquipmentType.BARBELL,
    goal: TrainingGoal = TrainingGoal.STRENGTH,
    muscle_activation: Optional[Sequence[str]] = None,
    form_cues: Optional[Sequence[str]] = None
) -> ExerciseProtocol:
    """
    Create a complete exercise protocol.

    Deterministic: identical inputs always produce an identical protocol.

    Args:
        exercise_name: Display name of the exercise
        working_weight: Comfortable working weight (kg)
        target_reps: Target reps per working set
        equipment_type: Equipment being used
        goal: Training goal
        muscle_activation: Muscles to list on the protocol
        form_cues: Technique cues to list on the protocol

    Returns:
        ExerciseProtocol
    """
    weight = effective_working_weight(working_weight, equipment_type)
    warmup_sets = calculate_warmup_sets(weight, equipment_type, goal)
    working_sets = calculate_working_sets(weight, target_reps, goal)

    return ExerciseProtocol(
        exercise_name=exercise_name,
        equipment_type=equipment_type,
        working_weight=weight,
        target_reps=target_reps,
        goal=goal,
        warmup_sets=warmup_sets,
        working_sets=working_sets,
        total_estimated_minutes=estimate_total_minutes([*warmup_sets, *working_sets]),
        muscle_activation=list(muscle_activation or []),
        form_cues=list(form_cues or []),
    )


def _weight_passing_rules(weight: float, reps: int, equipment_type: EquipmentType) -> float:
    """Smallest adjustment of weight that satisfies every weight rule for reps."""
    minimum = EQUIPMENT_EMPTY_WEIGHTS[equipment_type]
    if weight < minimum:
        weight = minimum + MINIMUM_LOAD_ABOVE_EMPTY
    if reps <= LOW_REP_THRESHOLD and weight < LOW_REP_MIN_WEIGHT:
        weight = LOW_REP_SUGGESTED_WEIGHT
    return weight


def validate_comfortable_weight(
    exercise_name: str,
    weight: float,
    reps: int,
    equipment_type: EquipmentType
) -> ValidationResult:
    """
    Validate user input for a comfortable working weight.

    Rejections are never silently corrected; each carries a suggestion
    that passes validation when resubmitted.

    Args:
        exercise_name: Exercise the weight was entered for
        weight: Entered weight (kg)
        reps: Entered reps
        equipment_type: Equipment being used

    Returns:
        ValidationResult
    """
    minimum = EQUIPMENT_EMPTY_WEIGHTS[equipment_type]

    if weight < minimum:
        suggested_reps = min(max(reps, MIN_REPS), MAX_REPS)
        return ValidationResult(
            is_valid=False,
            message=f'Weight should be at least {minimum}kg for {equipment_type.value} exercises',
            suggested_weight=_weight_passing_rules(weight, suggested_reps, equipment_type),
            suggested_reps=None if suggested_reps == reps else suggested_reps,
        )

    if reps < MIN_REPS or reps > MAX_REPS:
        suggested_reps = min(max(reps, MIN_REPS), MAX_REPS)
        return ValidationResult(
            is_valid=False,
            message=f'Rep range should be between {MIN_REPS}-{MAX_REPS} for optimal training adaptation',
            suggested_weight=_weight_passing_rules(weight, suggested_reps, equipment_type),
            suggested_reps=suggested_reps,
        )

    # A low-rep set implies near-maximal effort; a very light load is likely a typo
    if reps <= LOW_REP_THRESHOLD and weight < LOW_REP_MIN_WEIGHT:
        return ValidationResult(
            is_valid=False,
            message=f'For low rep ranges, consider using heavier weight than {weight:g}kg for {exercise_name}',
            suggested_weight=_weight_passing_rules(weight, reps, equipment_type),
        )

    return ValidationResult(is_valid=True)


def build_protocol_from_input(
    exercise_name: str,
    comfortable_weight: float,
    comfortable_reps: int,
    equipment_type: EquipmentType,
    goal: TrainingGoal,
    muscle_activation: Optional[Sequence[str]] = None,
    form_cues: Optional[Sequence[str]] = None
) -> Union[ExerciseProtocol, ValidationResult]:
    """
    Validate onboarding input and build its protocol.

    Returns:
        ExerciseProtocol when the input is valid, the failed ValidationResult otherwise
    """
    validation = validate_comfortable_weight(
        exercise_name, comfortable_weight, comfortable_reps, equipment_type
    )
    if not validation.is_valid:
        return validation

    return create_exercise_protocol(
        exercise_name,
        comfortable_weight,
        comfortable_reps,
        equipment_type,
        goal,
        muscle_activation,
        form_cues,
    )


def get_rest_duration(
    set_kind: SetKind,
    percentage: Optional[float] = None,
    goal: TrainingGoal = TrainingGoal.STRENGTH
) -> int:
    """
    Rest duration for a set, by intensity band.

    Args:
        set_kind: Warm-up or working set
        percentage: Percent of working weight (warm-ups only)
        goal: Training goal

    Returns:
        Rest in seconds
    """
    rest = REST_PERIODS[goal]
    if set_kind == SetKind.WORKING:
        return rest["working"]

    if not percentage:
        return 60

    if percentage <= 30:
        return rest["warmup"]["light"]
    if percentage <= 60:
        return rest["warmup"]["moderate"]
    if percentage <= 85:
        return rest["warmup"]["heavy"]
    return rest["warmup"]["potentiation"]


COACHING_TIPS = {
    WarmupStage.MOVEMENT_PREP: [
        'Focus on movement quality and range of motion',
        'Activate target muscles and joints',
        'Start slow, increase tempo gradually',
    ],
    WarmupStage.ACTIVATION: [
        'Feel the target muscles working',
        'Maintain perfect form as load increases',
        'Focus on movement rhythm and breathing',
    ],
    WarmupStage.POTENTIATION: [
        'Prime your nervous system for heavy lifting',
        'Focus on speed and explosiveness',
        'Visualize your working sets',
    ],
}

WORKING_SET_TIPS = [
    'Maintain excellent form throughout the set',
    "Control the weight, don't let it control you",
    'Push hard but save 1-2 reps in reserve',
    'Focus on quality over quantity',
]


def get_coaching_tips(set_kind: SetKind, stage: Optional[WarmupStage] = None) -> List[str]:
    """Coaching cues for the set about to be performed."""
    if set_kind == SetKind.WORKING:
        return list(WORKING_SET_TIPS)
    if stage in COACHING_TIPS:
        return list(COACHING_TIPS[stage])
    return ['Prepare your body for the working sets ahead']


@dataclass(frozen=True)
class WorkoutSummary:
    """Totals across the protocols of one workout."""
    total_estimated_minutes: int
    warmup_sets: int
    working_sets: int
    goal_distribution: Dict[str, int]
    equipment_needed: List[str]
    key_insights: List[str]


def summarize_workout(protocols: Sequence[ExerciseProtocol]) -> WorkoutSummary:
    """
    Summarize a workout built from several protocols.

    Args:
        protocols: Protocols in workout order

    Returns:
        WorkoutSummary
    """
    warmup_count = sum(len(p.warmup_sets) for p in protocols)
    working_count = sum(len(p.working_sets) for p in protocols)
    total_minutes = sum(p.total_estimated_minutes for p in protocols)

    distribution = {goal.value: 0 for goal in TrainingGoal}
    for p in protocols:
        distribution[p.goal.value] += 1

    equipment: List[str] = []
    for p in protocols:
        if p.equipment_type.value not in equipment:
            equipment.append(p.equipment_type.value)

    insights = [
        f'{warmup_count} warm-up sets to prepare for the working weight',
        f'{working_count} working sets with goal-specific rest periods',
    ]
    if distribution[TrainingGoal.STRENGTH.value]:
        insights.append(
            f'{distribution[TrainingGoal.STRENGTH.value]} strength-focused exercise(s) with 3-5 minute rest periods'
        )
    if distribution[TrainingGoal.HYPERTROPHY.value]:
        insights.append(
            f'{distribution[TrainingGoal.HYPERTROPHY.value]} hypertrophy exercise(s) with 60-90 second rest periods'
        )
    insights.append(f'Total estimated time: {total_minutes} minutes including rest')

    return WorkoutSummary(
        total_estimated_minutes=total_minutes,
        warmup_sets=warmup_count,
        working_sets=working_count,
        goal_distribution=distribution,
        equipment_needed=equipment,
        key_insights=insights,
    )
