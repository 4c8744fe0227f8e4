"""
Progressive Overload Engine

Internal Codename: PUMPING-IRON
Decides, per exercise, whether to progress weight/reps/sets, deload, or hold.

State machine (per exercise, never global):
    hold -> ready-to-progress -> progressed -> hold
    hold -> needs-deload -> hold

Every decision is explained: suggestions always carry a reason and
implementation notes, never a bare number.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..biomechanics import Difficulty
from ..diagnostics import SafetyClampApplied
from ..models import (
    Confidence,
    ExerciseProgression,
    FormQuality,
    PerformanceRecord,
    ProgressionRecord,
    ProgressionSuggestion,
    ProgressionType,
)
from ..normalizer import find_exercise_definition
from .safety import EQUIPMENT_LIMITS, limit_for_experience

logger = logging.getLogger(__name__)


MIN_PROGRESSION_WEEKS = 2
PLATEAU_WEEKS = 8
RECENT_WINDOW = 10   # records kept in ExerciseProgression.recent_performance
TRAILING_SESSIONS = 3

WEIGHT_INCREMENTS = {
    Difficulty.BEGINNER: 2.5,      # kg, compound movements
    Difficulty.INTERMEDIATE: 1.25,
    Difficulty.ADVANCED: 0.625,
}

# Weight progression thresholds
WEIGHT_MIN_SUCCESS_RATE = 0.85
WEIGHT_MAX_RPE = 8
WEIGHT_MIN_FORM = 3

# Rep progression thresholds
REPS_MIN_SUCCESS_RATE = 0.90
REPS_MAX_RPE = 7
REPS_CEILING = 15

# Set progression thresholds
MAX_SETS = 5
SETS_MIN_SESSIONS = 6

# Deload triggers
DELOAD_FAILURES = 3
DELOAD_RPE = 9.5
DELOAD_FRACTION = 0.85
DELOAD_MAX_KG = 5.0


class ProgressionState(Enum):
    """Where an exercise sits in its progression cycle."""
    HOLD = "hold"
    READY_TO_PROGRESS = "ready-to-progress"
    PROGRESSED = "progressed"            # Changed within the minimum interval
    NEEDS_DELOAD = "needs-deload"


@dataclass
class ProgressionDecision:
    """Outcome of evaluating one exercise."""
    state: ProgressionState
    suggestion: Optional[ProgressionSuggestion]
    metrics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'state': self.state.value,
            'suggestion': self.suggestion.to_dict() if self.suggestion else None,
            'metrics': self.metrics,
        }


@dataclass
class ProgressionPlan:
    """Exercises bucketed by what should happen next."""
    ready_for_progression: List[ExerciseProgression] = field(default_factory=list)
    need_deload: List[ExerciseProgression] = field(default_factory=list)
    maintain: List[ExerciseProgression] = field(default_factory=list)


def parse_rep_range(rep_string: str) -> Tuple[int, int]:
    """
    Parse "8-10" / "8–10" / "8" into (min, max).

    Raises:
        ValueError: If the string holds no rep count
    """
    text = str(rep_string)
    match = re.search(r'(\d+)\s*[-–]\s*(\d+)', text)
    if match:
        return int(match.group(1)), int(match.group(2))

    single = re.search(r'\d+', text)
    if single is None:
        raise ValueError(f"Cannot parse rep range '{rep_string}'")
    value = int(single.group(0))
    return value, value


def increment_rep_range(rep_min: int, rep_max: int) -> str:
    """Raise the bottom of a rep range by one and the top by two."""
    new_min = rep_min + 1
    new_max = rep_max + 2
    return str(new_min) if new_min == new_max else f"{new_min}-{new_max}"


def confidence_for(success_rate: float) -> Confidence:
    if success_rate >= 0.9:
        return Confidence.HIGH
    if success_rate >= 0.8:
        return Confidence.MEDIUM
    return Confidence.LOW


def success_rate(progression: ExerciseProgression) -> float:
    """
    Fraction of sessions where every prescribed set and rep was done.

    Falls back to the recent window when the running counters are empty.
    """
    if progression.total_sessions > 0:
        return progression.success_rate
    window = progression.recent_performance
    if not window:
        return 0.0
    return sum(1 for r in window if r.completed) / len(window)


def _trailing(progression: ExerciseProgression) -> List[PerformanceRecord]:
    return progression.recent_performance[:TRAILING_SESSIONS]


def average_rpe(records: List[PerformanceRecord]) -> Optional[float]:
    """Mean RPE over records that reported one; None when none did."""
    rated = [r.rpe for r in records if r.rpe is not None]
    if not rated:
        return None
    return sum(rated) / len(rated)


def average_form(records: List[PerformanceRecord]) -> float:
    if not records:
        return 0.0
    return sum(r.form_quality.score for r in records) / len(records)


def _last_change_was_deload(progression: ExerciseProgression) -> bool:
    history = progression.progression_history
    return bool(history) and history[-1].is_deload


class ProgressionEngine:
    """
    Applies progressive overload rules to per-exercise state.

    Axis priority when ready: weight, then reps, then sets. Deload
    overrides progression whenever any deload trigger fires.
    """

    def __init__(self, experience: Difficulty = Difficulty.BEGINNER):
        """
        Initialize progression engine.

        Args:
            experience: Lifter's experience level (sets weight increments and caps)
        """
        self.experience = experience

    def get_weight_increment(self, is_compound: bool = True) -> float:
        base = WEIGHT_INCREMENTS[self.experience]
        return base if is_compound else base / 2

    def _should_progress_weight(
        self,
        rate: float,
        rpe: Optional[float],
        form: float,
        weeks: int
    ) -> bool:
        return (
            rate >= WEIGHT_MIN_SUCCESS_RATE
            and rpe is not None and rpe <= WEIGHT_MAX_RPE
            and form >= WEIGHT_MIN_FORM
            and weeks >= MIN_PROGRESSION_WEEKS
        )

    def _should_progress_reps(self, rate: float, rpe: Optional[float], rep_range: str) -> bool:
        if rate < REPS_MIN_SUCCESS_RATE or rpe is None or rpe > REPS_MAX_RPE:
            return False
        try:
            _, rep_max = parse_rep_range(rep_range)
        except ValueError:
            logger.debug(f"Rep range '{rep_range}' has no rep count, skipping rep progression")
            return False
        return rep_max < REPS_CEILING

    def _should_progress_sets(self, current_sets: int, total_sessions: int) -> bool:
        return current_sets < MAX_SETS and total_sessions >= SETS_MIN_SESSIONS

    def _weight_suggestion(
        self,
        progression: ExerciseProgression,
        confidence: Confidence
    ) -> Optional[ProgressionSuggestion]:
        definition = find_exercise_definition(progression.exercise_name)
        is_compound = definition.is_compound if definition else True
        increment = self.get_weight_increment(is_compound)
        current = progression.current_weight
        target = current + increment

        limited = limit_for_experience(target, self.experience, progression.exercise_name)
        notices = list(limited.notices)
        suggested = limited.weight

        if definition is not None:
            _, equipment_ceiling = EQUIPMENT_LIMITS[definition.equipment_type]
            if suggested > equipment_ceiling:
                notice = SafetyClampApplied(
                    rule='equipment_ceiling',
                    requested_weight=suggested,
                    limited_weight=equipment_ceiling,
                    limit=equipment_ceiling,
                    exercise_name=progression.exercise_name,
                    context={'equipment_type': definition.equipment_type.value},
                )
                logger.info(notice.message)
                notices.append(notice)
                suggested = equipment_ceiling

        if suggested <= current:
            logger.debug(
                f"{progression.exercise_name}: weight progression capped at "
                f"{suggested:g}kg, trying other axes"
            )
            return None

        return ProgressionSuggestion(
            type=ProgressionType.WEIGHT,
            current_value=current,
            suggested_value=suggested,
            reason=(
                f"Consistent performance for {progression.weeks_since_last_progression} weeks. "
                "Ready for weight increase."
            ),
            confidence=confidence,
            implementation_notes=(
                f"Add {suggested - current:g}kg to current weight. Maintain current rep range."
            ),
            notices=notices,
        )

    def calculate_progression_suggestion(
        self,
        progression: ExerciseProgression
    ) -> Optional[ProgressionSuggestion]:
        """
        Pick the progression axis for an exercise, if any.

        Args:
            progression: Current state for the exercise

        Returns:
            ProgressionSuggestion, or None to hold
        """
        weeks = progression.weeks_since_last_progression
        if weeks < MIN_PROGRESSION_WEEKS:
            return None

        trailing = _trailing(progression)
        rate = success_rate(progression)
        rpe = average_rpe(trailing)
        form = average_form(trailing)
        confidence = confidence_for(rate)

        if self._should_progress_weight(rate, rpe, form, weeks):
            suggestion = self._weight_suggestion(progression, confidence)
            if suggestion is not None:
                return suggestion

        if self._should_progress_reps(rate, rpe, progression.current_rep_range):
            rep_min, rep_max = parse_rep_range(progression.current_rep_range)
            return ProgressionSuggestion(
                type=ProgressionType.REPS,
                current_value=progression.current_rep_range,
                suggested_value=increment_rep_range(rep_min, rep_max),
                reason='Current weight feels manageable. Time to increase volume.',
                confidence=confidence,
                implementation_notes=(
                    'Increase reps by 1-2. When you can complete upper range, consider weight increase.'
                ),
            )

        if self._should_progress_sets(progression.current_sets, progression.total_sessions):
            return ProgressionSuggestion(
                type=ProgressionType.SETS,
                current_value=progression.current_sets,
                suggested_value=progression.current_sets + 1,
                reason='Adding volume through additional set for further stimulus.',
                confidence=confidence,
                implementation_notes='Add one additional set. Monitor recovery and form quality.',
            )

        return None

    def should_deload(self, progression: ExerciseProgression) -> bool:
        """
        True when any deload trigger fires.

        Triggers:
        - The last 3 sessions were all non-progressing failures
        - Trailing average RPE of 9.5 or more
        - No progression for 8+ weeks (plateau)
        """
        trailing = _trailing(progression)
        failures = sum(1 for r in trailing if r.is_failure)
        rpe = average_rpe(trailing)

        return (
            failures >= DELOAD_FAILURES
            or (rpe is not None and rpe >= DELOAD_RPE)
            or progression.weeks_since_last_progression >= PLATEAU_WEEKS
        )

    def calculate_deload_recommendation(self, progression: ExerciseProgression) -> ProgressionSuggestion:
        """Reduce weight by 15% or 5kg, whichever is the smaller reduction."""
        current = progression.current_weight
        deload_weight = max(current * DELOAD_FRACTION, current - DELOAD_MAX_KG)

        return ProgressionSuggestion(
            type=ProgressionType.WEIGHT,
            current_value=current,
            suggested_value=deload_weight,
            reason='Signs of overreaching detected. Deload recommended for recovery.',
            confidence=confidence_for(success_rate(progression)),
            implementation_notes=(
                'Reduce weight by 10-15% for 1-2 weeks, focus on form and technique.'
            ),
            is_deload=True,
        )

    def evaluate(self, progression: ExerciseProgression) -> ProgressionDecision:
        """
        Classify an exercise and produce the matching suggestion.

        Args:
            progression: Current state for the exercise

        Returns:
            ProgressionDecision with state, suggestion and the metrics used
        """
        trailing = _trailing(progression)
        metrics = {
            'success_rate': success_rate(progression),
            'average_rpe': average_rpe(trailing),
            'average_form': average_form(trailing),
            'recent_failures': sum(1 for r in trailing if r.is_failure),
            'weeks_since_last_progression': progression.weeks_since_last_progression,
        }

        if self.should_deload(progression):
            state = ProgressionState.NEEDS_DELOAD
            suggestion = self.calculate_deload_recommendation(progression)
        else:
            suggestion = self.calculate_progression_suggestion(progression)
            if suggestion is not None:
                state = ProgressionState.READY_TO_PROGRESS
            elif (
                progression.last_progression_date is not None
                and progression.weeks_since_last_progression < MIN_PROGRESSION_WEEKS
                and not _last_change_was_deload(progression)
            ):
                state = ProgressionState.PROGRESSED
            else:
                state = ProgressionState.HOLD

        logger.debug(f"{progression.exercise_name}: {state.value} {metrics}")
        return ProgressionDecision(state=state, suggestion=suggestion, metrics=metrics)

    def generate_progression_plan(self, progressions: List[ExerciseProgression]) -> ProgressionPlan:
        """
        Bucket exercises into ready / deload / maintain.

        Returned progressions are copies with next_suggestion filled in.
        """
        plan = ProgressionPlan()

        for progression in progressions:
            decision = self.evaluate(progression)
            updated = replace(progression, next_suggestion=decision.suggestion)
            if decision.state == ProgressionState.NEEDS_DELOAD:
                plan.need_deload.append(updated)
            elif decision.state == ProgressionState.READY_TO_PROGRESS:
                plan.ready_for_progression.append(updated)
            else:
                plan.maintain.append(updated)

        return plan

    def get_progression_insights(self, progression: ExerciseProgression) -> List[str]:
        insights = []

        has_history = progression.total_sessions > 0 or progression.recent_performance
        if has_history and success_rate(progression) < 0.7:
            insights.append('Consider reducing weight or volume to improve consistency')

        if progression.weeks_since_last_progression >= 4:
            insights.append('Ready for progression or may need exercise variation')

        if progression.recent_performance:
            latest_rpe = progression.recent_performance[0].rpe
            if latest_rpe is not None and latest_rpe >= 9:
                insights.append('High effort levels - monitor for overreaching signs')

        if any(r.form_quality == FormQuality.POOR for r in progression.recent_performance):
            insights.append('Form breakdown detected - focus on technique before progression')

        return insights


def record_session(progression: ExerciseProgression, record: PerformanceRecord) -> ExerciseProgression:
    """
    Fold a tracked session into the running state.

    Weeks since progression are counted from the last applied change, or
    from started_on (the first recorded session) before any change.

    Returns a new ExerciseProgression; the caller persists it.
    """
    recent = [record] + list(progression.recent_performance)

    started_on = progression.started_on
    if started_on is None:
        dates = [r.date for r in recent]
        started_on = min(dates)

    anchor = progression.last_progression_date or started_on
    weeks = max(0, (record.date - anchor).days // 7)

    return replace(
        progression,
        recent_performance=recent[:RECENT_WINDOW],
        total_sessions=progression.total_sessions + 1,
        successful_sessions=progression.successful_sessions + (1 if record.completed else 0),
        weeks_since_last_progression=weeks,
        started_on=started_on,
    )


def apply_suggestion(
    progression: ExerciseProgression,
    suggestion: ProgressionSuggestion,
    on_date: date,
    successful: bool = True
) -> ExerciseProgression:
    """
    Apply an accepted suggestion and log it in the progression history.

    Resets the progression clock. Returns a new ExerciseProgression.
    """
    entry = ProgressionRecord(
        date=on_date,
        type=suggestion.type,
        from_value=suggestion.current_value,
        to_value=suggestion.suggested_value,
        reason=suggestion.reason,
        successful=successful,
        is_deload=suggestion.is_deload,
    )

    changes: Dict[str, Any] = {}
    if suggestion.type == ProgressionType.WEIGHT:
        changes['current_weight'] = float(suggestion.suggested_value)
    elif suggestion.type == ProgressionType.REPS:
        changes['current_rep_range'] = str(suggestion.suggested_value)
    elif suggestion.type == ProgressionType.SETS:
        changes['current_sets'] = int(suggestion.suggested_value)

    return replace(
        progression,
        progression_history=list(progression.progression_history) + [entry],
        weeks_since_last_progression=0,
        last_progression_date=on_date,
        next_suggestion=None,
        **changes
    )


def analyze_workout_performance(
    exercises: List[Dict[str, Any]],
    session_date: date
) -> List[PerformanceRecord]:
    """
    Convert completed workout entries into performance records.

    Args:
        exercises: Dicts with id, weight, reps (e.g. "8-10"), sets,
            completed, and optional rpe / form_quality
        session_date: Date of the session (supplied by the caller)

    Returns:
        List of PerformanceRecord
    """
    records = []
    for exercise in exercises:
        try:
            reps, _ = parse_rep_range(exercise.get('reps', ''))
        except ValueError:
            reps = 0
        completed = bool(exercise.get('completed', False))
        records.append(PerformanceRecord(
            exercise_id=str(exercise['id']),
            date=session_date,
            weight=float(exercise.get('weight') or 0),
            reps=reps,
            sets=int(exercise.get('sets', 0)),
            rpe=exercise.get('rpe'),
            form_quality=FormQuality(exercise.get('form_quality') or 'good'),
            rest_seconds=90,
            was_progression=False,
            completed=completed,
            notes='Completed all sets' if completed else 'Incomplete',
        ))
    return records
