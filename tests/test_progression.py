from datetime import date

import pytest

from ironcoach.biomechanics import Difficulty
from ironcoach.models import (
    Confidence,
    ExerciseProgression,
    FormQuality,
    ProgressionSuggestion,
    ProgressionType,
)
from ironcoach.pumping_iron.progression import (
    ProgressionEngine,
    ProgressionState,
    analyze_workout_performance,
    apply_suggestion,
    confidence_for,
    increment_rep_range,
    parse_rep_range,
    record_session,
)


def _good_sessions(make_record, rpe=7, form=FormQuality.EXCELLENT, count=3):
    return [make_record(rpe=rpe, form=form, day=-i) for i in range(count)]


def test_ready_lifter_gets_high_confidence_weight_increase(make_record, make_progression) -> None:
    progression = make_progression(_good_sessions(make_record), weeks_since_last_progression=3)
    suggestion = ProgressionEngine(Difficulty.BEGINNER).calculate_progression_suggestion(progression)

    assert suggestion.type == ProgressionType.WEIGHT
    assert suggestion.confidence == Confidence.HIGH
    assert suggestion.current_value == 50
    assert suggestion.suggested_value == 52.5
    assert suggestion.reason
    assert suggestion.implementation_notes


def test_weight_increment_by_experience(make_record, make_progression) -> None:
    progression = make_progression(_good_sessions(make_record), current_weight=80.0)

    intermediate = ProgressionEngine(Difficulty.INTERMEDIATE).calculate_progression_suggestion(progression)
    advanced = ProgressionEngine(Difficulty.ADVANCED).calculate_progression_suggestion(progression)

    assert intermediate.suggested_value == 81.25
    assert advanced.suggested_value == 80.625


def test_isolation_increment_is_halved(make_record, make_progression) -> None:
    progression = make_progression(
        _good_sessions(make_record), exercise_name='Bicep Curls', current_weight=10.0
    )
    suggestion = ProgressionEngine(Difficulty.BEGINNER).calculate_progression_suggestion(progression)
    assert suggestion.suggested_value == 11.25


def test_too_early_to_progress(make_record, make_progression) -> None:
    progression = make_progression(_good_sessions(make_record), weeks_since_last_progression=1)
    engine = ProgressionEngine()

    assert engine.calculate_progression_suggestion(progression) is None
    assert engine.evaluate(progression).state == ProgressionState.HOLD


def test_recently_progressed_state(make_record, make_progression) -> None:
    progression = make_progression(
        _good_sessions(make_record),
        weeks_since_last_progression=0,
        last_progression_date=date(2026, 3, 1),
    )
    assert ProgressionEngine().evaluate(progression).state == ProgressionState.PROGRESSED


def test_reps_progression_when_form_blocks_weight(make_record, make_progression) -> None:
    progression = make_progression(
        _good_sessions(make_record, form=FormQuality.ACCEPTABLE), current_rep_range='8-10'
    )
    suggestion = ProgressionEngine().calculate_progression_suggestion(progression)

    assert suggestion.type == ProgressionType.REPS
    assert suggestion.current_value == '8-10'
    assert suggestion.suggested_value == '9-12'


def test_unparsable_rep_range_is_not_progressed_by_reps(make_record, make_progression) -> None:
    engine = ProgressionEngine()
    blocked = make_progression(
        _good_sessions(make_record, form=FormQuality.ACCEPTABLE), current_rep_range='AMRAP'
    )

    decision = engine.evaluate(blocked)
    assert decision.state == ProgressionState.HOLD
    assert decision.suggestion is None

    ready = make_progression(_good_sessions(make_record), current_rep_range='AMRAP')
    assert engine.evaluate(ready).suggestion.type == ProgressionType.WEIGHT


def test_capped_weight_falls_through_to_reps(make_record, make_progression) -> None:
    # Beginner bench ceiling is 60kg
    progression = make_progression(_good_sessions(make_record), current_weight=60.0)
    suggestion = ProgressionEngine(Difficulty.BEGINNER).calculate_progression_suggestion(progression)

    assert suggestion.type == ProgressionType.REPS
    assert suggestion.suggested_value == '6-7'


def test_partially_capped_weight_carries_notice(make_record, make_progression) -> None:
    progression = make_progression(_good_sessions(make_record), current_weight=99.5)
    suggestion = ProgressionEngine(Difficulty.INTERMEDIATE).calculate_progression_suggestion(progression)

    assert suggestion.type == ProgressionType.WEIGHT
    assert suggestion.suggested_value == 100
    assert [n.rule for n in suggestion.notices] == ['experience_ceiling']


def test_sets_progression_as_last_resort(make_record, make_progression) -> None:
    progression = make_progression(
        _good_sessions(make_record, rpe=8, form=FormQuality.ACCEPTABLE),
        total_sessions=6,
        successful_sessions=6,
    )
    suggestion = ProgressionEngine().calculate_progression_suggestion(progression)

    assert suggestion.type == ProgressionType.SETS
    assert suggestion.current_value == 3
    assert suggestion.suggested_value == 4


def test_missing_rpe_blocks_weight_progression(make_record, make_progression) -> None:
    records = [make_record(rpe=None, form=FormQuality.EXCELLENT, day=-i) for i in range(3)]
    progression = make_progression(records)
    assert ProgressionEngine().calculate_progression_suggestion(progression) is None


def test_low_success_rate_lowers_confidence(make_record, make_progression) -> None:
    progression = make_progression(
        _good_sessions(make_record, form=FormQuality.ACCEPTABLE),
        total_sessions=10,
        successful_sessions=8,
        current_sets=4,
    )
    suggestion = ProgressionEngine().calculate_progression_suggestion(progression)
    assert suggestion.type == ProgressionType.SETS
    assert suggestion.confidence == Confidence.MEDIUM


def test_high_rpe_triggers_deload(make_record, make_progression) -> None:
    records = [make_record(rpe=rpe, day=-i) for i, rpe in enumerate((10, 9.5, 9.5))]
    progression = make_progression(records, current_weight=100.0)
    engine = ProgressionEngine()

    assert engine.should_deload(progression)
    decision = engine.evaluate(progression)
    assert decision.state == ProgressionState.NEEDS_DELOAD
    assert decision.suggestion.suggested_value == max(100 * 0.85, 100 - 5)


@pytest.mark.parametrize('current, expected', [(100.0, 95.0), (20.0, 17.0), (33.0, 28.05)])
def test_deload_takes_the_smaller_reduction(make_progression, current, expected) -> None:
    suggestion = ProgressionEngine().calculate_deload_recommendation(make_progression(current_weight=current))
    assert suggestion.type == ProgressionType.WEIGHT
    assert suggestion.suggested_value == pytest.approx(expected)


def test_applied_deload_is_recorded_as_deload(make_progression) -> None:
    progression = make_progression(current_weight=100.0, weeks_since_last_progression=9)
    engine = ProgressionEngine()

    decision = engine.evaluate(progression)
    assert decision.state == ProgressionState.NEEDS_DELOAD
    assert decision.suggestion.is_deload
    assert decision.suggestion.to_dict()['is_deload'] is True

    updated = apply_suggestion(progression, decision.suggestion, date(2026, 4, 1))

    assert updated.current_weight == 95.0
    assert updated.progression_history[-1].is_deload
    assert engine.evaluate(updated).state == ProgressionState.HOLD
    assert ExerciseProgression.from_dict(updated.to_dict()) == updated


def test_progression_suggestions_are_not_deloads(make_record, make_progression) -> None:
    suggestion = ProgressionEngine().calculate_progression_suggestion(
        make_progression(_good_sessions(make_record))
    )
    assert not suggestion.is_deload


def test_three_failures_trigger_deload(make_record, make_progression) -> None:
    records = [make_record(rpe=8, completed=False, day=-i) for i in range(3)]
    assert ProgressionEngine().should_deload(make_progression(records))


def test_failed_progression_attempts_are_not_counted_as_failures(make_record, make_progression) -> None:
    records = [make_record(rpe=8, completed=False, was_progression=i == 0, day=-i) for i in range(3)]
    assert not ProgressionEngine().should_deload(make_progression(records))


def test_plateau_triggers_deload(make_record, make_progression) -> None:
    progression = make_progression(_good_sessions(make_record), weeks_since_last_progression=8)
    assert ProgressionEngine().should_deload(progression)


def test_generate_progression_plan(make_record, make_progression) -> None:
    ready = make_progression(_good_sessions(make_record))
    deload = make_progression(_good_sessions(make_record), exercise_name='Squat', weeks_since_last_progression=9)
    hold = make_progression(_good_sessions(make_record), exercise_name='Deadlift', weeks_since_last_progression=0)

    plan = ProgressionEngine().generate_progression_plan([ready, deload, hold])

    assert [p.exercise_name for p in plan.ready_for_progression] == ['Bench Press']
    assert [p.exercise_name for p in plan.need_deload] == ['Squat']
    assert [p.exercise_name for p in plan.maintain] == ['Deadlift']
    assert plan.ready_for_progression[0].next_suggestion.type == ProgressionType.WEIGHT
    assert ready.next_suggestion is None


def test_progression_insights(make_record, make_progression) -> None:
    records = [make_record(rpe=9, form=FormQuality.POOR, completed=False, day=-i) for i in range(3)]
    progression = make_progression(records, weeks_since_last_progression=5)

    insights = ProgressionEngine().get_progression_insights(progression)
    assert len(insights) == 4
    assert 'Form breakdown detected - focus on technique before progression' in insights


def test_no_insights_for_new_exercise(make_progression) -> None:
    assert ProgressionEngine().get_progression_insights(make_progression(weeks_since_last_progression=0)) == []


def test_record_session_keeps_newest_first_window(make_record, make_progression) -> None:
    progression = make_progression(weeks_since_last_progression=0, last_progression_date=date(2026, 2, 9))
    for day in range(12):
        progression = record_session(progression, make_record(day=day, completed=day % 4 != 0))

    assert len(progression.recent_performance) == 10
    assert progression.recent_performance[0].date == date(2026, 3, 13)
    assert progression.total_sessions == 12
    assert progression.successful_sessions == 9
    assert progression.weeks_since_last_progression == 4


def test_fresh_exercise_becomes_ready_through_weekly_sessions(make_record) -> None:
    progression = ExerciseProgression('bench-press', 'Bench Press', 50.0, '5', 3)
    engine = ProgressionEngine()
    states = []

    for week in range(3):
        record = make_record(rpe=6, form=FormQuality.EXCELLENT, weight=50.0, day=7 * week)
        progression = record_session(progression, record)
        states.append(engine.evaluate(progression).state)

    assert progression.started_on == date(2026, 3, 2)
    assert progression.weeks_since_last_progression == 2
    assert states == [ProgressionState.HOLD, ProgressionState.HOLD, ProgressionState.READY_TO_PROGRESS]


def test_progression_clock_prefers_last_change_over_start(make_record) -> None:
    progression = ExerciseProgression(
        'bench-press', 'Bench Press', 50.0, '5', 3,
        started_on=date(2026, 1, 5),
        last_progression_date=date(2026, 2, 23),
    )
    progression = record_session(progression, make_record(day=0))
    assert progression.weeks_since_last_progression == 1


def test_record_session_does_not_mutate_input(make_record, make_progression) -> None:
    original = make_progression()
    updated = record_session(original, make_record())
    assert original.total_sessions == 0
    assert updated.total_sessions == 1


def test_apply_suggestion(make_progression) -> None:
    progression = make_progression(weeks_since_last_progression=4)
    suggestion = ProgressionSuggestion(
        type=ProgressionType.WEIGHT,
        current_value=50.0,
        suggested_value=52.5,
        reason='Ready',
        confidence=Confidence.HIGH,
        implementation_notes='Add 2.5kg',
    )
    updated = apply_suggestion(progression, suggestion, date(2026, 4, 1))

    assert updated.current_weight == 52.5
    assert updated.weeks_since_last_progression == 0
    assert updated.last_progression_date == date(2026, 4, 1)
    assert updated.progression_history[-1].from_value == 50.0
    assert updated.progression_history[-1].to_value == 52.5
    assert progression.progression_history == []


def test_analyze_workout_performance() -> None:
    records = analyze_workout_performance(
        [
            {'id': 'squat', 'name': 'Squat', 'weight': 100, 'reps': '8-10', 'sets': 3, 'completed': True, 'rpe': 8},
            {'id': 'plank', 'name': 'Plank', 'reps': '1', 'sets': 3, 'completed': False},
        ],
        date(2026, 5, 1),
    )

    assert records[0].reps == 8
    assert records[0].completed
    assert records[0].notes == 'Completed all sets'
    assert records[1].weight == 0
    assert records[1].form_quality == FormQuality.GOOD
    assert records[1].is_failure
    assert all(r.date == date(2026, 5, 1) for r in records)


def test_rep_range_helpers() -> None:
    assert parse_rep_range('8-10') == (8, 10)
    assert parse_rep_range('8–10') == (8, 10)
    assert parse_rep_range('12') == (12, 12)
    assert increment_rep_range(8, 10) == '9-12'
    with pytest.raises(ValueError):
        parse_rep_range('AMRAP')


def test_confidence_tiers() -> None:
    assert confidence_for(0.95) == Confidence.HIGH
    assert confidence_for(0.85) == Confidence.MEDIUM
    assert confidence_for(0.5) == Confidence.LOW


def test_progression_round_trips_through_dict(make_record, make_progression) -> None:
    progression = make_progression(_good_sessions(make_record), last_progression_date=date(2026, 1, 5))
    restored = ExerciseProgression.from_dict(progression.to_dict())
    assert restored == progression


def test_from_dict_rejects_unknown_form_quality() -> None:
    with pytest.raises(ValueError):
        ExerciseProgression.from_dict({
            'exercise_name': 'Squat',
            'current_weight': 100,
            'current_rep_range': '5',
            'current_sets': 3,
            'recent_performance': [
                {'exercise_id': 'squat', 'date': '2026-01-01', 'weight': 100, 'reps': 5,
                 'sets': 3, 'form_quality': 'sloppy'},
            ],
        })
