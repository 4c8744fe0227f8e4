import pytest

from ironcoach.biomechanics import EquipmentType, TrainingGoal
from ironcoach.diagnostics import ValidationResult
from ironcoach.pumping_iron.protocol import (
    ExerciseProtocol,
    SetKind,
    WarmupStage,
    WorkingSet,
    build_protocol_from_input,
    calculate_warmup_sets,
    calculate_working_sets,
    create_exercise_protocol,
    estimate_total_minutes,
    get_coaching_tips,
    get_rest_duration,
    summarize_workout,
    validate_comfortable_weight,
)


def test_bench_press_strength_protocol() -> None:
    protocol = create_exercise_protocol(
        'Barbell Bench Press', 80, 8, EquipmentType.BARBELL, TrainingGoal.STRENGTH
    )

    assert [s.weight for s in protocol.warmup_sets] == [20, 40, 52, 64, 72]
    assert [s.weight for s in protocol.working_sets] == [80, 80, 80]
    assert [s.target_rpe for s in protocol.working_sets] == [8, 9, 9]
    assert [s.rep_range for s in protocol.working_sets] == ['8', '8', '7-8']
    assert protocol.total_estimated_minutes == 22


def test_warmup_stages_and_rest_for_strength() -> None:
    warmups = calculate_warmup_sets(80, EquipmentType.BARBELL, TrainingGoal.STRENGTH)

    assert [s.stage for s in warmups] == [
        WarmupStage.MOVEMENT_PREP,
        WarmupStage.ACTIVATION,
        WarmupStage.ACTIVATION,
        WarmupStage.POTENTIATION,
        WarmupStage.POTENTIATION,
    ]
    assert [s.rest_seconds for s in warmups] == [30, 60, 60, 90, 180]
    assert [s.rep_range for s in warmups] == ['8-10', '6-8', '4-5', '2-3', '1-2']
    assert all(s.kind == 'warmup' for s in warmups)


@pytest.mark.parametrize('goal', [TrainingGoal.HYPERTROPHY, TrainingGoal.ENDURANCE])
def test_potentiation_only_for_strength(goal) -> None:
    warmups = calculate_warmup_sets(80, EquipmentType.BARBELL, goal)
    assert [s.weight for s in warmups] == [20, 40, 52, 64]
    assert 90 not in [s.percentage_of_working for s in warmups]


def test_dumbbell_skips_movement_prep() -> None:
    warmups = calculate_warmup_sets(20, EquipmentType.DUMBBELL, TrainingGoal.STRENGTH)
    assert [s.weight for s in warmups] == [10, 13, 16, 18]
    assert warmups[0].stage == WarmupStage.ACTIVATION


def test_activation_skipped_when_not_above_empty_bar() -> None:
    warmups = calculate_warmup_sets(35, EquipmentType.BARBELL, TrainingGoal.HYPERTROPHY)
    # 50% of 35 is below the 20kg bar
    assert [s.id for s in warmups] == ['warmup-1', 'warmup-3', 'warmup-4']
    assert [s.weight for s in warmups] == [20, 23, 28]


@pytest.mark.parametrize('equipment', list(EquipmentType))
@pytest.mark.parametrize('goal', list(TrainingGoal))
def test_warmups_never_decrease_or_reach_working_weight(equipment, goal) -> None:
    for weight in (1, 2.5, 5, 12.5, 20.5, 21, 25, 30, 47.5, 100, 180):
        protocol = create_exercise_protocol('Lift', weight, 8, equipment, goal)
        weights = [s.weight for s in protocol.warmup_sets]
        assert weights == sorted(weights)
        assert weights[-1] < protocol.working_weight


def test_weight_at_or_below_empty_bar_is_raised() -> None:
    protocol = create_exercise_protocol('Bench Press', 20, 8, EquipmentType.BARBELL, TrainingGoal.STRENGTH)
    assert protocol.working_weight == 30
    assert [s.weight for s in protocol.working_sets] == [30, 30, 30]


def test_hypertrophy_working_sets_narrow_rep_range() -> None:
    sets = calculate_working_sets(60, 10, TrainingGoal.HYPERTROPHY)
    assert [s.rep_range for s in sets] == ['10', '8-10', '7-9']
    assert [s.target_rpe for s in sets] == [7, 8, 9]
    assert [s.rest_seconds for s in sets] == [90, 90, 90]
    assert all(s.kind == 'working' for s in sets)


def test_endurance_working_sets() -> None:
    sets = calculate_working_sets(30, 15, TrainingGoal.ENDURANCE)
    assert [s.rep_range for s in sets] == ['15', '13-15', '12-14']
    assert [s.target_rpe for s in sets] == [6, 7, 8]


def test_sets_are_in_execution_order() -> None:
    protocol = create_exercise_protocol('Squat', 100, 5)
    kinds = [s.kind for s in protocol.sets]
    assert kinds == ['warmup'] * 5 + ['working'] * 3
    assert protocol.total_sets == 8


def test_total_minutes_positive_and_monotonic_in_set_count() -> None:
    template = WorkingSet(id='w', weight=50, rep_range='8', rest_seconds=90, description='', target_rpe=8)
    minutes = [estimate_total_minutes([template] * n) for n in range(1, 10)]
    assert all(m > 0 for m in minutes)
    assert minutes == sorted(minutes)
    assert minutes[-1] > minutes[0]


def test_protocol_is_deterministic() -> None:
    first = create_exercise_protocol('Deadlift', 142.5, 5, EquipmentType.BARBELL, TrainingGoal.STRENGTH)
    second = create_exercise_protocol('Deadlift', 142.5, 5, EquipmentType.BARBELL, TrainingGoal.STRENGTH)
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_protocol_to_dict() -> None:
    data = create_exercise_protocol('Goblet Squat', 24, 10, EquipmentType.DUMBBELL,
                                    TrainingGoal.HYPERTROPHY, ['quads']).to_dict()
    assert data['equipment_type'] == 'dumbbell'
    assert data['goal'] == 'hypertrophy'
    assert data['warmup_sets'][0]['stage'] == 'activation'
    assert data['working_sets'][0]['target_rpe'] == 7
    assert data['muscle_activation'] == ['quads']


def test_validation_accepts_reasonable_input() -> None:
    assert validate_comfortable_weight('Bench Press', 60, 8, EquipmentType.BARBELL).is_valid


@pytest.mark.parametrize('weight, reps, equipment', [
    (10, 8, EquipmentType.BARBELL),       # below the empty bar
    (60, 25, EquipmentType.BARBELL),      # too many reps
    (30, 2, EquipmentType.DUMBBELL),      # too few reps and too light for them
    (30, 5, EquipmentType.DUMBBELL),      # low reps with a light load
    (5, 1, EquipmentType.BARBELL),        # everything wrong at once
])
def test_rejections_suggest_input_that_passes(weight, reps, equipment) -> None:
    result = validate_comfortable_weight('Lift', weight, reps, equipment)
    assert not result.is_valid
    assert result.message
    assert result.suggested_weight is not None

    retry_reps = result.suggested_reps if result.suggested_reps is not None else reps
    assert validate_comfortable_weight('Lift', result.suggested_weight, retry_reps, equipment).is_valid


def test_below_minimum_suggests_bar_plus_ten() -> None:
    result = validate_comfortable_weight('Bench Press', 10, 8, EquipmentType.BARBELL)
    assert result.suggested_weight == 30
    assert 'at least 20kg' in result.message


def test_out_of_range_reps_suggest_clamped_reps() -> None:
    result = validate_comfortable_weight('Bench Press', 60, 25, EquipmentType.BARBELL)
    assert result.suggested_reps == 20
    assert result.suggested_weight == 60


def test_build_protocol_from_input() -> None:
    protocol = build_protocol_from_input('Squat', 100, 5, EquipmentType.BARBELL, TrainingGoal.STRENGTH)
    assert isinstance(protocol, ExerciseProtocol)

    rejected = build_protocol_from_input('Squat', 100, 30, EquipmentType.BARBELL, TrainingGoal.STRENGTH)
    assert isinstance(rejected, ValidationResult)
    assert not rejected.is_valid


def test_rest_duration_bands() -> None:
    assert get_rest_duration(SetKind.WORKING, goal=TrainingGoal.STRENGTH) == 180
    assert get_rest_duration(SetKind.WARMUP) == 60
    assert get_rest_duration(SetKind.WARMUP, 25, TrainingGoal.STRENGTH) == 30
    assert get_rest_duration(SetKind.WARMUP, 50, TrainingGoal.STRENGTH) == 60
    assert get_rest_duration(SetKind.WARMUP, 80, TrainingGoal.HYPERTROPHY) == 60
    assert get_rest_duration(SetKind.WARMUP, 90, TrainingGoal.ENDURANCE) == 60


def test_coaching_tips() -> None:
    assert 'Focus on speed and explosiveness' in get_coaching_tips(SetKind.WARMUP, WarmupStage.POTENTIATION)
    assert len(get_coaching_tips(SetKind.WORKING)) == 4
    assert get_coaching_tips(SetKind.WARMUP) == ['Prepare your body for the working sets ahead']


def test_summarize_workout() -> None:
    protocols = [
        create_exercise_protocol('Squat', 100, 5, EquipmentType.BARBELL, TrainingGoal.STRENGTH),
        create_exercise_protocol('Dumbbell Row', 30, 10, EquipmentType.DUMBBELL, TrainingGoal.HYPERTROPHY),
    ]
    summary = summarize_workout(protocols)

    assert summary.warmup_sets == 5 + 3
    assert summary.working_sets == 6
    assert summary.total_estimated_minutes == sum(p.total_estimated_minutes for p in protocols)
    assert summary.goal_distribution == {'strength': 1, 'hypertrophy': 1, 'endurance': 0}
    assert summary.equipment_needed == ['barbell', 'dumbbell']
