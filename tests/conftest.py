from datetime import date, timedelta

import pytest

from ironcoach.models import ExerciseProgression, FormQuality, PerformanceRecord


SESSION_START = date(2026, 3, 2)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        'IRONCOACH_LOG_LEVEL',
        'IRONCOACH_GOAL',
        'IRONCOACH_EXPERIENCE',
        'IRONCOACH_EQUIPMENT',
        'IRONCOACH_EQUIPMENT_ACCESS',
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_record():
    def _make(
        rpe=7,
        form=FormQuality.GOOD,
        completed=True,
        was_progression=False,
        weight=60.0,
        day=0,
        exercise_id='bench-press',
    ) -> PerformanceRecord:
        return PerformanceRecord(
            exercise_id=exercise_id,
            date=SESSION_START + timedelta(days=day),
            weight=weight,
            reps=5,
            sets=3,
            rpe=rpe,
            form_quality=form,
            rest_seconds=180,
            was_progression=was_progression,
            completed=completed,
        )
    return _make


@pytest.fixture
def make_progression():
    def _make(records=(), **overrides) -> ExerciseProgression:
        records = list(records)
        values = dict(
            exercise_id='bench-press',
            exercise_name='Bench Press',
            current_weight=50.0,
            current_rep_range='5',
            current_sets=3,
            weeks_since_last_progression=3,
            total_sessions=len(records),
            successful_sessions=sum(1 for r in records if r.completed),
            recent_performance=records,
        )
        values.update(overrides)
        return ExerciseProgression(**values)
    return _make
