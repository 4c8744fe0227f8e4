"""
PUMPING-IRON: Load Calculation Layer

Internal Codename: PUMPING-IRON
"Pumping Iron: the numbers behind every set."

Deterministic coaching math, no I/O:
- Warm-up and working set protocols from a comfortable weight
- Safe weight propagation between similar exercises
- Minimal strength assessments covering a whole program
- Progress / deload / hold decisions from session history
- Pre-session readiness
"""

from .protocol import (
    ExerciseProtocol,
    WarmupSet,
    WorkingSet,
    build_protocol_from_input,
    create_exercise_protocol,
    validate_comfortable_weight,
)
from .safety import adjust_weight_for_exercise, apply_experience_limits, apply_safety_limits
from .assessment import (
    AssessedLift,
    UserContext,
    generate_all_protocols,
    select_assessment_exercises,
    select_representative,
)
from .progression import ProgressionEngine, ProgressionState
from .readiness import assess_workout_readiness

__all__ = [
    'ExerciseProtocol',
    'WarmupSet',
    'WorkingSet',
    'build_protocol_from_input',
    'create_exercise_protocol',
    'validate_comfortable_weight',
    'adjust_weight_for_exercise',
    'apply_experience_limits',
    'apply_safety_limits',
    'AssessedLift',
    'UserContext',
    'generate_all_protocols',
    'select_assessment_exercises',
    'select_representative',
    'ProgressionEngine',
    'ProgressionState',
    'assess_workout_readiness',
]
