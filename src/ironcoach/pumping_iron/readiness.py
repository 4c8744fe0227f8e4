"""
Session Readiness

Internal Codename: PUMPING-IRON
Scores pre-workout readiness from recovery markers and the recent RPE trend.

Score out of 100:
- Sleep quality (30)
- Energy level (25)
- Muscle soreness (20)
- Recent RPE trend (25)
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

from ..models import PerformanceRecord

logger = logging.getLogger(__name__)


class ReadinessLevel(Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    MODERATE = "moderate"
    POOR = "poor"


# (minimum score, level, working weight multiplier, headline)
READINESS_TIERS = (
    (85, ReadinessLevel.EXCELLENT, 1.05, "You're primed for a great workout! Consider pushing intensity."),
    (65, ReadinessLevel.GOOD, 1.0, "Good readiness - stick to planned weights and intensities."),
    (45, ReadinessLevel.MODERATE, 0.9, "Moderate readiness - consider reducing weight by 10%."),
    (0, ReadinessLevel.POOR, 0.75, "Poor readiness - focus on movement and recovery today."),
)

DEFAULT_SESSION_RPE = 7      # Assumed when a record has no RPE
NEW_USER_TREND_POINTS = 15   # Fewer than 2 records


@dataclass
class ReadinessAssessment:
    readiness: ReadinessLevel
    score: int
    suggested_intensity: float
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'readiness': self.readiness.value,
            'score': self.score,
            'suggested_intensity': self.suggested_intensity,
            'recommendations': list(self.recommendations),
        }


def _sleep_points(sleep_quality: float) -> int:
    if sleep_quality >= 8:
        return 30
    if sleep_quality >= 6:
        return 20
    if sleep_quality >= 4:
        return 10
    return 0


def _energy_points(energy_level: float) -> int:
    if energy_level >= 8:
        return 25
    if energy_level >= 6:
        return 18
    if energy_level >= 4:
        return 10
    return 0


def _soreness_points(muscle_soreness: float) -> int:
    if muscle_soreness <= 2:
        return 20
    if muscle_soreness <= 4:
        return 15
    if muscle_soreness <= 6:
        return 8
    return 0


def _trend_points(average_rpe: float) -> int:
    if average_rpe <= 7:
        return 25
    if average_rpe <= 8:
        return 18
    if average_rpe <= 9:
        return 10
    return 0


def assess_workout_readiness(
    recent_performance: List[PerformanceRecord],
    sleep_quality: float = 8,
    energy_level: float = 7,
    muscle_soreness: float = 3
) -> ReadinessAssessment:
    """
    Assess readiness for today's session.

    Args:
        recent_performance: Performance records, newest first
        sleep_quality: 1-10
        energy_level: 1-10
        muscle_soreness: 1-10 (10 = very sore)

    Returns:
        ReadinessAssessment with a working weight multiplier (0.75-1.05)
    """
    recommendations = []

    score = _sleep_points(sleep_quality)
    if score == 0:
        recommendations.append("Poor sleep detected - consider lighter intensity today")

    energy = _energy_points(energy_level)
    if energy == 0:
        recommendations.append("Low energy - focus on movement quality over intensity")
    score += energy

    soreness = _soreness_points(muscle_soreness)
    if soreness == 0:
        recommendations.append("High muscle soreness - extend warm-up and reduce intensity")
    score += soreness

    if len(recent_performance) >= 2:
        window = recent_performance[:3]
        avg_rpe = sum(
            r.rpe if r.rpe is not None else DEFAULT_SESSION_RPE for r in window
        ) / len(window)
        trend = _trend_points(avg_rpe)
        if trend == 0:
            recommendations.append("Recent high RPE sessions - consider deload or rest day")
        score += trend
    else:
        score += NEW_USER_TREND_POINTS

    for minimum, level, intensity, headline in READINESS_TIERS:
        if score >= minimum:
            break

    recommendations.insert(0, headline)
    logger.debug(f"Readiness score {score} -> {level.value}")

    return ReadinessAssessment(
        readiness=level,
        score=score,
        suggested_intensity=intensity,
        recommendations=recommendations,
    )
