#!/usr/bin/env python3
"""
ironcoach CLI - SPOTTER

Internal Codename: SPOTTER
Command-line front end for the load calculation layer.

Usage:
    ironcoach protocol NAME --weight W --reps R [--equipment E] [--goal G]
    ironcoach validate NAME --weight W --reps R [--equipment E]
    ironcoach adjust --from NAME --to NAME --weight W [--experience X]
    ironcoach assess [EXERCISE ...] [--experience X] [--access TAG]
    ironcoach progress HISTORY_FILE [--experience X]
    ironcoach readiness [--sleep S] [--energy E] [--soreness S] [--history FILE]
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
import yaml

from ironcoach.biomechanics import Difficulty, EquipmentType, TrainingGoal
from ironcoach.config import CoachConfig
from ironcoach.diagnostics import ValidationResult
from ironcoach.models import ExerciseProgression
from ironcoach.normalizer import resolve_exercise
from ironcoach.pumping_iron.assessment import UserContext, create_assessment, create_fallback_assessment
from ironcoach.pumping_iron.progression import ProgressionEngine
from ironcoach.pumping_iron.protocol import build_protocol_from_input, validate_comfortable_weight
from ironcoach.pumping_iron.readiness import assess_workout_readiness
from ironcoach.pumping_iron.safety import adjust_weight, limit_for_experience

logger = logging.getLogger(__name__)

EQUIPMENT_CHOICES = click.Choice([e.value for e in EquipmentType])
GOAL_CHOICES = click.Choice([g.value for g in TrainingGoal])
EXPERIENCE_CHOICES = click.Choice([d.value for d in Difficulty])


def _fail(message: str):
    click.echo(f"❌ Error: {message}")
    sys.exit(1)


def _load_progression(history_file: str) -> ExerciseProgression:
    # JSON is a subset of YAML, so one loader covers both
    with open(history_file) as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{history_file} must contain a mapping")
    return ExerciseProgression.from_dict(data)


@click.group()
@click.option('--config', 'config_path', type=click.Path(dir_okay=False), default=None,
              help='YAML config file (default: config/ironcoach.yaml)')
@click.pass_context
def cli(ctx, config_path: Optional[str]):
    """
    ironcoach - Research-based training loads

    PUMPING-IRON: Every set, calculated.
    """
    try:
        config = CoachConfig.from_yaml(Path(config_path) if config_path else None)
    except ValueError as e:
        _fail(str(e))

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    ctx.obj = config


@cli.command()
@click.argument('name')
@click.option('--weight', type=float, required=True, help='Comfortable working weight (kg)')
@click.option('--reps', type=int, required=True, help='Reps at that weight')
@click.option('--equipment', type=EQUIPMENT_CHOICES, default=None, help='Equipment (default: from config)')
@click.option('--goal', type=GOAL_CHOICES, default=None, help='Training goal (default: from config)')
@click.pass_obj
def protocol(config: CoachConfig, name: str, weight: float, reps: int,
             equipment: Optional[str], goal: Optional[str]):
    """Print the warm-up and working sets for an exercise."""
    try:
        equipment_type = EquipmentType(equipment) if equipment else config.equipment
        training_goal = TrainingGoal(goal) if goal else config.goal

        resolved = resolve_exercise(name, default_equipment=equipment_type)
        if resolved.warning:
            click.secho(f"⚠  {resolved.warning.message}", fg='yellow')

        result = build_protocol_from_input(
            name, weight, reps, equipment_type, training_goal,
            sorted(resolved.definition.primary_muscles)
        )
        if isinstance(result, ValidationResult):
            click.echo(f"❌ {result.message}")
            if result.suggested_weight is not None:
                click.echo(f"   Suggested weight: {result.suggested_weight:g}kg")
            if result.suggested_reps is not None:
                click.echo(f"   Suggested reps: {result.suggested_reps}")
            sys.exit(1)

        click.echo("=" * 60)
        click.echo(f"{result.exercise_name.upper()} - {result.goal.value.upper()}")
        click.echo("=" * 60)
        click.echo(f"Working weight: {result.working_weight:g}kg x {result.target_reps}")
        click.echo(f"Equipment: {result.equipment_type.value}")

        click.echo(f"\n{'─' * 60}")
        click.echo("WARM-UP")
        click.echo('─' * 60)
        for s in result.warmup_sets:
            click.echo(
                f"  {s.weight:>6g}kg x {s.rep_range:<5} ({s.percentage_of_working}%)  "
                f"rest {s.rest_seconds}s  - {s.description}"
            )

        click.echo(f"\n{'─' * 60}")
        click.echo("WORKING SETS")
        click.echo('─' * 60)
        for s in result.working_sets:
            click.echo(
                f"  {s.weight:>6g}kg x {s.rep_range:<5} RPE {s.target_rpe}  "
                f"rest {s.rest_seconds}s  - {s.description}"
            )

        click.echo(f"\nEstimated time: {result.total_estimated_minutes} minutes")
        click.echo("=" * 60)

    except ValueError as e:
        _fail(str(e))


@cli.command()
@click.argument('name')
@click.option('--weight', type=float, required=True, help='Comfortable working weight (kg)')
@click.option('--reps', type=int, required=True, help='Reps at that weight')
@click.option('--equipment', type=EQUIPMENT_CHOICES, default=None, help='Equipment (default: from config)')
@click.pass_obj
def validate(config: CoachConfig, name: str, weight: float, reps: int, equipment: Optional[str]):
    """Check a comfortable weight before building a protocol."""
    equipment_type = EquipmentType(equipment) if equipment else config.equipment
    result = validate_comfortable_weight(name, weight, reps, equipment_type)

    if result.is_valid:
        click.secho(f"✓ {weight:g}kg x {reps} looks good for {name}", fg='green')
        return

    click.echo(f"❌ {result.message}")
    if result.suggested_weight is not None:
        click.echo(f"   Suggested weight: {result.suggested_weight:g}kg")
    if result.suggested_reps is not None:
        click.echo(f"   Suggested reps: {result.suggested_reps}")
    sys.exit(1)


@cli.command()
@click.option('--from', 'from_exercise', required=True, help='Assessed exercise')
@click.option('--to', 'to_exercise', required=True, help='Exercise to carry the weight onto')
@click.option('--weight', type=float, required=True, help='Assessed weight (kg)')
@click.option('--experience', type=EXPERIENCE_CHOICES, default=None, help='Experience (default: from config)')
@click.pass_obj
def adjust(config: CoachConfig, from_exercise: str, to_exercise: str, weight: float,
           experience: Optional[str]):
    """Carry an assessed weight onto a similar exercise."""
    try:
        level = Difficulty(experience) if experience else config.experience

        resolved = resolve_exercise(to_exercise)
        if resolved.warning:
            click.secho(f"⚠  {resolved.warning.message}", fg='yellow')

        adjustment = adjust_weight(weight, from_exercise, to_exercise, resolved.definition)
        limited = limit_for_experience(adjustment.weight, level, to_exercise)

        click.echo(f"{from_exercise} {weight:g}kg -> {to_exercise} {limited.weight:g}kg")
        click.echo(f"  Factor: {adjustment.factor:.2f} (raw {adjustment.raw_weight:.1f}kg)")

        for notice in adjustment.notices + limited.notices:
            click.secho(f"  ⚠  {notice.message}", fg='yellow')

    except ValueError as e:
        _fail(str(e))


@cli.command()
@click.argument('exercises', nargs=-1)
@click.option('--experience', type=EXPERIENCE_CHOICES, default=None, help='Experience (default: from config)')
@click.option('--access', 'access', multiple=True, help='Equipment access tag (repeatable)')
@click.pass_obj
def assess(config: CoachConfig, exercises: Tuple[str, ...], experience: Optional[str],
           access: Tuple[str, ...]):
    """List the exercises to self-assess for a program."""
    user = UserContext(
        experience=Difficulty(experience) if experience else config.experience,
        equipment_access=tuple(a.lower() for a in access) or config.equipment_access,
        goal=config.goal,
    )

    if exercises:
        assessment = create_assessment(list(exercises), user)
    else:
        assessment = create_fallback_assessment(user)

    click.echo("=" * 60)
    click.echo("STRENGTH ASSESSMENT")
    click.echo("=" * 60)

    for warning in assessment.warnings:
        click.secho(f"⚠  {warning.message}", fg='yellow')

    for ex in assessment.assessment_exercises:
        click.echo(f"\n{ex.priority}. {ex.name} ({ex.category.value}, {ex.equipment.value})")
        click.echo(f"   {ex.description} - {ex.placeholder}")
        click.echo(f"   Covers: {', '.join(ex.represents_exercises)}")

    click.echo(f"\nEstimated time: {assessment.estimated_completion_minutes:g} minutes")
    click.echo("=" * 60)


@cli.command()
@click.argument('history_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--experience', type=EXPERIENCE_CHOICES, default=None, help='Experience (default: from config)')
@click.pass_obj
def progress(config: CoachConfig, history_file: str, experience: Optional[str]):
    """Decide whether to progress, deload or hold an exercise."""
    try:
        progression = _load_progression(history_file)
        engine = ProgressionEngine(Difficulty(experience) if experience else config.experience)
        decision = engine.evaluate(progression)
    except (ValueError, KeyError, yaml.YAMLError) as e:
        _fail(str(e))

    click.echo("=" * 60)
    click.echo(f"{progression.exercise_name.upper()} PROGRESSION")
    click.echo("=" * 60)
    click.echo(f"Current: {progression.current_weight:g}kg, "
               f"{progression.current_sets} x {progression.current_rep_range}")

    colour = {'ready-to-progress': 'green', 'needs-deload': 'red'}.get(decision.state.value)
    click.secho(f"State: {decision.state.value.upper()}", fg=colour)

    suggestion = decision.suggestion
    if suggestion:
        click.echo(f"\nSuggestion: {suggestion.type.value} "
                   f"{suggestion.current_value} -> {suggestion.suggested_value} "
                   f"({suggestion.confidence.value} confidence)")
        click.echo(f"  {suggestion.reason}")
        click.echo(f"  {suggestion.implementation_notes}")
        for notice in suggestion.notices:
            click.secho(f"  ⚠  {notice.message}", fg='yellow')
    else:
        click.echo("\nNo change: keep training at the current prescription.")

    insights = engine.get_progression_insights(progression)
    if insights:
        click.echo(f"\n{'─' * 60}")
        click.echo("INSIGHTS")
        click.echo('─' * 60)
        for insight in insights:
            click.echo(f"  • {insight}")

    click.echo("=" * 60)


@cli.command()
@click.option('--sleep', type=click.FloatRange(0, 10), default=8, help='Sleep quality 1-10')
@click.option('--energy', type=click.FloatRange(0, 10), default=7, help='Energy level 1-10')
@click.option('--soreness', type=click.FloatRange(0, 10), default=3, help='Muscle soreness 1-10')
@click.option('--history', 'history_file', type=click.Path(exists=True, dir_okay=False), default=None,
              help='Progression file whose recent sessions feed the RPE trend')
def readiness(sleep: float, energy: float, soreness: float, history_file: Optional[str]):
    """Score readiness for today's session."""
    recent = []
    if history_file:
        try:
            recent = _load_progression(history_file).recent_performance
        except (ValueError, KeyError, yaml.YAMLError) as e:
            _fail(str(e))

    result = assess_workout_readiness(recent, sleep, energy, soreness)

    colour = {'excellent': 'green', 'good': 'green', 'moderate': 'yellow', 'poor': 'red'}
    click.secho(f"Readiness: {result.readiness.value.upper()} ({result.score}/100)",
                fg=colour[result.readiness.value])
    click.echo(f"Suggested intensity: {result.suggested_intensity:.0%} of planned weights")
    for rec in result.recommendations:
        click.echo(f"  • {rec}")


if __name__ == '__main__':
    cli()
