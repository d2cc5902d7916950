"""
Tests for the mental state machine and its stress sources.
"""

import pytest

from duelsim.character.fighter import FighterState
from duelsim.character.template import Relationship
from duelsim.combat.move_resolver import MoveResult
from duelsim.core.constants import EffectivenessLevel, LogEventType, MentalLevel, MoveType
from duelsim.core.events import BattleLog
from duelsim.effects.tactical_state import EXPOSED
from duelsim.environment.conditions import BattleConditions
from duelsim.state.mental_state import (
    STRESS_CAP,
    StressReport,
    apply_stress,
    level_for_stress,
    stress_from_collateral,
    stress_from_hit,
    stress_from_own_action,
    stress_from_situation,
)


def _report(amount: float) -> StressReport:
    report = StressReport()
    report.add("test", amount)
    return report


def test_levels_follow_thresholds():
    """Stress maps onto levels through the resilience-scaled thresholds."""
    assert level_for_stress(0) == MentalLevel.STABLE
    assert level_for_stress(25) == MentalLevel.STRESSED
    assert level_for_stress(60) == MentalLevel.SHAKEN
    assert level_for_stress(90) == MentalLevel.BROKEN
    assert level_for_stress(25, resilience=1.5) == MentalLevel.STABLE


def test_transition_is_logged(attacker):
    """Crossing a threshold changes the level and emits an event."""
    log = BattleLog()
    new_level = apply_stress(attacker, _report(30), turn=2, log=log)

    assert new_level == MentalLevel.STRESSED
    assert attacker.mental_state.changed_this_turn
    assert attacker.mental_state.history == ["stable->stressed@2"]
    assert log.of_type(LogEventType.MENTAL_STATE)[0].details["to"] == "stressed"


def test_stress_never_decreases(attacker):
    """Zero or negative reports leave stress and level untouched."""
    apply_stress(attacker, _report(30), turn=1)
    before = attacker.mental_state.stress
    assert apply_stress(attacker, _report(-10), turn=2) is None
    assert attacker.mental_state.stress == before
    assert attacker.mental_level == MentalLevel.STRESSED


def test_broken_is_terminal(attacker):
    """Once broken, more stress is tracked but the level never changes."""
    apply_stress(attacker, _report(100), turn=1)
    assert attacker.mental_level == MentalLevel.BROKEN
    assert apply_stress(attacker, _report(100), turn=2) is None
    assert attacker.mental_level == MentalLevel.BROKEN
    assert attacker.mental_state.stress == STRESS_CAP


def test_relationships_only_count_in_emotional_mode(blaze_template):
    """A rival amplifies stress only when emotional mode is on."""
    template = blaze_template.model_copy(
        update={"relationships": {"tide": Relationship(stress_modifier=2.0)}}
    )
    calm = FighterState(template, "tide")
    emotional = FighterState(template, "tide")

    apply_stress(calm, _report(10), turn=1, emotional_mode=False)
    apply_stress(emotional, _report(10), turn=1, emotional_mode=True)

    assert calm.mental_state.stress == pytest.approx(10.0)
    assert emotional.mental_state.stress == pytest.approx(20.0)


def test_hit_and_own_action_sources():
    """Being hit hard and whiffing both produce stress."""
    strong = MoveResult(
        move_name="Jab", move_type=MoveType.OFFENSE, effectiveness=EffectivenessLevel.STRONG, damage=10
    )
    weak = MoveResult(
        move_name="Jab", move_type=MoveType.OFFENSE, effectiveness=EffectivenessLevel.WEAK
    )
    failed = MoveResult(
        move_name="Sidestep",
        move_type=MoveType.UTILITY,
        effectiveness=EffectivenessLevel.WEAK,
        reposition_failed=True,
    )
    assert stress_from_hit(strong).total == pytest.approx(20.0)
    assert stress_from_own_action(weak).sources == {"weak_action": 5.0}
    assert stress_from_own_action(failed).sources == {"failed_reposition": 8.0}
    assert stress_from_hit(None).total == 0.0


def test_situational_stress(attacker, arena):
    """Negative momentum, harsh states and personal stressors add up."""
    attacker.momentum = -2
    attacker.effects.set_tactical_state(EXPOSED.instantiate(1))
    haunted = arena.model_copy(update={"personal_stressors": {"blaze": 4.0}})

    calm = stress_from_situation(attacker, BattleConditions(location=haunted))
    emotional = stress_from_situation(
        attacker, BattleConditions(location=haunted, emotional_mode=True)
    )

    assert calm.sources == {"negative_momentum": 4.0, "tactical_state": 15.0}
    assert emotional.sources["location_stressor"] == 4.0


def test_collateral_stress_respects_tolerance(attacker):
    """Fighters who do not mind destruction shrug off collateral."""
    assert stress_from_collateral(attacker, 0).total == 0.0
    assert stress_from_collateral(attacker, 50).total == pytest.approx(6.0)
    hardened = FighterState(
        attacker.template.model_copy(update={"collateral_tolerance": 1.0}), "tide"
    )
    assert stress_from_collateral(hardened, 50).total == 0.0

