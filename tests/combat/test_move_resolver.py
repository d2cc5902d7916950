"""
Tests for move resolution: openings, punishment, repositioning, damage and
application of the result.
"""

import pytest

from duelsim.character.moves import Move
from duelsim.combat.move_resolver import apply_move_result, resolve_move
from duelsim.core.constants import (
    CollateralImpact,
    EffectivenessLevel,
    EffectType,
    Element,
    LogEventType,
    MoveType,
)
from duelsim.effects.status_effect import StatusEffectSpec
from duelsim.effects.tactical_state import EXPOSED, REPOSITIONED
from duelsim.environment.conditions import (
    BattleConditions,
    calculate_collateral,
    environmental_modifiers,
)
from duelsim.environment.location import LocationConditions

NO_CRIT = 0.99


def test_stunned_defender_is_an_opening(attacker, defender, lightning, effects, scripted_rng):
    """A requires-opening move against a stunned defender pays off."""
    effects.apply(defender, StatusEffectSpec(effect_type=EffectType.STUN, duration=1), "test", 1)

    result = resolve_move(lightning, attacker, defender, None, [], scripted_rng(NO_CRIT))

    assert result.payoff
    assert not result.was_punished
    assert result.effectiveness == EffectivenessLevel.STRONG
    assert result.damage == 50.0


def test_missing_opening_is_punished(attacker, defender, lightning, scripted_rng):
    """The same move against an unbroken defender is punished."""
    result = resolve_move(lightning, attacker, defender, None, [], scripted_rng(NO_CRIT))

    assert result.was_punished
    assert not result.payoff
    assert result.effectiveness == EffectivenessLevel.WEAK
    assert result.damage == pytest.approx(4.0)
    assert result.momentum_attacker == -2
    assert result.momentum_defender == 2


def test_opening_state_is_consumed(attacker, defender, lightning, scripted_rng):
    """Exploiting a negative tactical state clears it from the defender."""
    defender.effects.set_tactical_state(EXPOSED.instantiate(1))
    log: list[str] = []

    result = resolve_move(lightning, attacker, defender, None, log, scripted_rng(NO_CRIT))

    assert result.payoff
    assert result.consumed_state_name == "Exposed"
    assert defender.tactical_state is None
    assert any("exploits" in line for line in log)


def test_failed_reposition_deals_no_damage(attacker, defender, sidestep, scripted_rng):
    """A failed reposition leaves the mover off-balance and deals nothing."""
    result = resolve_move(sidestep, attacker, defender, None, [], scripted_rng(NO_CRIT))

    assert result.reposition_failed
    assert result.damage == 0.0
    assert result.effectiveness == EffectivenessLevel.WEAK
    assert attacker.tactical_state.name == "Off-Balance"
    assert result.momentum_attacker == -1


def test_successful_reposition_grants_positive_state(attacker, defender, sidestep, scripted_rng):
    """A successful reposition deals no damage but leaves the mover Repositioned."""
    result = resolve_move(sidestep, attacker, defender, None, [], scripted_rng(0.0))

    assert result.reposition_success
    assert result.damage == 0.0
    assert attacker.tactical_state.name == "Repositioned"
    assert not attacker.has_opening
    assert result.momentum_attacker == 1


def test_repositioned_boosts_next_damaging_move(attacker, defender, jab, scripted_rng):
    """The Repositioned state powers up the next damaging move and is spent."""
    attacker.effects.set_tactical_state(REPOSITIONED.instantiate(1))

    result = resolve_move(jab, attacker, defender, None, [], scripted_rng(NO_CRIT))

    assert result.effectiveness == EffectivenessLevel.STRONG
    assert result.damage == pytest.approx(19.2)
    assert attacker.tactical_state is None


def test_missing_move_falls_back_to_struggle(attacker, defender, scripted_rng):
    """Resolving without a move uses Struggle."""
    result = resolve_move(None, attacker, defender, None, [], scripted_rng(NO_CRIT))
    assert result.move_name == "Struggle"


def test_missing_fighter_gives_neutral_result(defender, jab, scripted_rng):
    """Resolving without an attacker yields a harmless result."""
    result = resolve_move(jab, None, defender, None, [], scripted_rng(NO_CRIT))
    assert result.damage == 0.0
    assert "missing fighter" in result.notes


def test_full_mitigation_negates_damage(attacker, defender, jab, scripted_rng):
    """A fully mitigated move deals no damage."""
    result = resolve_move(jab, attacker, defender, None, [], scripted_rng(NO_CRIT), mitigation=1.0)
    assert result.damage == 0.0
    assert result.damage_steps["mitigation"] == 0.0


def test_critical_hit_applies_and_stuns(attacker, defender, jab, effects, scripted_rng):
    """A critical roll deals half the power and staggers the defender."""
    result = resolve_move(jab, attacker, defender, None, [], scripted_rng(0.0))
    assert result.effectiveness == EffectivenessLevel.CRITICAL
    assert result.damage == pytest.approx(20.0)
    assert result.stun_defender

    apply_move_result(result, attacker, defender, effects, 1, effects.log)

    assert defender.health == pytest.approx(80.0)
    assert attacker.energy == pytest.approx(100.0 - jab.cost)
    assert defender.is_stunned
    assert effects.log.of_type(LogEventType.MOVE)


def test_damage_never_pushes_health_below_zero(attacker, defender, jab, effects, scripted_rng):
    """Applying a hit to a nearly beaten fighter stops health at zero."""
    defender.health = 5
    result = resolve_move(jab, attacker, defender, None, [], scripted_rng(0.0))
    apply_move_result(result, attacker, defender, effects, 1)
    assert defender.health == 0.0
    assert defender.is_down()


def test_move_effect_targets_self(attacker, defender, effects, scripted_rng):
    """A move whose effect targets its user buffs the attacker."""
    shield = Move(
        name="Flame Burst",
        move_type=MoveType.DEFENSE,
        power=50,
        applies_effect=StatusEffectSpec(
            effect_type=EffectType.DEFENSE_UP, duration=2, potency=25, target="self"
        ),
    )
    result = resolve_move(shield, attacker, defender, None, [], scripted_rng(NO_CRIT))
    apply_move_result(result, attacker, defender, effects, 1)

    assert result.damage == 0.0
    assert attacker.effects.has(EffectType.DEFENSE_UP)
    assert not defender.effects.has(EffectType.DEFENSE_UP)


def test_energy_cost_formula():
    """Cost is derived from power unless given explicitly."""
    assert Move(name="A", move_type=MoveType.OFFENSE, power=50).cost == 15
    assert Move(name="B", move_type=MoveType.OFFENSE, power=0).cost == 4
    assert Move(name="C", move_type=MoveType.OFFENSE, power=100).cost == 26
    assert Move(name="D", move_type=MoveType.OFFENSE, power=100, energy_cost=7).cost == 7


def test_collateral_is_capped():
    """Collateral never exceeds the per-move cap."""
    location = LocationConditions(id="glass", name="Glass House", fragility=1.0)
    quake = Move(
        name="Quake",
        move_type=MoveType.FINISHER,
        power=100,
        element=Element.EARTH,
        collateral_impact=CollateralImpact.CATASTROPHIC,
    )
    assert calculate_collateral(quake, BattleConditions(location=location)) == 30.0
    assert calculate_collateral(quake.model_copy(update={"collateral_impact": CollateralImpact.NONE}), None) == 0.0


def test_sun_only_feeds_benders(conditions, lightning):
    """Daylight empowers a bender's lightning but not a non-bender's."""
    assert environmental_modifiers(lightning, conditions, is_bender=True).damage_multiplier == pytest.approx(1.1)
    assert environmental_modifiers(lightning, conditions, is_bender=False).damage_multiplier == 1.0


def test_disabled_element_is_suppressed(jab):
    """A location can suppress an element entirely."""
    location = LocationConditions(id="prison", name="Prison", disabled_elements=(Element.AIR,))
    gust = Move(name="Gust", move_type=MoveType.OFFENSE, power=30, element=Element.AIR)
    modifiers = environmental_modifiers(gust, BattleConditions(location=location))
    assert modifiers.disabled
    assert modifiers.damage_multiplier == pytest.approx(0.25)
    assert not environmental_modifiers(jab, BattleConditions(location=location)).disabled
