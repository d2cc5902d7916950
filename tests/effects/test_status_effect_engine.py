"""
Tests for the status effect engine: application, ticking, expiry, the burn
crisis and fusions.
"""

import pytest

from duelsim.core.constants import EffectCategory, EffectType, LogEventType
from duelsim.effects.status_effect import ActiveStatusEffect, StatusEffectSpec
from duelsim.effects.status_effect_engine import (
    TICK_HANDLERS,
    incoming_damage_multiplier,
)


def _spec(effect_type: EffectType, duration: int, potency: float = 0.0) -> StatusEffectSpec:
    return StatusEffectSpec(effect_type=effect_type, duration=duration, potency=potency)


def test_every_effect_type_has_a_handler():
    """Dispatch covers the whole closed set of effect types."""
    assert set(TICK_HANDLERS) == set(EffectType)


def test_effect_ids_are_unique(effects):
    """Each created effect gets its own id."""
    first = effects.create(_spec(EffectType.BURN, 2, 3), "test", 1)
    second = effects.create(_spec(EffectType.BURN, 2, 3), "test", 1)
    assert first.id != second.id
    assert first.category == EffectCategory.DEBUFF


def test_duration_one_effect_ticks_once(effects, defender):
    """A one-tick burn deals its damage once and then expires."""
    effects.apply(defender, _spec(EffectType.BURN, 1, 5), "test", 1)
    effects.process_turn(defender, 1)

    assert defender.health == pytest.approx(95.0)
    assert not defender.effects.has(EffectType.BURN)

    effects.process_turn(defender, 2)
    assert defender.health == pytest.approx(95.0)


def test_reapplying_refreshes_instead_of_stacking(effects, defender):
    """The same effect type is refreshed to the longer duration."""
    effects.apply(defender, _spec(EffectType.SLOW, 2, 5), "a", 1)
    effects.apply(defender, _spec(EffectType.SLOW, 4, 3), "b", 1)

    assert len(defender.effects) == 1
    slow = defender.effects.get(EffectType.SLOW)
    assert slow.duration == 4
    assert slow.potency == 5


def test_durations_strictly_decrease(effects, defender):
    """Every tick lowers the remaining duration by one."""
    effects.apply(defender, _spec(EffectType.HEAL_OVER_TIME, 3, 2), "test", 1)
    heal = defender.effects.get(EffectType.HEAL_OVER_TIME)
    effects.process_turn(defender, 1)
    assert heal.duration == 2
    effects.process_turn(defender, 2)
    assert heal.duration == 1


def test_heal_never_exceeds_maximum(effects, defender):
    """Healing stops at full health."""
    effects.apply(defender, _spec(EffectType.HEAL_OVER_TIME, 2, 10), "test", 1)
    effects.process_turn(defender, 1)
    assert defender.health == 100.0


def test_burn_crisis_then_fusion(effects, defender):
    """A third burn tick adds a defense break, which fuses with the burn."""
    effects.apply(defender, _spec(EffectType.BURN, 5, 2), "test", 1)
    effects.process_turn(defender, 1)
    effects.process_turn(defender, 2)
    assert not defender.effects.has(EffectType.DEFENSE_DOWN)

    effects.process_turn(defender, 3)

    assert not defender.effects.has(EffectType.BURN)
    assert not defender.effects.has(EffectType.DEFENSE_DOWN)
    stun = defender.effects.get(EffectType.STUN)
    assert stun is not None and stun.name == "Armor Shattered"
    assert effects.log.of_type(LogEventType.FUSION)


def test_fusion_consumes_ingredients(effects, defender):
    """Holding both ingredients at the end of a tick fuses them."""
    effects.apply(defender, _spec(EffectType.BURN, 3, 2), "test", 1)
    effects.apply(defender, _spec(EffectType.DEFENSE_DOWN, 3, 20), "test", 1)

    effects.process_turn(defender, 1)

    assert [e.effect_type for e in defender.effects] == [EffectType.STUN]
    assert defender.is_stunned


def test_defense_modifiers_scale_incoming_damage(effects, defender):
    """Defense up and down shift the incoming multiplier, with a floor."""
    effects.apply(defender, _spec(EffectType.DEFENSE_DOWN, 2, 20), "test", 1)
    assert incoming_damage_multiplier(defender) == pytest.approx(1.2)

    defender.effects.active.clear()
    effects.apply(defender, _spec(EffectType.DEFENSE_UP, 2, 95), "test", 1)
    assert incoming_damage_multiplier(defender) == pytest.approx(0.1)


def test_negative_duration_is_rejected():
    """A live effect cannot start with a negative duration."""
    with pytest.raises(ValueError):
        ActiveStatusEffect(
            id="x",
            name="Broken",
            effect_type=EffectType.BURN,
            category=EffectCategory.DEBUFF,
            duration=-1,
        )


def test_stun_outlasts_the_end_of_turn_tick(effects, defender):
    """A stun is only spent by a lost segment, never by the turn tick."""
    effects.apply(defender, _spec(EffectType.STUN, 2), "test", 1)
    effects.process_turn(defender, 1)
    effects.process_turn(defender, 2)

    stun = defender.effects.get(EffectType.STUN)
    assert stun.duration == 2 and defender.is_stunned

    assert effects.spend_skipped_segment(defender) is stun
    assert stun.duration == 1 and defender.is_stunned
    effects.spend_skipped_segment(defender)

    assert not defender.is_stunned
    assert effects.log.events[-1].details == {"effect_id": stun.id, "expired": True}
    assert effects.spend_skipped_segment(defender) is None
