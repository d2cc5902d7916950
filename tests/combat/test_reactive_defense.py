"""
Tests for the reactive defense layer (lightning redirection).
"""

import pytest

from duelsim.character.fighter import FighterState
from duelsim.combat.move_resolver import resolve_move
from duelsim.combat.reactive_defense import (
    LIGHTNING_REDIRECTION,
    attempt_reactive_defense,
    success_chance,
)
from duelsim.core.constants import LogEventType, MentalLevel
from duelsim.core.events import BattleLog


@pytest.fixture
def azula(blaze_template):
    return FighterState(blaze_template.model_copy(update={"id": "azula"}), "tide")


def test_redirection_success_chance_tiers(defender):
    """The chance drops with health and with mental state."""
    assert success_chance(LIGHTNING_REDIRECTION, defender) == pytest.approx(0.75)
    defender.health = 45
    assert success_chance(LIGHTNING_REDIRECTION, defender) == pytest.approx(0.625)
    defender.health = 20
    assert success_chance(LIGHTNING_REDIRECTION, defender) == pytest.approx(0.35)
    defender.health = 100
    defender.mental_state.level = MentalLevel.SHAKEN
    assert success_chance(LIGHTNING_REDIRECTION, defender) == pytest.approx(0.55)


def test_chance_never_leaves_bounds(defender):
    """Stacked penalties are clamped to the minimum chance."""
    defender.health = 1
    defender.mental_state.level = MentalLevel.BROKEN
    assert success_chance(LIGHTNING_REDIRECTION, defender) == pytest.approx(0.05)


def test_successful_redirection_negates_and_stuns(azula, defender, lightning, scripted_rng):
    """A successful redirection negates the attack and swings momentum."""
    log = BattleLog()
    result = attempt_reactive_defense(lightning, azula, defender, scripted_rng(0.0), log=log)

    assert result.attempted and result.success
    assert result.mitigation == 1.0
    assert result.stun_attacker_turns == 1
    assert defender.momentum == 3
    assert azula.momentum == -2
    assert log.of_type(LogEventType.REACTIVE_DEFENSE)[0].details["success"] is True

    resolved = resolve_move(
        lightning, azula, defender, None, [], scripted_rng(0.99), mitigation=result.mitigation
    )
    assert resolved.damage == 0.0


def test_failed_redirection_still_softens(azula, defender, lightning, scripted_rng):
    """A failed redirection still absorbs part of the blow."""
    result = attempt_reactive_defense(lightning, azula, defender, scripted_rng(0.99))

    assert result.attempted and not result.success
    assert result.mitigation == pytest.approx(0.4)
    assert result.stun_attacker_turns == 0
    assert defender.momentum == -1
    assert azula.momentum == 1


def test_no_profile_matches_other_attackers(attacker, defender, lightning, seeded_rng):
    """Redirection only applies to the listed attackers."""
    result = attempt_reactive_defense(lightning, attacker, defender, seeded_rng)
    assert not result.attempted
    assert seeded_rng.draws == 0


def test_no_profile_matches_other_moves(azula, defender, jab, seeded_rng):
    """Moves without the lightning tag are never intercepted."""
    assert not attempt_reactive_defense(jab, azula, defender, seeded_rng).attempted
