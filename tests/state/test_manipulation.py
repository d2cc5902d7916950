"""
Tests for psychological manipulation.
"""

import pytest

from duelsim.character.fighter import FighterState
from duelsim.core.constants import LogEventType, MentalLevel
from duelsim.core.events import BattleLog
from duelsim.state.manipulation import (
    SHAKEN_STRESS,
    attempt_manipulation,
    manipulation_chance,
)


@pytest.fixture
def schemer(blaze_template):
    template = blaze_template.model_copy(update={"special_traits": {"manipulative": 0.8}})
    return FighterState(template, "tide")


def test_chance_follows_the_target_mind(schemer, defender):
    """Stressed targets listen more, broken ones barely, resilient ones less."""
    assert manipulation_chance(schemer, defender) == pytest.approx(0.4)

    defender.mental_state.level = MentalLevel.STRESSED
    assert manipulation_chance(schemer, defender) == pytest.approx(0.8)

    defender.special_traits["resilient_to_manipulation"] = 0.5
    assert manipulation_chance(schemer, defender) == pytest.approx(0.4)

    defender.mental_state.level = MentalLevel.BROKEN
    assert manipulation_chance(schemer, defender) == pytest.approx(0.08)


def test_plain_fighters_never_try(attacker, defender, seeded_rng):
    """Without the trait there is no attempt and no draw."""
    assert attempt_manipulation(attacker, defender, seeded_rng, turn=1) is None
    assert seeded_rng.draws == 0


def test_success_can_expose(schemer, defender, scripted_rng):
    """A landed taunt with the first coin face leaves the target Exposed."""
    log = BattleLog()
    result = attempt_manipulation(schemer, defender, scripted_rng(0.1, 0.2), turn=3, log=log)

    assert result.success and result.effect == "Exposed"
    assert defender.tactical_state.name == "Exposed"
    assert defender.tactical_state.turn_applied == 3
    assert defender.mental_state.stress > 0
    event = log.of_type(LogEventType.MANIPULATION)[0]
    assert (event.actor_id, event.target_id) == ("blaze", "tide")


def test_success_can_shake(schemer, defender, scripted_rng):
    """The other coin face hits the target's nerves instead."""
    result = attempt_manipulation(schemer, defender, scripted_rng(0.1, 0.9), turn=1)

    assert result.effect == "Shaken"
    assert defender.tactical_state is None
    assert defender.mental_state.stress == pytest.approx(
        SHAKEN_STRESS / defender.template.resilience
    )


def test_failed_taunt_changes_nothing(schemer, defender, scripted_rng):
    """A missed roll leaves the target untouched and logs nothing."""
    log = BattleLog()
    result = attempt_manipulation(schemer, defender, scripted_rng(0.95), turn=1, log=log)

    assert not result.success
    assert result.chance == pytest.approx(0.4)
    assert defender.mental_state.stress == 0.0
    assert not log.of_type(LogEventType.MANIPULATION)


def test_roster_schemers(repository):
    """The bundled roster carries the manipulation traits."""
    azula = FighterState(repository.get_character("azula"), "katara")
    katara = FighterState(repository.get_character("katara"), "azula")
    zuko = FighterState(repository.get_character("zuko"), "azula")

    assert manipulation_chance(azula, zuko) > manipulation_chance(azula, katara) > 0
    assert manipulation_chance(katara, azula) == 0.0
