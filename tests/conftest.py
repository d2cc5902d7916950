"""
Shared fixtures for the duel engine tests.
"""

import random

import pytest

from duelsim.battle.battle_state import BattleState
from duelsim.character.fighter import FighterState
from duelsim.character.moves import Move
from duelsim.character.template import CharacterTemplate
from duelsim.core.constants import Element, MoveType
from duelsim.core.content import ContentRepository
from duelsim.core.rng import BattleRandom
from duelsim.effects.status_effect_engine import StatusEffectEngine
from duelsim.environment.conditions import BattleConditions
from duelsim.environment.location import LocationConditions


class ScriptedRandom(random.Random):
    """Replays a fixed list of values; the last one repeats once exhausted."""

    def __init__(self, values):
        super().__init__(0)
        self.values = list(values)
        self.index = 0

    def random(self):
        value = self.values[min(self.index, len(self.values) - 1)]
        self.index += 1
        return value


@pytest.fixture
def scripted_rng():
    def factory(*values):
        return BattleRandom(ScriptedRandom(values))

    return factory


@pytest.fixture
def seeded_rng():
    return BattleRandom.seeded(42)


# ---- Moves ----


@pytest.fixture
def jab():
    return Move(name="Jab", move_type=MoveType.OFFENSE, power=40, tags=("melee_range",))


@pytest.fixture
def lightning():
    return Move(
        name="Lightning Generation",
        move_type=MoveType.FINISHER,
        power=100,
        element=Element.LIGHTNING,
        tags=("lightning_attack", "requires_opening", "high_risk"),
    )


@pytest.fixture
def guard():
    return Move(name="Guard", move_type=MoveType.DEFENSE, power=0, tags=("defensive_stance",))


@pytest.fixture
def sidestep():
    return Move(
        name="Sidestep",
        move_type=MoveType.UTILITY,
        power=10,
        element=Element.UTILITY,
        tags=("utility_reposition", "evasive"),
    )


# ---- Characters ----


@pytest.fixture
def blaze_template(jab, lightning, guard, sidestep):
    return CharacterTemplate(
        id="blaze",
        name="Blaze",
        element=Element.FIRE,
        moves=(jab, lightning, guard, sidestep),
    )


@pytest.fixture
def tide_template(jab, guard, sidestep):
    return CharacterTemplate(
        id="tide",
        name="Tide",
        element=Element.WATER,
        special_traits={"can_redirect_lightning": True},
        moves=(jab, guard, sidestep),
    )


@pytest.fixture
def attacker(blaze_template):
    return FighterState(blaze_template, "tide")


@pytest.fixture
def defender(tide_template):
    return FighterState(tide_template, "blaze")


# ---- Battle ----


@pytest.fixture
def arena():
    return LocationConditions(id="arena", name="Arena", allow_pre_battle_curbstomp=True)


@pytest.fixture
def conditions(arena):
    return BattleConditions(location=arena)


@pytest.fixture
def battle_state(conditions):
    return BattleState(conditions)


@pytest.fixture
def effects(battle_state):
    return StatusEffectEngine(log=battle_state.log)


@pytest.fixture
def repository():
    return ContentRepository()
