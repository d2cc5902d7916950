"""
Tests for the AI: priority rules, weighting, prediction, intents and
personality drift.
"""

import pytest

from duelsim.ai.decision_engine import choose_move, softmax_probabilities
from duelsim.ai.intent import determine_intent, intent_multiplier
from duelsim.ai.personality import apply_personality_drift, dynamic_personality
from duelsim.ai.prediction import predict_next_move
from duelsim.ai.rules import AIContext, AIRule, clear_ai_rules, compile_rule, register_ai_rule
from duelsim.character.fighter import FighterState
from duelsim.character.memory import AIMemory
from duelsim.character.template import AIRuleSpec
from duelsim.core.constants import BattlePhase, EffectivenessLevel, Intent, MentalLevel
from duelsim.core.error_handling import ContentValidationError
from duelsim.core.rng import BattleRandom
from duelsim.core.settings import DEFAULT_SETTINGS
from duelsim.effects.tactical_state import EXPOSED


@pytest.fixture
def registered_rules():
    yield register_ai_rule
    clear_ai_rules("blaze")


def _choose(fighter, opponent, battle_state, rng, phase=BattlePhase.EARLY, turn=1):
    return choose_move(
        fighter, opponent, battle_state, battle_state.conditions, turn, phase, rng
    )


def test_must_react_rule_fires(blaze_template, defender, battle_state, seeded_rng):
    """A rule at or above the must-react priority picks the move outright."""
    template = blaze_template.model_copy(
        update={
            "ai_rules": (
                AIRuleSpec(
                    name="finish_weakened",
                    priority=11,
                    move="Jab",
                    condition="opponent_health_below",
                    condition_arg=50,
                ),
            )
        }
    )
    fighter = FighterState(template, "tide")
    defender.health = 40

    decision = _choose(fighter, defender, battle_state, seeded_rng)

    assert decision.move.name == "Jab"
    assert decision.trace.rule_fired == "finish_weakened"
    assert fighter.decision_trace == [decision.trace]


def test_failing_rule_is_skipped(attacker, defender, battle_state, seeded_rng, registered_rules):
    """A rule that raises is logged in the trace and the AI carries on."""
    registered_rules(
        "blaze",
        AIRule(name="explodes", priority=20, condition=lambda ctx: 1 / 0, selector=lambda ctx: None),
    )

    decision = _choose(attacker, defender, battle_state, seeded_rng)

    assert decision.trace.rule_errors[0].startswith("explodes")
    assert decision.move.name in {m.name for m in attacker.moves} | {"Struggle"}


def test_energy_starved_fighter_struggles(attacker, defender, battle_state, seeded_rng):
    """With no affordable move, the AI falls back to Struggle."""
    attacker.energy = 0

    decision = _choose(attacker, defender, battle_state, seeded_rng)

    assert decision.move.name == "Struggle"
    assert all(w.weight == 0.0 for w in decision.trace.weights if w.move_name != "Struggle")


def test_opening_boosts_opening_moves(blaze_template, tide_template, battle_state):
    """An opening makes requires-opening moves far more attractive."""

    def lightning_weight(open_defender: bool) -> float:
        fighter = FighterState(blaze_template, "tide")
        opponent = FighterState(tide_template, "blaze")
        if open_defender:
            opponent.effects.set_tactical_state(EXPOSED.instantiate(1))
        decision = _choose(fighter, opponent, battle_state, BattleRandom.seeded(1), BattlePhase.LATE, 5)
        return next(w.weight for w in decision.trace.weights if w.move_name == "Lightning Generation")

    assert lightning_weight(True) > lightning_weight(False) * 100


def test_decisions_are_reproducible(blaze_template, tide_template, battle_state):
    """The same seed gives the same sequence of choices."""

    def run(seed: int) -> list[str]:
        fighter = FighterState(blaze_template, "tide")
        opponent = FighterState(tide_template, "blaze")
        rng = BattleRandom.seeded(seed)
        return [
            _choose(fighter, opponent, battle_state, rng, turn=turn).move.name
            for turn in range(1, 6)
        ]

    assert run(9) == run(9)


def test_softmax_probabilities_sum_to_one():
    """Softmax keeps the order of the weights."""
    probabilities = softmax_probabilities([1.0, 2.0, 4.0], temperature=1.0)
    assert sum(probabilities) == pytest.approx(1.0)
    assert probabilities == sorted(probabilities)


def test_prediction_needs_enough_observations():
    """A single transition is not enough to predict anything."""
    memory = AIMemory()
    for name in ("Jab", "Guard", "Jab"):
        memory.record_opponent_move(name)
    assert predict_next_move(memory) == (None, 0.0)
    assert predict_next_move(memory, min_observations=1) == ("Guard", 1.0)


def test_prediction_picks_most_frequent_follow_up():
    """The move that most often followed the last one is predicted."""
    memory = AIMemory()
    for name in ("Jab", "Guard", "Jab", "Guard", "Jab"):
        memory.record_opponent_move(name)
    assert memory.opponent_sequence_log == {"Jab": {"Guard": 2}, "Guard": {"Jab": 2}}
    assert predict_next_move(memory) == ("Guard", 1.0)


def test_shaken_fighter_panics(attacker, defender):
    """A shaken fighter with ordinary traits defends in a panic."""
    attacker.mental_state.level = MentalLevel.SHAKEN
    profile = {trait: 0.5 for trait in ("opportunism", "risk_tolerance", "patience", "aggression")}
    assert determine_intent(attacker, defender, 5, profile) == Intent.PANICKED_DEFENSE


def test_turtling_opponent_is_broken(attacker, defender):
    """A passive streak from the opponent triggers BreakTheTurtle."""
    defender.consecutive_passive = 2
    profile = dynamic_personality(attacker)
    assert determine_intent(attacker, defender, 5, profile) == Intent.BREAK_THE_TURTLE


def test_conserve_energy_favours_cheap_moves(guard, lightning):
    """ConserveEnergy rewards low-cost moves only."""
    assert intent_multiplier(Intent.CONSERVE_ENERGY, guard) == 3.0
    assert intent_multiplier(Intent.CONSERVE_ENERGY, lightning) == 1.0


def test_broken_reshapes_personality_without_writing_back(attacker):
    """The dynamic profile reflects the mental level; the stored one does not."""
    attacker.mental_state.level = MentalLevel.BROKEN
    profile = dynamic_personality(attacker)
    assert profile["patience"] == 0.05
    assert attacker.personality.patience == 0.5


def test_weak_streak_drifts_personality(attacker, blaze_template):
    """Two weak results in a row make the fighter more creative and reckless."""
    assert apply_personality_drift(attacker, EffectivenessLevel.WEAK) == []
    drifted = apply_personality_drift(attacker, EffectivenessLevel.WEAK)

    assert drifted == ["creativity", "risk_tolerance"]
    assert attacker.personality.creativity == pytest.approx(0.65)
    assert attacker.personality.risk_tolerance == pytest.approx(0.6)
    assert blaze_template.personality.creativity == 0.5


def test_unknown_rule_condition_is_rejected():
    """Compiling a rule with an unregistered condition fails."""
    with pytest.raises(ContentValidationError):
        compile_rule(AIRuleSpec(name="bad", move="Jab", condition="moon_is_full"))


def test_rule_context_defaults_to_shared_settings(attacker, defender, battle_state):
    """A rule context built without settings reads the defaults."""
    ctx = AIContext(attacker, defender, battle_state, battle_state.conditions, 1, BattlePhase.EARLY)
    assert ctx.settings is DEFAULT_SETTINGS

    rule = compile_rule(AIRuleSpec(name="punish", move="Jab", condition="opponent_is_stunned"))
    assert not rule.condition(ctx)
    assert rule.selector(ctx).name == "Jab"
