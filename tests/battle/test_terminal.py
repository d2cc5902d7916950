"""
Tests for terminal state evaluation, phases and desperation.
"""

from duelsim.battle.battle_state import BattleState
from duelsim.battle.desperation import take_desperation_move, trigger_desperation
from duelsim.battle.phases import evaluate_phase
from duelsim.battle.terminal import TerminalStateEvaluator
from duelsim.core.constants import BattlePhase, Element, LogEventType, MentalLevel, TerminationReason
from duelsim.core.settings import BattleSettings
from duelsim.environment.conditions import BattleConditions
from duelsim.environment.location import ElementModifier, LocationConditions


def test_mutual_knockout(attacker, defender, battle_state):
    """Both fighters down is a draw."""
    attacker.health = 0
    defender.health = 0
    outcome = TerminalStateEvaluator().evaluate((attacker, defender), battle_state)
    assert outcome.reason == TerminationReason.MUTUAL_KO
    assert outcome.is_draw


def test_marked_and_down_is_mutual(attacker, defender, battle_state):
    """A marked fighter counts as out for the mutual knockout check."""
    attacker.health = 0
    battle_state.marked_for_defeat.add(defender.id)
    outcome = TerminalStateEvaluator().evaluate((attacker, defender), battle_state)
    assert outcome.reason == TerminationReason.MUTUAL_KO


def test_knockout_and_defeat_marked(attacker, defender, battle_state):
    """A single fighter out loses, by knockout or by a curbstomp mark."""
    evaluator = TerminalStateEvaluator()
    defender.health = 0
    outcome = evaluator.evaluate((attacker, defender), battle_state)
    assert outcome.reason == TerminationReason.KNOCKOUT
    assert (outcome.winner_id, outcome.loser_id) == ("blaze", "tide")

    defender.health = 50
    battle_state.marked_for_defeat.add("blaze")
    outcome = evaluator.evaluate((attacker, defender), battle_state)
    assert outcome.reason == TerminationReason.DEFEAT_MARKED
    assert outcome.winner_id == "tide"


def test_desperation_comes_before_the_health_gap(attacker, defender, battle_state):
    """A fighter at the floor unlocks desperation instead of losing on the gap."""
    evaluator = TerminalStateEvaluator()
    attacker.health = 8
    outcome = evaluator.evaluate((attacker, defender), battle_state)
    assert outcome.kind == "desperation"
    assert outcome.desperate_id == "blaze"

    attacker.desperation_used = True
    outcome = evaluator.evaluate((attacker, defender), battle_state)
    assert outcome.reason == TerminationReason.DECISIVE_GAP
    assert outcome.winner_id == "tide"


def test_closing_check_skips_desperation(attacker, defender, battle_state):
    """With desperation disabled, the check always reaches a verdict or continues."""
    attacker.health = 8
    outcome = TerminalStateEvaluator().evaluate(
        (attacker, defender), battle_state, allow_desperation=False
    )
    assert outcome.reason == TerminationReason.DECISIVE_GAP


def test_forced_draw_outranks_knockout(attacker, defender, battle_state):
    """An outside intervention ends the fight as a draw even after a knockout."""
    defender.health = 0
    battle_state.forced_draw = True
    outcome = TerminalStateEvaluator().evaluate((attacker, defender), battle_state)
    assert outcome.reason == TerminationReason.FORCED_DRAW
    assert outcome.is_draw


def test_stalemate(attacker, defender, battle_state):
    """Long passive streaks at similar health stall the duel."""
    battle_state.turn = 4
    attacker.consecutive_passive = 3
    defender.consecutive_passive = 3
    defender.health = 90
    outcome = TerminalStateEvaluator().evaluate((attacker, defender), battle_state)
    assert outcome.reason == TerminationReason.STALEMATE


def test_turn_limit_only_at_end_of_turn(attacker, defender, battle_state):
    """The turn cap is checked once both segments have run."""
    evaluator = TerminalStateEvaluator(BattleSettings(max_turns=3))
    battle_state.turn = 3
    assert not evaluator.evaluate((attacker, defender), battle_state).is_terminal
    outcome = evaluator.evaluate((attacker, defender), battle_state, turn_complete=True)
    assert outcome.reason == TerminationReason.TURN_LIMIT


def test_phase_never_regresses(attacker, defender):
    """Phases advance with turns, health and mental state, never backwards."""
    fighters = (attacker, defender)
    assert evaluate_phase(BattlePhase.EARLY, 1, fighters) == BattlePhase.EARLY
    assert evaluate_phase(BattlePhase.EARLY, 4, fighters) == BattlePhase.MID
    assert evaluate_phase(BattlePhase.LATE, 1, fighters) == BattlePhase.LATE

    defender.mental_state.level = MentalLevel.SHAKEN
    assert evaluate_phase(BattlePhase.EARLY, 1, fighters) == BattlePhase.LATE


def test_desperation_move_is_one_shot(attacker, battle_state):
    """The desperation move is queued once and then spent for good."""
    trigger_desperation(attacker, battle_state.log)
    assert attacker.pending_desperation
    assert battle_state.log.of_type(LogEventType.DESPERATION)

    decision = take_desperation_move(attacker, 3, BattlePhase.LATE)
    assert decision.move.name == "Last Stand"
    assert decision.trace.forced == "desperation"
    assert attacker.desperation_used
    assert not attacker.pending_desperation


def test_desperation_needs_the_local_energy_cost(attacker, defender):
    """The desperation move must be affordable at its cost in this arena."""
    mire = LocationConditions(
        id="mire",
        name="Mire",
        environmental_modifiers={Element.PHYSICAL: ElementModifier(energy_cost_modifier=2.0)},
    )
    battle_state = BattleState(BattleConditions(location=mire))
    evaluator = TerminalStateEvaluator()
    attacker.health = 8
    attacker.energy = 10
    assert attacker.can_afford(attacker.desperation_move)

    outcome = evaluator.evaluate((attacker, defender), battle_state)
    assert outcome.kind != "desperation"

    attacker.energy = 12
    outcome = evaluator.evaluate((attacker, defender), battle_state)
    assert outcome.desperate_id == "blaze"
