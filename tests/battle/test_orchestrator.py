"""
Tests for whole battles: determinism, invariants after every segment,
termination, error containment and the public entry point.
"""

import pytest

from duelsim.ai.decision_engine import DecisionTrace, MoveDecision
from duelsim.battle.orchestrator import BattleOrchestrator
from duelsim.battle.simulate import simulate_battle
from duelsim.character.fighter import FighterState
from duelsim.core.constants import BattlePhase, EffectType, Element, LogEventType, TerminationReason
from duelsim.core.error_handling import UnknownContentError
from duelsim.core.rng import BattleRandom
from duelsim.core.settings import BattleSettings
from duelsim.curbstomp.rules import CurbstompRule
from duelsim.effects.status_effect import StatusEffectSpec
from duelsim.environment.conditions import BattleConditions
from duelsim.environment.location import ElementModifier, LocationConditions
from duelsim.main import main


class CheckedOrchestrator(BattleOrchestrator):
    """Asserts the fighter invariants around every segment."""

    def _run_segment(self, actor, defender):
        marked = self.battle_state.is_marked(actor.id)
        stress_before = {f.id: f.mental_state.stress for f in self.fighters}
        moves_before = len(self.log.of_type(LogEventType.MOVE))

        super()._run_segment(actor, defender)

        for fighter in self.fighters:
            assert 0.0 <= fighter.health <= 100.0
            assert 0.0 <= fighter.energy <= 100.0
            assert -5 <= fighter.momentum <= 5
            assert fighter.mental_state.stress >= stress_before[fighter.id]
        if marked:
            assert len(self.log.of_type(LogEventType.MOVE)) == moves_before


def _orchestrator(repository, a, b, location, seed, settings=None, cls=CheckedOrchestrator):
    settings = settings or BattleSettings()
    conditions = BattleConditions(location=repository.get_location(location))
    return cls(
        FighterState.from_template(repository.get_character(a), b, settings),
        FighterState.from_template(repository.get_character(b), a, settings),
        conditions,
        BattleRandom.seeded(seed),
        settings,
        curbstomp_rules=repository.rules_for_battle(a, b, location),
    )


@pytest.mark.parametrize(
    "a, b, location",
    [
        ("azula", "zuko", "fire-nation-capital"),
        ("katara", "toph-beifong", "ba-sing-se"),
        ("mai", "sokka", "boiling-rock"),
        ("ozai-not-comet-enhanced", "sokka", "si-wong-desert"),
    ],
)
@pytest.mark.parametrize("seed", [1, 2, 3])
def test_invariants_hold_every_segment(repository, a, b, location, seed):
    """Bounds, monotone stress and the marked-never-acts rule hold throughout."""
    result = _orchestrator(repository, a, b, location, seed).run()

    assert result.error is None
    assert len(result.log) and result.log[-1].type == LogEventType.TERMINAL
    assert len([e for e in result.log if e.type == LogEventType.TERMINAL]) == 1
    assert [e.index for e in result.log] == list(range(len(result.log)))
    assert result.turns_played <= 15
    if result.is_draw:
        assert result.winner_id is None
    else:
        assert {result.winner_id, result.loser_id} == {a, b}


def test_same_seed_same_battle():
    """Two battles with the same seed are identical, event for event."""
    first = simulate_battle("azula", "katara", "northern-water-tribe", "night", seed=11)
    second = simulate_battle("azula", "katara", "northern-water-tribe", "night", seed=11)
    assert first.model_dump_json() == second.model_dump_json()
    assert first.seed == 11


def test_battle_always_terminates(repository):
    """A short turn cap still yields exactly one verdict."""
    settings = BattleSettings(max_turns=1)
    result = _orchestrator(repository, "toph-beifong", "zuko", "ba-sing-se", 5, settings).run()
    assert result.turns_played <= 1
    assert result.termination_reason is not None
    assert len([e for e in result.log if e.type == LogEventType.TERMINAL]) == 1


def test_pre_battle_defeat(repository):
    """A certain pre-battle rule ends the duel before turn 1."""
    doom = CurbstompRule(
        id="certain_heatstroke",
        applies_to={"kind": "character", "value": "sokka"},
        trigger_chance=1.0,
        survival_chance=0.0,
        can_trigger_pre_battle=True,
        outcome={"type": "instant_loss"},
    )
    repository.register_rule(doom)
    try:
        result = simulate_battle("sokka", "azula", "si-wong-desert", "day", seed=3)
    finally:
        repository.unregister("certain_heatstroke")

    assert result.termination_reason == TerminationReason.DEFEAT_MARKED
    assert (result.winner_id, result.loser_id) == ("azula", "sokka")
    assert result.turns_played == 0
    assert result.marked_for_defeat == {"sokka"}
    assert not [e for e in result.log if e.type == LogEventType.MOVE]


def test_loop_errors_become_emergency_draw(monkeypatch):
    """An exception inside the loop ends the battle as an emergency draw."""

    def explode(*args, **kwargs):
        raise RuntimeError("resolver exploded")

    monkeypatch.setattr("duelsim.battle.orchestrator.resolve_move", explode)

    result = simulate_battle("azula", "zuko", "fire-nation-capital", "day", seed=1)

    assert result.termination_reason == TerminationReason.EMERGENCY
    assert result.is_draw
    assert "resolver exploded" in result.error
    assert result.log[-1].type == LogEventType.EMERGENCY
    assert set(result.final_fighter_states) == {"azula", "zuko"}


def test_unknown_ids_raise_before_battle():
    """Unknown characters and locations are reported up front."""
    with pytest.raises(UnknownContentError):
        simulate_battle("azula", "aang", "ba-sing-se", "day")
    with pytest.raises(UnknownContentError):
        simulate_battle("azula", "zuko", "omashu", "day")


def test_invalid_arguments_raise():
    """Bad time of day, empty ids and mirror matches are rejected."""
    with pytest.raises(ValueError):
        simulate_battle("azula", "zuko", "ba-sing-se", "dusk")
    with pytest.raises(ValueError):
        simulate_battle("", "zuko", "ba-sing-se", "day")
    with pytest.raises(ValueError):
        simulate_battle("zuko", "zuko", "ba-sing-se", "day")


def test_emotional_mode_runs(repository):
    """Emotional battles complete and record stress for both fighters."""
    result = simulate_battle("zuko", "azula", "fire-nation-capital", "day", True, seed=4)
    assert result.error is None
    assert set(result.final_fighter_states) == {"zuko", "azula"}
    assert result.environment_state.location_id == "fire-nation-capital"


def test_demo_entry_point(capsys):
    """The demo prints one battle and rejects mirror matches."""
    assert main(["azula", "zuko", "fire-nation-capital", "--seed", "2"]) == 0
    assert "Result" in capsys.readouterr().out
    assert main(["zuko", "zuko"]) == 2


def _always_choose(monkeypatch, move):
    def choose(actor, *args):
        return MoveDecision(move=move, trace=DecisionTrace(turn=1, phase=BattlePhase.EARLY))

    monkeypatch.setattr("duelsim.battle.orchestrator.choose_move", choose)


def test_stun_costs_the_next_segment(
    monkeypatch, attacker, defender, conditions, scripted_rng, guard
):
    """A one-segment stun survives the turn tick and eats the next segment."""
    _always_choose(monkeypatch, guard)
    orchestrator = BattleOrchestrator(attacker, defender, conditions, scripted_rng(0.99))
    orchestrator.battle_state.begin_turn(1)
    stun = StatusEffectSpec(effect_type=EffectType.STUN, duration=1, name="Critical Stun")
    orchestrator.effects.apply(defender, stun, "test", 1)
    orchestrator._end_of_turn()
    assert defender.is_stunned

    orchestrator.battle_state.begin_turn(2)
    orchestrator._run_segment(defender, attacker)

    recovery = orchestrator.log.of_type(LogEventType.RECOVERY)
    assert [(e.actor_id, e.details["reason"]) for e in recovery] == [("tide", "stunned")]
    assert not orchestrator.log.of_type(LogEventType.MOVE)
    assert not defender.is_stunned

    orchestrator._run_segment(defender, attacker)
    assert [e.actor_id for e in orchestrator.log.of_type(LogEventType.MOVE)] == ["tide"]


def test_affordability_uses_the_local_energy_cost(
    monkeypatch, attacker, defender, scripted_rng, jab
):
    """A move the fighter could pay for anywhere else falls back to Struggle here."""
    mire = LocationConditions(
        id="mire",
        name="Mire",
        environmental_modifiers={Element.PHYSICAL: ElementModifier(energy_cost_modifier=2.0)},
    )
    _always_choose(monkeypatch, jab)
    orchestrator = BattleOrchestrator(
        attacker, defender, BattleConditions(location=mire), scripted_rng(0.99)
    )
    orchestrator.battle_state.begin_turn(1)
    attacker.energy = 20
    assert attacker.can_afford(jab)

    orchestrator._run_segment(attacker, defender)

    assert attacker.move_history == ["Struggle"]
    assert attacker.energy == 20


def test_manipulation_comes_before_the_move(
    monkeypatch, blaze_template, defender, conditions, scripted_rng, guard
):
    """A manipulative fighter works on the opponent before acting."""
    schemer = FighterState(
        blaze_template.model_copy(update={"special_traits": {"manipulative": 1.0}}), "tide"
    )
    _always_choose(monkeypatch, guard)
    orchestrator = BattleOrchestrator(schemer, defender, conditions, scripted_rng(0.0))
    orchestrator.battle_state.begin_turn(1)

    orchestrator._run_segment(schemer, defender)

    types = [e.type for e in orchestrator.log.events]
    assert types.index(LogEventType.MANIPULATION) < types.index(LogEventType.MOVE)
    assert defender.tactical_state is not None and defender.tactical_state.name == "Exposed"
    assert defender.mental_state.stress > 0
