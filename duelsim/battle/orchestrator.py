"""
Battle orchestrator.

Drives one battle: the pre-battle curbstomp pass, then up to `max_turns`
turns of two segments each. Every segment asks the AI for a move, gives the
defender first refusal through its reactive defenses, resolves and applies
the move, and feeds the result into the collateral, mental, escalation,
memory and curbstomp engines before the terminal check.
"""

from duelsim.ai.decision_engine import choose_move, record_outcome
from duelsim.character.fighter import FighterState
from duelsim.character.moves import STRUGGLE
from duelsim.combat.move_resolver import apply_move_result, resolve_move
from duelsim.combat.reactive_defense import attempt_reactive_defense
from duelsim.core.constants import EffectType, LogEventType, TerminationReason
from duelsim.core.error_handling import ERROR_HANDLER, ErrorSeverity
from duelsim.core.events import BattleLog
from duelsim.core.logging import log_debug, log_info
from duelsim.core.rng import BattleRandom
from duelsim.core.settings import DEFAULT_SETTINGS, BattleSettings
from duelsim.curbstomp.engine import CurbstompRuleEngine
from duelsim.curbstomp.rules import CurbstompRule
from duelsim.effects.status_effect import StatusEffectSpec
from duelsim.effects.status_effect_engine import StatusEffectEngine
from duelsim.environment.conditions import BattleConditions, energy_cost
from duelsim.state.escalation import update_escalation
from duelsim.state.manipulation import attempt_manipulation
from duelsim.state.mental_state import (
    StressReport,
    apply_stress,
    stress_from_collateral,
    stress_from_hit,
    stress_from_own_action,
    stress_from_situation,
)

from .battle_state import BattleResult, BattleState
from .desperation import take_desperation_move, trigger_desperation
from .phases import evaluate_phase
from .terminal import TerminalOutcome, TerminalStateEvaluator


def _merge(report: StressReport, other: StressReport) -> StressReport:
    for source, amount in other.sources.items():
        report.add(source, amount)
    return report


class BattleOrchestrator:
    """
    Runs one battle between two fighters.

    Attributes:
        fighters (tuple[FighterState, FighterState]):
            Both fighters, in the order they were given.
        rng (BattleRandom):
            The only random source of the battle.
        settings (BattleSettings):
            Tunable constants.
        battle_state (BattleState):
            Battle-scoped state shared with the engines.
        effects (StatusEffectEngine):
            Owner of status effects and their ids.
        curbstomp (CurbstompRuleEngine):
            Evaluator of the battle's curbstomp rules.
        terminal (TerminalStateEvaluator):
            Decides when and how the battle ends.

    """

    def __init__(
        self,
        fighter_a: FighterState,
        fighter_b: FighterState,
        conditions: BattleConditions,
        rng: BattleRandom,
        settings: BattleSettings = DEFAULT_SETTINGS,
        curbstomp_rules: list[CurbstompRule] | None = None,
    ) -> None:
        self.fighters = (fighter_a, fighter_b)
        self.rng = rng
        self.settings = settings
        self.log = BattleLog()
        self.battle_state = BattleState(conditions, self.log)
        self.effects = StatusEffectEngine(settings, self.log)
        self.curbstomp = CurbstompRuleEngine(
            curbstomp_rules or [], rng, self.effects, settings, self.log
        )
        self.terminal = TerminalStateEvaluator(settings)

    @property
    def conditions(self) -> BattleConditions:
        return self.battle_state.conditions

    # ============================================================================
    # MAIN LOOP
    # ============================================================================

    def run(self) -> BattleResult:
        """
        Runs the battle to completion.

        Any exception raised inside the loop ends the battle as an emergency
        draw carrying the error message.
        """
        try:
            return self._run()
        except Exception as e:
            ERROR_HANDLER.handle(
                f"Battle aborted: {e}",
                ErrorSeverity.CRITICAL,
                {
                    "fighters": [f.id for f in self.fighters],
                    "turn": self.battle_state.turn,
                },
                e,
            )
            return self._emergency_result(e)

    def _run(self) -> BattleResult:
        state = self.battle_state
        first, second = self.fighters
        self.log.add(
            LogEventType.BATTLE_START,
            f"{first.name} vs {second.name} at {self.conditions.location.name}",
            actor_id=first.id,
            target_id=second.id,
            details={
                "location": self.conditions.location_id,
                "time_of_day": self.conditions.time_of_day.value,
                "emotional_mode": self.conditions.emotional_mode,
                "seed": self.rng.seed,
            },
        )

        self.curbstomp.evaluate(self.fighters, state, pre_battle=True)
        outcome = self.terminal.evaluate(self.fighters, state, allow_desperation=False)
        if outcome.is_terminal:
            return self._finish(outcome)

        order = (first, second) if self.rng.coin_flip() else (second, first)
        log_info(f"{order[0].name} takes the initiative")

        for turn in range(1, self.settings.max_turns + 1):
            state.begin_turn(turn)
            self._update_phase()
            for segment, (actor, defender) in enumerate((order, order[::-1]), start=1):
                state.begin_segment(segment)
                self._run_segment(actor, defender)
                outcome = self._check_terminal(turn_complete=False)
                if outcome.is_terminal:
                    return self._finish(outcome)
            state.begin_segment(0)
            self._end_of_turn()
            outcome = self._check_terminal(turn_complete=True)
            if outcome.is_terminal:
                return self._finish(outcome)
            order = order[::-1]

        outcome = self.terminal.evaluate(
            self.fighters, state, turn_complete=True, allow_desperation=False
        )
        return self._finish(outcome)

    def _check_terminal(self, turn_complete: bool) -> TerminalOutcome:
        outcome = self.terminal.evaluate(
            self.fighters, self.battle_state, turn_complete=turn_complete
        )
        if outcome.kind == "desperation":
            fighter = next(f for f in self.fighters if f.id == outcome.desperate_id)
            trigger_desperation(fighter, self.log)
        return outcome

    def _update_phase(self) -> None:
        state = self.battle_state
        phase = evaluate_phase(state.phase, state.turn, self.fighters, self.settings)
        if phase != state.phase:
            self.log.add(
                LogEventType.PHASE,
                f"The battle enters the {phase.value} phase",
                details={"from": state.phase.value, "to": phase.value},
            )
            state.phase = phase

    # ============================================================================
    # SEGMENTS
    # ============================================================================

    def _must_recover(self, actor: FighterState) -> str | None:
        if self.battle_state.is_marked(actor.id):
            return "marked for defeat"
        if actor.is_stunned:
            return "stunned"
        if actor.energy < self.settings.energy_starved_threshold:
            return "out of energy"
        return None

    def _recover(self, actor: FighterState, reason: str) -> None:
        before = actor.energy
        actor.energy += self.settings.recovery_energy
        self.log.add(
            LogEventType.RECOVERY,
            f"{actor.name} is {reason} and recovers",
            actor_id=actor.id,
            deltas={"energy": round(actor.energy - before, 2)},
            details={"reason": reason},
        )
        if reason == "stunned":
            self.effects.spend_skipped_segment(actor)

    def _run_segment(self, actor: FighterState, defender: FighterState) -> None:
        state = self.battle_state
        reason = self._must_recover(actor)
        if reason is not None:
            self._recover(actor, reason)
            return

        attempt_manipulation(
            actor,
            defender,
            self.rng,
            turn=state.turn,
            emotional_mode=self.conditions.emotional_mode,
            log=self.log,
        )
        if actor.pending_desperation:
            decision = take_desperation_move(actor, state.turn, state.phase)
        else:
            decision = choose_move(
                actor,
                defender,
                state,
                self.conditions,
                state.turn,
                state.phase,
                self.rng,
                self.settings,
            )
        move = decision.move
        cost = energy_cost(move, self.conditions, actor.template.is_bender)
        if not actor.can_afford(move, cost):
            log_debug(
                f"{actor.name} cannot afford {move.name}",
                {"energy": actor.energy, "cost": cost},
            )
            move = STRUGGLE

        defense = attempt_reactive_defense(move, actor, defender, self.rng, log=self.log)
        result = resolve_move(
            move,
            actor,
            defender,
            self.conditions,
            state.interaction_log,
            self.rng,
            self.settings,
            mitigation=defense.mitigation,
            turn=state.turn,
        )
        apply_move_result(result, actor, defender, self.effects, state.turn, self.log)
        if defense.stun_attacker_turns > 0:
            stun = StatusEffectSpec(
                effect_type=EffectType.STUN,
                duration=defense.stun_attacker_turns,
                name=f"{defense.profile} Backlash",
            )
            self.effects.apply(actor, stun, defense.profile or move.name, state.turn)

        # Collateral feeds the environment and unsettles both fighters.
        collateral = result.collateral_damage
        if state.environment.add_collateral(collateral, self.conditions.location, move.name):
            log_debug(
                "Environment degrades",
                {"level": state.environment.level.value, "damage": state.environment.damage_level},
            )

        emotional = self.conditions.emotional_mode
        defender_stress = _merge(stress_from_hit(result), stress_from_collateral(defender, collateral))
        actor_stress = _merge(stress_from_own_action(result), stress_from_collateral(actor, collateral))
        apply_stress(defender, defender_stress, turn=state.turn, emotional_mode=emotional, log=self.log)
        apply_stress(actor, actor_stress, turn=state.turn, emotional_mode=emotional, log=self.log)
        update_escalation(defender, self.log)
        update_escalation(actor, self.log)

        actor.move_history.append(move.name)
        actor.last_move = move
        actor.last_result = result
        actor.consecutive_passive = (
            actor.consecutive_passive + 1 if move.move_type.is_passive else 0
        )
        drifted = record_outcome(actor, defender, move, result, self.settings)
        if drifted:
            log_debug(f"{actor.name}'s personality drifts", {"traits": drifted})

        self.curbstomp.evaluate(self.fighters, state, pre_battle=False, actor=actor, move=move)

    # ============================================================================
    # END OF TURN
    # ============================================================================

    def _end_of_turn(self) -> None:
        state = self.battle_state
        for fighter in self.fighters:
            self.effects.process_turn(fighter, state.turn)
            expired = fighter.effects.tick_tactical_state()
            if expired is not None:
                self.log.add(
                    LogEventType.TACTICAL,
                    f"{fighter.name} is no longer {expired.name}",
                    actor_id=fighter.id,
                    details={"expired": expired.name},
                )
            if not fighter.is_down():
                fighter.energy += self.settings.energy_regen_per_turn
            apply_stress(
                fighter,
                stress_from_situation(fighter, self.conditions),
                turn=state.turn,
                emotional_mode=self.conditions.emotional_mode,
                log=self.log,
            )
            update_escalation(fighter, self.log)

        self.curbstomp.check_overwhelming_advantage(self.fighters, state)
        for fighter in self.fighters:
            fighter.mental_state.changed_this_turn = False

    # ============================================================================
    # RESULT
    # ============================================================================

    def _finish(self, outcome: TerminalOutcome) -> BattleResult:
        state = self.battle_state
        reason = outcome.reason or TerminationReason.TURN_LIMIT
        self.log.add(
            LogEventType.TERMINAL,
            outcome.description or reason.display_name,
            actor_id=outcome.winner_id,
            target_id=outcome.loser_id,
            details={"reason": reason.value, "turn": state.turn},
        )
        log_info(
            "Battle over",
            {"reason": reason.value, "winner": outcome.winner_id, "turns": state.turn},
        )
        return self._result(
            reason,
            winner_id=outcome.winner_id,
            loser_id=outcome.loser_id,
            is_draw=reason.is_draw,
        )

    def _emergency_result(self, error: Exception) -> BattleResult:
        message = f"{type(error).__name__}: {error}"
        self.log.add(
            LogEventType.EMERGENCY,
            "The battle was aborted",
            details={"error": message},
        )
        return self._result(TerminationReason.EMERGENCY, is_draw=True, error=message)

    def _result(
        self,
        reason: TerminationReason,
        winner_id: str | None = None,
        loser_id: str | None = None,
        is_draw: bool = False,
        error: str | None = None,
    ) -> BattleResult:
        state = self.battle_state
        return BattleResult(
            log=list(self.log.events),
            winner_id=winner_id,
            loser_id=loser_id,
            is_draw=is_draw,
            final_fighter_states={f.id: f.snapshot() for f in self.fighters},
            environment_state=state.environment.model_copy(deep=True),
            termination_reason=reason,
            turns_played=state.turn,
            phase=state.phase,
            marked_for_defeat=set(state.marked_for_defeat),
            seed=self.rng.seed,
            error=error,
        )
