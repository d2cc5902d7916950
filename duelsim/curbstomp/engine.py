"""
Curbstomp rule engine.

Evaluates the override rules that apply to a battle. The roll order is
fixed: trigger roll, condition check, miraculous survival (lethal outcomes
only), victim selection, then the self-sabotage roll. Lethal outcomes never
touch health: they add the victim to the battle's marked-for-defeat set.
"""

from typing import Any

from pydantic import BaseModel

from duelsim.character.fighter import FighterState
from duelsim.character.moves import Move
from duelsim.combat.momentum import modify_momentum
from duelsim.core.constants import LogEventType, OutcomeType
from duelsim.core.events import BattleLog
from duelsim.core.logging import log_debug, log_info
from duelsim.core.rng import BattleRandom
from duelsim.core.settings import DEFAULT_SETTINGS, BattleSettings
from duelsim.effects.status_effect_engine import StatusEffectEngine

from .rules import OPPONENT, CurbstompRule
from .victim_selector import check_miraculous_survival, log_roll, select_victim

OVERWHELMING_RULE_ID = "overwhelming-advantage"


class CurbstompRecord(BaseModel):
    """What happened when one rule was evaluated for one protagonist."""

    rule_id: str
    protagonist_id: str
    outcome: OutcomeType
    victim_id: str | None = None
    survived: bool = False
    sabotaged: bool = False
    applied: bool = False
    note: str = ""


class CurbstompRuleEngine:
    """
    Battle-scoped evaluator of curbstomp rules.

    Attributes:
        rules (list[CurbstompRule]):
            Rules that may apply to this battle, deduplicated by id.
        settings (BattleSettings):
            Tunable constants (survival chance, overwhelming thresholds).
        rng (BattleRandom):
            The battle's random source.
        log (BattleLog | None):
            Where CURBSTOMP and DICE_ROLL events go.
        effects (StatusEffectEngine):
            Used to apply buff and debuff outcomes.

    """

    def __init__(
        self,
        rules: list[CurbstompRule],
        rng: BattleRandom,
        effects: StatusEffectEngine,
        settings: BattleSettings = DEFAULT_SETTINGS,
        log: BattleLog | None = None,
    ) -> None:
        seen: set[str] = set()
        self.rules: list[CurbstompRule] = []
        for rule in rules:
            if rule.id not in seen:
                seen.add(rule.id)
                self.rules.append(rule)
        self.rng = rng
        self.effects = effects
        self.settings = settings
        self.log = log

    # ============================================================================
    # EVALUATION
    # ============================================================================

    def evaluate(
        self,
        fighters: tuple[FighterState, FighterState],
        battle_state: Any,
        pre_battle: bool = False,
        actor: FighterState | None = None,
        move: Move | None = None,
    ) -> list[CurbstompRecord]:
        """
        Evaluates every eligible rule once.

        Args:
            fighters (tuple[FighterState, FighterState]): Both fighters.
            battle_state (BattleState): Holds the marked set, the fired rules,
                the conditions and the environment.
            pre_battle (bool): True for the pass before turn 1.
            actor (FighterState | None): Fighter who just acted, in battle.
            move (Move | None): Move just used, for activating-move rules.

        Returns:
            list[CurbstompRecord]: One record per protagonist whose trigger
            roll succeeded.

        """
        records: list[CurbstompRecord] = []
        for rule in self.rules:
            if rule.id in battle_state.fired_rules:
                continue
            if pre_battle != rule.can_trigger_pre_battle:
                continue
            if not pre_battle and not rule.is_activated_by(move):
                continue
            protagonists = rule.applies_to.protagonists(fighters, battle_state.conditions.location_id)
            if rule.needs_activating_move and actor is not None:
                protagonists = [p for p in protagonists if p.id == actor.id]
            for protagonist in protagonists:
                opponent = fighters[1] if protagonist is fighters[0] else fighters[0]
                record = self._evaluate_for(rule, protagonist, opponent, battle_state, pre_battle)
                if record is not None:
                    records.append(record)
                    if record.applied:
                        battle_state.fired_rules.add(rule.id)
            if rule.id in battle_state.fired_rules:
                log_debug(f"Curbstomp rule '{rule.id}' fired", {"pre_battle": pre_battle})
        return records

    def _evaluate_for(
        self,
        rule: CurbstompRule,
        protagonist: FighterState,
        opponent: FighterState,
        battle_state: Any,
        pre_battle: bool,
    ) -> CurbstompRecord | None:
        triggered, value = self.rng.roll(rule.trigger_chance)
        log_roll(
            self.log,
            "rule_trigger",
            rule.id,
            value,
            rule.trigger_chance,
            "triggered" if triggered else "not triggered",
            protagonist.id,
        )
        if not triggered:
            return None
        if not rule.holds_for(protagonist, opponent, battle_state):
            return None

        outcome = rule.outcome
        record = CurbstompRecord(
            rule_id=rule.id, protagonist_id=protagonist.id, outcome=outcome.type
        )
        if not outcome.type.is_lethal:
            self._apply_non_lethal(rule, protagonist, opponent, battle_state, record)
            return record

        if check_miraculous_survival(
            rule, protagonist, self.rng, self.settings.miracle_survival_chance, self.log
        ):
            record.survived = True
            record.note = "miraculous survival"
            self._emit(
                f"By some miracle, {protagonist.name} escapes '{rule.description or rule.id}'",
                protagonist,
                record,
            )
            # The rule was spent even though nobody fell.
            record.applied = True
            return record

        victim_id = self._default_victim(rule, protagonist, opponent)
        if outcome.victim_selection is not None:
            victim_id = select_victim(
                outcome.victim_selection, protagonist, opponent, self.rng, rule.id, self.log
            )
        if victim_id is None:
            record.note = "no victim selected"
            return record

        if outcome.self_sabotage_chance > 0:
            sabotaged, value = self.rng.roll(outcome.self_sabotage_chance)
            log_roll(
                self.log,
                "self_sabotage",
                rule.id,
                value,
                outcome.self_sabotage_chance,
                "sabotaged" if sabotaged else "clean",
                protagonist.id,
            )
            if sabotaged:
                record.sabotaged = True
                victim_id = opponent.id if victim_id == protagonist.id else protagonist.id

        record.victim_id = victim_id
        if pre_battle and not battle_state.conditions.location.allow_pre_battle_curbstomp:
            record.note = "pre-battle defeat not allowed here"
            return record

        battle_state.marked_for_defeat.add(victim_id)
        record.applied = True
        victim = protagonist if victim_id == protagonist.id else opponent
        log_info(
            f"Curbstomp '{rule.id}' marks {victim.name} for defeat",
            {"outcome": outcome.type.value, "pre_battle": pre_battle},
        )
        self._emit(
            f"{victim.name} is marked for defeat: {rule.description or rule.id}",
            protagonist,
            record,
            target_id=victim_id,
        )
        return record

    def _default_victim(
        self, rule: CurbstompRule, protagonist: FighterState, opponent: FighterState
    ) -> str:
        outcome = rule.outcome
        if outcome.type == OutcomeType.INSTANT_WIN:
            winner = outcome.winner or protagonist.id
            if winner == OPPONENT:
                winner = opponent.id
            return protagonist.id if winner == opponent.id else opponent.id
        return protagonist.id

    def _apply_non_lethal(
        self,
        rule: CurbstompRule,
        protagonist: FighterState,
        opponent: FighterState,
        battle_state: Any,
        record: CurbstompRecord,
    ) -> None:
        outcome = rule.outcome
        target = opponent if outcome.target == OPPONENT else protagonist
        if outcome.type in (OutcomeType.BUFF, OutcomeType.DEBUFF) and outcome.effect is not None:
            self.effects.apply(target, outcome.effect, rule.id, battle_state.turn)
            record.note = f"{outcome.effect.display_name} on {target.name}"
        elif outcome.type == OutcomeType.MOMENTUM_ADVANTAGE:
            modify_momentum(target, outcome.momentum, f"curbstomp rule {rule.id}")
            record.note = f"momentum {outcome.momentum:+d} for {target.name}"
        elif outcome.type == OutcomeType.EXTERNAL_INTERVENTION:
            battle_state.forced_draw = True
            record.note = "outside forces end the fight"
        record.applied = True
        self._emit(
            f"{rule.description or rule.id}: {record.note}",
            protagonist,
            record,
            target_id=target.id,
        )

    # ============================================================================
    # OVERWHELMING ADVANTAGE
    # ============================================================================

    def check_overwhelming_advantage(
        self, fighters: tuple[FighterState, FighterState], battle_state: Any
    ) -> str | None:
        """
        Marks a fighter for defeat when its opponent completely dominates:
        far lower health and deeply negative momentum after the opening turns.

        Returns:
            str | None: The id of the fighter marked, if any.

        """
        settings = self.settings
        if battle_state.turn < settings.overwhelming_min_turn:
            return None
        for defender, attacker in (fighters, fighters[::-1]):
            if defender.id in battle_state.marked_for_defeat or attacker.health <= 0:
                continue
            ratio = defender.health / attacker.health
            if ratio <= settings.overwhelming_health_ratio and defender.momentum <= settings.overwhelming_momentum:
                battle_state.marked_for_defeat.add(defender.id)
                record = CurbstompRecord(
                    rule_id=OVERWHELMING_RULE_ID,
                    protagonist_id=attacker.id,
                    outcome=OutcomeType.INSTANT_WIN,
                    victim_id=defender.id,
                    applied=True,
                    note="overwhelming advantage",
                )
                self._emit(
                    f"{attacker.name} overwhelms {defender.name}",
                    attacker,
                    record,
                    target_id=defender.id,
                )
                return defender.id
        return None

    def _emit(
        self,
        text: str,
        protagonist: FighterState,
        record: CurbstompRecord,
        target_id: str | None = None,
    ) -> None:
        if self.log is not None:
            self.log.add(
                LogEventType.CURBSTOMP,
                text,
                actor_id=protagonist.id,
                target_id=target_id,
                details=record.model_dump(mode="json"),
            )
