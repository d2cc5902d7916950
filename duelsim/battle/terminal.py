"""
Terminal state evaluation.

Checked after every segment and at the end of every turn, in a fixed
priority order:

1. mutual KO (draw);
2. desperation (a fighter at or under the health floor unlocks its one-shot
   move; the battle continues);
3. stalemate or forced draw;
4. turn limit (draw);
5. single KO, including a fighter marked for defeat;
6. decisive health gap;
7. continue.
"""

from typing import Literal

from pydantic import BaseModel

from duelsim.character.fighter import FighterState
from duelsim.core.constants import TerminationReason
from duelsim.core.logging import log_debug
from duelsim.core.settings import DEFAULT_SETTINGS, BattleSettings
from duelsim.environment.conditions import energy_cost

from .battle_state import BattleState


class TerminalOutcome(BaseModel):
    """The result of one terminal check."""

    kind: Literal["continue", "desperation", "terminal"] = "continue"
    reason: TerminationReason | None = None
    winner_id: str | None = None
    loser_id: str | None = None
    desperate_id: str | None = None
    description: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.kind == "terminal"

    @property
    def is_draw(self) -> bool:
        return self.is_terminal and self.reason is not None and self.reason.is_draw


CONTINUE = TerminalOutcome()


class TerminalStateEvaluator:
    """Decides whether a battle is over and how."""

    def __init__(self, settings: BattleSettings = DEFAULT_SETTINGS) -> None:
        self.settings = settings

    def is_out(self, fighter: FighterState, battle_state: BattleState) -> bool:
        """A fighter is out when knocked down or marked for defeat."""
        return fighter.is_down() or battle_state.is_marked(fighter.id)

    def evaluate(
        self,
        fighters: tuple[FighterState, FighterState],
        battle_state: BattleState,
        turn_complete: bool = False,
        allow_desperation: bool = True,
    ) -> TerminalOutcome:
        """
        Runs the priority checks once.

        Args:
            fighters (tuple[FighterState, FighterState]): Both fighters.
            battle_state (BattleState): Marked set, forced draw and turn.
            turn_complete (bool): True when both segments of the turn ran.
            allow_desperation (bool): False for the closing check of a battle
                that has no turns left.

        Returns:
            TerminalOutcome: What happens next.

        """
        first, second = fighters
        first_out = self.is_out(first, battle_state)
        second_out = self.is_out(second, battle_state)

        if first_out and second_out:
            return TerminalOutcome(
                kind="terminal",
                reason=TerminationReason.MUTUAL_KO,
                description="Both fighters fall.",
            )

        if allow_desperation and not (first_out or second_out):
            desperate = self._desperation_candidate(fighters, battle_state)
            if desperate is not None:
                return TerminalOutcome(
                    kind="desperation",
                    desperate_id=desperate.id,
                    description=f"{desperate.name} is pushed to desperation.",
                )

        if battle_state.forced_draw:
            return TerminalOutcome(
                kind="terminal",
                reason=TerminationReason.FORCED_DRAW,
                description="The fight is broken up.",
            )
        if self._is_stalemate(fighters, battle_state):
            return TerminalOutcome(
                kind="terminal",
                reason=TerminationReason.STALEMATE,
                description="Neither fighter will commit; the duel stalls.",
            )

        if turn_complete and battle_state.turn >= self.settings.max_turns:
            return TerminalOutcome(
                kind="terminal",
                reason=TerminationReason.TURN_LIMIT,
                description="Time runs out with both fighters standing.",
            )

        if first_out or second_out:
            loser, winner = (first, second) if first_out else (second, first)
            reason = (
                TerminationReason.KNOCKOUT
                if loser.is_down()
                else TerminationReason.DEFEAT_MARKED
            )
            return TerminalOutcome(
                kind="terminal",
                reason=reason,
                winner_id=winner.id,
                loser_id=loser.id,
                description=f"{winner.name} defeats {loser.name}.",
            )

        gap = first.health - second.health
        if abs(gap) >= self.settings.decisive_health_gap:
            winner, loser = (first, second) if gap > 0 else (second, first)
            return TerminalOutcome(
                kind="terminal",
                reason=TerminationReason.DECISIVE_GAP,
                winner_id=winner.id,
                loser_id=loser.id,
                description=f"{winner.name} has {loser.name} completely outmatched.",
            )
        return CONTINUE

    def _desperation_candidate(
        self, fighters: tuple[FighterState, FighterState], battle_state: BattleState
    ) -> FighterState | None:
        for fighter in fighters:
            if fighter.desperation_used or fighter.pending_desperation:
                continue
            if fighter.health > self.settings.desperation_health_floor:
                continue
            move = fighter.desperation_move
            cost = energy_cost(move, battle_state.conditions, fighter.template.is_bender)
            if not fighter.can_afford(move, cost):
                log_debug(
                    f"{fighter.name} is too drained for a desperation move",
                    {"energy": fighter.energy},
                )
                continue
            return fighter
        return None

    def _is_stalemate(
        self, fighters: tuple[FighterState, FighterState], battle_state: BattleState
    ) -> bool:
        settings = self.settings
        if battle_state.turn < settings.stalemate_min_turn:
            return False
        if any(f.consecutive_passive < settings.stalemate_streak for f in fighters):
            return False
        first, second = fighters
        return abs(first.health - second.health) < settings.stalemate_health_gap
