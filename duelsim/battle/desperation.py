"""
Desperation moves: a one-shot forced substitution for the AI's choice when
a fighter's health is critically low.
"""

from duelsim.ai.decision_engine import MoveDecision, forced_decision
from duelsim.character.fighter import FighterState
from duelsim.core.constants import BattlePhase, LogEventType
from duelsim.core.events import BattleLog
from duelsim.core.logging import log_info


def trigger_desperation(fighter: FighterState, log: BattleLog | None = None) -> None:
    """Queues the fighter's desperation move for its next segment."""
    fighter.pending_desperation = True
    move = fighter.desperation_move
    log_info(f"{fighter.name} is desperate", {"move": move.name, "health": fighter.health})
    if log is not None:
        log.add(
            LogEventType.DESPERATION,
            f"{fighter.name} prepares {move.name}",
            actor_id=fighter.id,
            details={"move": move.name, "health": fighter.health},
        )


def take_desperation_move(
    fighter: FighterState, turn: int, phase: BattlePhase
) -> MoveDecision:
    """Consumes the queued desperation move; it can never be used again."""
    fighter.pending_desperation = False
    fighter.desperation_used = True
    return forced_decision(fighter, fighter.desperation_move, turn, phase, "desperation")
