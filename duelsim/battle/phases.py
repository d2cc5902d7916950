"""
Battle phase tracking. Phases only move forward: Early, Mid, Late.
"""

from typing import Iterable

from duelsim.character.fighter import FighterState
from duelsim.core.constants import BattlePhase, MentalLevel
from duelsim.core.settings import DEFAULT_SETTINGS, BattleSettings


def _phase_from_state(
    turn: int, fighters: Iterable[FighterState], settings: BattleSettings
) -> BattlePhase:
    fighters = list(fighters)
    lowest_health = min(f.health for f in fighters)
    worst_mental = max(f.mental_level.rank for f in fighters)
    if (
        turn >= settings.late_phase_turn
        or lowest_health < settings.late_phase_health
        or worst_mental >= MentalLevel.SHAKEN.rank
    ):
        return BattlePhase.LATE
    if (
        turn >= settings.mid_phase_turn
        or lowest_health < settings.mid_phase_health
        or worst_mental >= MentalLevel.STRESSED.rank
    ):
        return BattlePhase.MID
    return BattlePhase.EARLY


def evaluate_phase(
    current: BattlePhase,
    turn: int,
    fighters: Iterable[FighterState],
    settings: BattleSettings = DEFAULT_SETTINGS,
) -> BattlePhase:
    """
    Returns the phase for the given turn, never earlier than `current`.
    """
    candidate = _phase_from_state(turn, fighters, settings)
    return candidate if candidate.rank > current.rank else current
