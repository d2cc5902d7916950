"""
Momentum system.

Momentum is a small signed integer: positive values favour its holder. It
shifts the critical-hit chance and feeds the AI and the stress model.
"""

from typing import TYPE_CHECKING

from duelsim.core.logging import log_debug
from duelsim.core.settings import DEFAULT_SETTINGS, BattleSettings

if TYPE_CHECKING:
    from duelsim.character.fighter import FighterState


def modify_momentum(fighter: "FighterState", delta: float, reason: str) -> int:
    """
    Shifts a fighter's momentum, keeping it within bounds.

    Args:
        fighter (FighterState): The fighter to modify.
        delta (float): Requested change, may be negative.
        reason (str): Why the momentum changes, for tracing.

    Returns:
        int: The change actually applied after clamping.

    """
    before = fighter.momentum
    fighter.momentum = before + delta
    applied = fighter.momentum - before
    if applied != 0:
        log_debug(
            f"{fighter.name} momentum {before:+d} -> {fighter.momentum:+d}",
            {"reason": reason},
        )
    elif delta:
        log_debug(
            f"{fighter.name} momentum capped at {before:+d}",
            {"requested": delta, "reason": reason},
        )
    return applied


def momentum_crit_modifier(
    fighter: "FighterState", settings: BattleSettings = DEFAULT_SETTINGS
) -> float:
    """Critical chance shift granted by the fighter's momentum."""
    return fighter.momentum * settings.crit_chance_per_momentum
