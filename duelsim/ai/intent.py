"""
Strategic intent.

Before weighting moves, the AI settles on a high-level intent from its
reshaped personality and the situation. Each intent multiplies the weight
of certain move types and tags.
"""

from typing import TYPE_CHECKING

from duelsim.character.moves import Move
from duelsim.core.constants import Intent, MentalLevel, MoveType

if TYPE_CHECKING:
    from duelsim.character.fighter import FighterState

LOW_COST_THRESHOLD = 20
TURTLING_STREAK = 2

INTENT_MULTIPLIERS: dict[Intent, dict[str, float]] = {
    Intent.PRESS_ADVANTAGE: {
        MoveType.OFFENSE.value: 2.0,
        MoveType.FINISHER.value: 1.5,
        MoveType.DEFENSE.value: 0.5,
    },
    Intent.CAPITALIZE_ON_OPENING: {
        MoveType.OFFENSE.value: 1.8,
        MoveType.FINISHER.value: 2.5,
        MoveType.UTILITY.value: 1.5,
        MoveType.DEFENSE.value: 0.2,
    },
    Intent.DESPERATE_GAMBIT: {
        MoveType.FINISHER.value: 2.0,
        "high_risk": 1.8,
        MoveType.DEFENSE.value: 0.4,
    },
    Intent.CAUTIOUS_DEFENSE: {
        MoveType.DEFENSE.value: 2.0,
        "evasive": 1.5,
        MoveType.FINISHER.value: 0.3,
    },
    Intent.BREAK_THE_TURTLE: {
        "bypasses_defense": 5.0,
        "unblockable_ground": 5.0,
        "utility_control": 2.0,
        MoveType.DEFENSE.value: 0.1,
    },
    Intent.CONSERVE_ENERGY: {"low_cost": 3.0},
    Intent.UNFOCUSED_RAGE: {
        MoveType.OFFENSE.value: 2.5,
        MoveType.DEFENSE.value: 0.1,
        MoveType.UTILITY.value: 0.1,
    },
    Intent.PANICKED_DEFENSE: {
        MoveType.DEFENSE.value: 3.0,
        "evasive": 2.0,
        MoveType.OFFENSE.value: 0.3,
        MoveType.FINISHER.value: 0.05,
    },
    Intent.OPENING_MOVES: {MoveType.UTILITY.value: 1.3, MoveType.FINISHER.value: 0.5},
    Intent.STANDARD_EXCHANGE: {},
}


def determine_intent(
    fighter: "FighterState",
    opponent: "FighterState",
    turn: int,
    profile: dict[str, float],
) -> Intent:
    """
    Picks the intent for this decision, checked in a fixed order.

    Args:
        fighter (FighterState): The deciding fighter.
        opponent (FighterState): Its opponent.
        turn (int): Current turn.
        profile (dict[str, float]): The fighter's reshaped personality.

    Returns:
        Intent: The chosen intent.

    """
    health_gap = fighter.health - opponent.health
    if profile["opportunism"] > 0.8 and opponent.has_opening:
        return Intent.CAPITALIZE_ON_OPENING
    if profile["risk_tolerance"] > 0.8 and fighter.health < 40:
        return Intent.DESPERATE_GAMBIT
    if profile["patience"] > 0.8 and turn < 2:
        return Intent.CAUTIOUS_DEFENSE
    if profile["aggression"] > 0.9 and health_gap > 20:
        return Intent.PRESS_ADVANTAGE
    if fighter.mental_level == MentalLevel.BROKEN:
        return Intent.UNFOCUSED_RAGE
    if fighter.mental_level == MentalLevel.SHAKEN:
        return Intent.PANICKED_DEFENSE
    if opponent.consecutive_passive >= TURTLING_STREAK:
        return Intent.BREAK_THE_TURTLE
    if fighter.energy < 30:
        return Intent.CONSERVE_ENERGY
    if turn < 2:
        return Intent.OPENING_MOVES
    return Intent.STANDARD_EXCHANGE


def intent_multiplier(intent: Intent, move: Move) -> float:
    """Combined multiplier an intent gives a move (type, tags and cost)."""
    multipliers = INTENT_MULTIPLIERS.get(intent, {})
    if not multipliers:
        return 1.0
    factor = multipliers.get(move.move_type.value, 1.0)
    for tag in move.tags:
        factor *= multipliers.get(tag, 1.0)
    if "low_cost" in multipliers and move.cost < LOW_COST_THRESHOLD:
        factor *= multipliers["low_cost"]
    return factor
