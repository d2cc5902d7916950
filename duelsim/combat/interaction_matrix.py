"""
Move interaction matrix.

Two tables: high-risk moves that are penalized when used without an
opening, and move-versus-move counter strengths consulted by the AI when it
predicts the opponent's next move. Type-level counters cover pairs the
move table does not list.
"""

from duelsim.character.moves import Move
from duelsim.core.constants import MoveType

# Damage multiplier applied to a punishable move used without an opening.
PUNISHABLE_MOVES: dict[str, float] = {
    "Lightning Generation": 0.2,
    "Emperor's Wrath": 0.3,
    "Bloodbending": 0.1,
    "Tidal Wave": 0.25,
    "Rock Avalanche": 0.3,
    "Rock Coffin": 0.4,
    "Octopus Form": 0.5,
    "Rock Armor": 0.6,
    "Reluctant Finale": 0.4,
}

# move -> opponent move it counters -> strength (> 1 means favourable).
MOVE_COUNTERS: dict[str, dict[str, float]] = {
    "Water Whip": {
        "Fire Whip": 1.3,
        "Fire Daggers": 1.2,
        "Sword Strike": 1.2,
        "Boomerang Throw": 1.1,
    },
    "Ice Spears": {"Water Whip": 1.4, "Earth Wave": 1.2, "Acrobatic Flips": 1.2},
    "Water Shield": {
        "Fire Daggers": 1.5,
        "Blue Fire Daggers": 1.4,
        "Knife Barrage": 1.6,
        "Boomerang Throw": 1.6,
        "Boulder Throw": 1.2,
    },
    "Ice Prison": {
        "Acrobatic Flips": 1.4,
        "Sword Strike": 1.5,
        "Flame Sword": 1.4,
        "Tactical Retreat": 1.3,
    },
    "Fire Daggers": {"Ice Spears": 1.2, "Ice Prison": 1.2},
    "Flame Sword": {"Water Whip": 1.2, "Ice Spears": 1.3, "Sword Strike": 1.1},
    "Fire Shield": {
        "Ice Spears": 1.4,
        "Boomerang Throw": 1.2,
        "Knife Barrage": 1.2,
    },
    "Dragon's Breath": {"Water Shield": 1.2},
    "Earth Wave": {"Fire Whip": 1.2},
    "Seismic Slam": {
        "Acrobatic Flips": 1.4,
        "Ice Prison": 1.3,
        "Water Shield": 1.3,
        "Jet Propulsion": 1.3,
    },
    "Metal Bending": {
        "Sword Strike": 2.5,
        "Boomerang Throw": 2.5,
        "Knife Barrage": 2.5,
        "Pinning Strike": 2.5,
        "Rock Armor": 1.3,
    },
    "Boulder Throw": {"Ice Spears": 1.3, "Fire Shield": 1.3},
    "Blue Fire Daggers": {"Ice Spears": 1.4, "Ice Prison": 1.4},
    "Flame Burst": {
        "Sword Strike": 1.5,
        "Ice Spears": 1.3,
        "Water Whip": 1.2,
        "Pinning Strike": 1.3,
    },
    "Pinning Strike": {
        "Water Whip": 1.6,
        "Fire Whip": 1.6,
        "Tactical Retreat": 1.4,
        "Jet Propulsion": 1.3,
    },
    "Boomerang Throw": {"Calculated Feint": 1.2},
    "Smoke Bomb": {"Precision Strike": 1.3, "Knife Barrage": 1.2},
}

# Fallback when the move table has no entry for the pair.
TYPE_COUNTERS: dict[MoveType, dict[MoveType, float]] = {
    MoveType.DEFENSE: {MoveType.OFFENSE: 1.3, MoveType.FINISHER: 1.3},
    MoveType.OFFENSE: {MoveType.UTILITY: 1.1},
}
REPOSITION_VS_FINISHER = 1.2


def punish_penalty(move: Move) -> float | None:
    """Returns the penalty for a punishable move, None for regular moves."""
    return PUNISHABLE_MOVES.get(move.name)


def counter_strength(
    move: Move, predicted_name: str, predicted_type: MoveType | None = None
) -> float:
    """
    How well `move` answers the predicted opponent move.

    Args:
        move (Move): Candidate move.
        predicted_name (str): Name of the predicted opponent move.
        predicted_type (MoveType | None): Its type, for the fallback table.

    Returns:
        float: Counter strength; 1.0 means no known relationship.

    """
    specific = MOVE_COUNTERS.get(move.name, {}).get(predicted_name)
    if specific is not None:
        return specific
    if predicted_type is None:
        return 1.0
    if move.is_reposition and predicted_type == MoveType.FINISHER:
        return REPOSITION_VS_FINISHER
    return TYPE_COUNTERS.get(move.move_type, {}).get(predicted_type, 1.0)
