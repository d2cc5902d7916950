"""
Combat module: move resolution, reactive defenses, momentum and the move
interaction matrix.
"""

from .interaction_matrix import (
    MOVE_COUNTERS,
    PUNISHABLE_MOVES,
    TYPE_COUNTERS,
    counter_strength,
    punish_penalty,
)
from .momentum import modify_momentum, momentum_crit_modifier
from .move_resolver import (
    MoveResult,
    apply_move_result,
    classify_effectiveness,
    critical_chance,
    reposition_chance,
    resolve_move,
)
from .reactive_defense import (
    DEFAULT_PROFILES,
    LIGHTNING_REDIRECTION,
    ReactiveDefenseProfile,
    ReactiveDefenseResult,
    attempt_reactive_defense,
    success_chance,
)

__all__ = [
    # Interaction matrix.
    "MOVE_COUNTERS",
    "PUNISHABLE_MOVES",
    "TYPE_COUNTERS",
    "counter_strength",
    "punish_penalty",
    # Momentum.
    "modify_momentum",
    "momentum_crit_modifier",
    # Move resolution.
    "MoveResult",
    "apply_move_result",
    "classify_effectiveness",
    "critical_chance",
    "reposition_chance",
    "resolve_move",
    # Reactive defense.
    "DEFAULT_PROFILES",
    "LIGHTNING_REDIRECTION",
    "ReactiveDefenseProfile",
    "ReactiveDefenseResult",
    "attempt_reactive_defense",
    "success_chance",
]
