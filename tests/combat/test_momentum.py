"""
Tests for momentum bounds and the interaction matrix.
"""

from duelsim.combat.interaction_matrix import counter_strength, punish_penalty
from duelsim.combat.momentum import modify_momentum
from duelsim.core.constants import MoveType


def test_momentum_is_clamped(attacker):
    """Momentum stays in [-5, 5] and reports the change actually applied."""
    assert modify_momentum(attacker, 3, "test") == 3
    assert modify_momentum(attacker, 4, "test") == 2
    assert attacker.momentum == 5
    assert modify_momentum(attacker, -20, "test") == -10
    assert attacker.momentum == -5


def test_punishable_moves(jab, lightning):
    """Only listed high-risk moves carry a punish penalty."""
    assert punish_penalty(lightning) == 0.2
    assert punish_penalty(jab) is None


def test_counter_strength_falls_back_to_types(guard, sidestep, jab):
    """Specific counters win; otherwise the type table answers."""
    assert counter_strength(guard, "Unknown Strike", MoveType.OFFENSE) == 1.3
    assert counter_strength(sidestep, "Unknown Finisher", MoveType.FINISHER) == 1.2
    assert counter_strength(jab, "Unknown", None) == 1.0
