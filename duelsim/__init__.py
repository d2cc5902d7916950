"""
duelsim: a two-fighter, turn-based duel engine.

Typical use::

    from duelsim import simulate_battle

    result = simulate_battle("azula", "zuko", "fire-nation-capital", "day", seed=7)
"""

from duelsim.battle import BattleResult, simulate_battle
from duelsim.core.content import ContentRepository
from duelsim.core.error_handling import ContentValidationError, UnknownContentError
from duelsim.core.settings import BattleSettings

__version__ = "0.1.0"

__all__ = [
    "BattleResult",
    "BattleSettings",
    "ContentRepository",
    "ContentValidationError",
    "UnknownContentError",
    "simulate_battle",
]
