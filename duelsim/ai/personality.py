"""
AI personality management.

The dynamic profile is the fighter's personality as reshaped by its current
mental level; it is recomputed for every decision and never written back.
Drift, on the other hand, permanently adjusts the fighter's own copy of the
profile after streaks of results.
"""

from typing import TYPE_CHECKING

from duelsim.core.constants import EffectivenessLevel, MentalLevel
from duelsim.core.logging import log_debug
from duelsim.core.utils import clamp

if TYPE_CHECKING:
    from duelsim.character.fighter import FighterState

TRAITS = (
    "aggression",
    "patience",
    "risk_tolerance",
    "opportunism",
    "creativity",
    "defensive_bias",
    "anti_repeater",
    "predictability",
)

WEAK_STREAK_CREATIVITY = 0.15
WEAK_STREAK_RISK = 0.1
STRONG_STREAK_AGGRESSION = 0.1
STREAK_LENGTH = 2


def dynamic_personality(fighter: "FighterState") -> dict[str, float]:
    """
    Returns the fighter's traits reshaped by its mental level.

    Stressed fighters lose patience and take more risks; shaken fighters
    also lose opportunism and gain aggression; broken fighters are reduced
    to raw aggression. Reshaped traits may exceed 1.
    """
    profile = {trait: getattr(fighter.personality, trait) for trait in TRAITS}
    level = fighter.mental_level
    if level == MentalLevel.STRESSED:
        profile["patience"] *= 0.7
        profile["risk_tolerance"] = clamp(profile["risk_tolerance"] + 0.15, 0.0, 1.2)
    elif level == MentalLevel.SHAKEN:
        profile["patience"] *= 0.4
        profile["opportunism"] *= 0.6
        profile["aggression"] = clamp(profile["aggression"] + 0.2, 0.0, 1.2)
        profile["risk_tolerance"] = clamp(profile["risk_tolerance"] + 0.3, 0.0, 1.2)
    elif level == MentalLevel.BROKEN:
        profile["patience"] = 0.05
        profile["opportunism"] = 0.1
        profile["aggression"] = clamp(profile["aggression"] + 0.4, 0.0, 1.3)
        profile["risk_tolerance"] = clamp(profile["risk_tolerance"] + 0.5, 0.0, 1.5)
    return profile


def apply_personality_drift(
    fighter: "FighterState", effectiveness: EffectivenessLevel
) -> list[str]:
    """
    Updates the result streaks and drifts the personality on a full streak.

    Returns:
        list[str]: The traits that drifted.

    """
    memory = fighter.ai_memory
    if effectiveness == EffectivenessLevel.WEAK:
        memory.consecutive_weak += 1
        memory.consecutive_strong = 0
    elif effectiveness.is_good:
        memory.consecutive_strong += 1
        memory.consecutive_weak = 0
    else:
        memory.consecutive_weak = 0
        memory.consecutive_strong = 0

    drifted: list[str] = []
    if memory.consecutive_weak >= STREAK_LENGTH:
        fighter.personality.bump("creativity", WEAK_STREAK_CREATIVITY)
        fighter.personality.bump("risk_tolerance", WEAK_STREAK_RISK)
        memory.consecutive_weak = 0
        drifted = ["creativity", "risk_tolerance"]
    elif memory.consecutive_strong >= STREAK_LENGTH:
        fighter.personality.bump("aggression", STRONG_STREAK_AGGRESSION)
        memory.consecutive_strong = 0
        drifted = ["aggression"]
    if drifted:
        log_debug(f"{fighter.name} personality drift", {"traits": drifted})
    return drifted
