"""
Character module: immutable templates and moves, plus the mutable
per-battle fighter state built from them.
"""

from .fighter import MAX_ENERGY, MAX_HEALTH, FighterSnapshot, FighterState
from .fighter_effects import FighterEffects
from .memory import AIMemory
from .moves import (
    EVASIVE_TAG,
    LAST_STAND,
    LIGHTNING_ATTACK_TAG,
    REPOSITION_TAGS,
    REQUIRES_OPENING_TAG,
    STRUGGLE,
    Move,
)
from .template import AIRuleSpec, CharacterTemplate, PersonalityProfile, Relationship

__all__ = [
    # Runtime state.
    "MAX_ENERGY",
    "MAX_HEALTH",
    "FighterSnapshot",
    "FighterState",
    "FighterEffects",
    "AIMemory",
    # Moves.
    "EVASIVE_TAG",
    "LAST_STAND",
    "LIGHTNING_ATTACK_TAG",
    "REPOSITION_TAGS",
    "REQUIRES_OPENING_TAG",
    "STRUGGLE",
    "Move",
    # Templates.
    "AIRuleSpec",
    "CharacterTemplate",
    "PersonalityProfile",
    "Relationship",
]
