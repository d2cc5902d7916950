"""
Effects system module.

Status effects (a closed set of types processed through one dispatch
table) and tactical states (the single positional slot each fighter has).
"""

from .status_effect import (
    DEFAULT_EFFECT_NAMES,
    ActiveStatusEffect,
    StatusEffectSpec,
)
from .status_effect_engine import (
    CRISIS_DEFENSE_DOWN,
    FUSION_RECIPES,
    SEGMENT_EFFECTS,
    TICK_HANDLERS,
    StatusEffectEngine,
    crit_chance_bonus,
    incoming_damage_multiplier,
    outgoing_damage_multiplier,
)
from .tactical_state import (
    EXPOSED,
    OFF_BALANCE,
    REPOSITIONED,
    TacticalSetup,
    TacticalState,
)

__all__ = [
    # Status effects.
    "DEFAULT_EFFECT_NAMES",
    "ActiveStatusEffect",
    "StatusEffectSpec",
    "CRISIS_DEFENSE_DOWN",
    "FUSION_RECIPES",
    "SEGMENT_EFFECTS",
    "TICK_HANDLERS",
    "StatusEffectEngine",
    "crit_chance_bonus",
    "incoming_damage_multiplier",
    "outgoing_damage_multiplier",
    # Tactical states.
    "EXPOSED",
    "OFF_BALANCE",
    "REPOSITIONED",
    "TacticalSetup",
    "TacticalState",
]
