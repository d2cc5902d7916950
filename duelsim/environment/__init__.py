"""
Locations, battle conditions and the accumulated environment state.
"""

from .conditions import (
    BattleConditions,
    EnvironmentalModifiers,
    EnvironmentState,
    calculate_collateral,
    energy_cost,
    environmental_modifiers,
)
from .location import DamageThresholds, ElementModifier, LocationConditions

__all__ = [
    "BattleConditions",
    "EnvironmentalModifiers",
    "EnvironmentState",
    "calculate_collateral",
    "energy_cost",
    "environmental_modifiers",
    "DamageThresholds",
    "ElementModifier",
    "LocationConditions",
]
