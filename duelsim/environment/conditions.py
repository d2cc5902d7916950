"""
Battle conditions and environmental modifiers.

Combines the location with the time of day and computes the multipliers a
move receives from its surroundings, the collateral damage it causes, and
the accumulated environment state of the battle.
"""

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from duelsim.core.constants import EnvironmentLevel, TimeOfDay
from duelsim.core.settings import DEFAULT_SETTINGS, BattleSettings
from duelsim.core.utils import clamp

from .location import LocationConditions

if TYPE_CHECKING:
    from duelsim.character.moves import Move

SUN_BONUS = 1.1
SUN_PENALTY = 0.9
SUN_COST_PENALTY = 1.1
TERRAIN_BONUS = 1.05
DISABLED_ELEMENT_MULTIPLIER = 0.25


class BattleConditions(BaseModel):
    """Everything about the surroundings of one battle."""

    location: LocationConditions
    time_of_day: TimeOfDay = TimeOfDay.DAY
    emotional_mode: bool = False

    @property
    def is_day(self) -> bool:
        return self.time_of_day == TimeOfDay.DAY

    @property
    def location_id(self) -> str:
        return self.location.id


class EnvironmentalModifiers(BaseModel):
    """Result of `environmental_modifiers`."""

    damage_multiplier: float = 1.0
    energy_cost_multiplier: float = 1.0
    collateral_multiplier: float = 1.0
    disabled: bool = False
    notes: list[str] = Field(default_factory=list)


def environmental_modifiers(
    move: "Move", conditions: BattleConditions | None, is_bender: bool = True
) -> EnvironmentalModifiers:
    """
    Computes the multipliers a move receives from the time of day and the
    location.

    Args:
        move (Move): The move being used.
        conditions (BattleConditions | None): Battle conditions; None means
            neutral surroundings.
        is_bender (bool): Only benders draw on the sun and the moon.

    Returns:
        EnvironmentalModifiers: The combined multipliers and their reasons.

    """
    result = EnvironmentalModifiers()
    if conditions is None:
        return result

    element = move.element
    # Time of day.
    if is_bender and element.is_sun_fed:
        if conditions.is_day:
            result.damage_multiplier *= SUN_BONUS
            result.notes.append(f"{element.display_name} empowered by daylight")
        else:
            result.damage_multiplier *= SUN_PENALTY
            result.energy_cost_multiplier *= SUN_COST_PENALTY
            result.notes.append(f"{element.display_name} weakened at night")
    elif is_bender and element.is_moon_fed:
        if conditions.is_day:
            result.damage_multiplier *= SUN_PENALTY
            result.energy_cost_multiplier *= SUN_COST_PENALTY
            result.notes.append(f"{element.display_name} weakened by daylight")
        else:
            result.damage_multiplier *= SUN_BONUS
            result.notes.append(f"{element.display_name} empowered by the moon")

    location = conditions.location
    modifier = location.modifier_for(element)
    if modifier.damage_multiplier != 1.0 or modifier.energy_cost_modifier != 1.0:
        result.damage_multiplier *= modifier.damage_multiplier
        result.energy_cost_multiplier *= modifier.energy_cost_modifier
        result.notes.append(
            f"{location.name} modifies {element.display_name} "
            f"(x{modifier.damage_multiplier:.2f} damage)"
        )
    result.collateral_multiplier = modifier.collateral_modifier

    # Terrain flags.
    if location.is_hot and element.is_sun_fed:
        result.damage_multiplier *= TERRAIN_BONUS
        result.notes.append("hot terrain")
    if location.is_cold and element.is_moon_fed:
        result.damage_multiplier *= TERRAIN_BONUS
        result.notes.append("cold terrain")
    if location.is_slippery and move.has_tag("evasive"):
        result.damage_multiplier *= TERRAIN_BONUS
        result.notes.append("slippery footing")

    if location.is_disabled(element):
        result.disabled = True
        result.damage_multiplier *= DISABLED_ELEMENT_MULTIPLIER
        result.notes.append(f"{element.display_name} is suppressed here")
    return result


def energy_cost(
    move: "Move", conditions: BattleConditions | None, is_bender: bool = True
) -> float:
    """Energy a move actually costs under the given conditions."""
    multiplier = environmental_modifiers(move, conditions, is_bender).energy_cost_multiplier
    return clamp(move.cost * multiplier, 0.0, 100.0)


def calculate_collateral(
    move: "Move",
    conditions: BattleConditions | None,
    settings: BattleSettings = DEFAULT_SETTINGS,
) -> float:
    """
    Collateral damage = power x impact tier x fragility x element modifier,
    capped.
    """
    impact = move.collateral_impact.factor
    if impact <= 0 or move.power <= 0:
        return 0.0
    if conditions is None:
        fragility = settings.default_fragility
        element_modifier = 1.0
    else:
        fragility = conditions.location.fragility
        element_modifier = conditions.location.modifier_for(move.element).collateral_modifier
    collateral = move.power * impact * fragility * element_modifier
    return round(min(collateral, settings.collateral_cap), 2)


class EnvironmentState(BaseModel):
    """Accumulated environment damage over a battle."""

    location_id: str
    damage_level: float = Field(0.0, ge=0.0, le=100.0)
    level: EnvironmentLevel = EnvironmentLevel.NONE
    collateral_events: int = 0
    impacts: list[str] = Field(default_factory=list)

    def add_collateral(
        self, amount: float, location: LocationConditions, source: str
    ) -> bool:
        """
        Accumulates collateral damage.

        Returns:
            bool: True if the environment level changed.

        """
        if amount <= 0:
            return False
        previous = self.level
        self.damage_level = round(min(100.0, self.damage_level + amount), 2)
        self.collateral_events += 1
        self.impacts.append(source)
        self.level = location.damage_thresholds.classify(self.damage_level)
        return self.level != previous

