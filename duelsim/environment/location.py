"""
Location conditions.

Static description of a battle location: elemental modifiers, fragility,
disabled elements, environment damage thresholds and the flags consumed by
the curbstomp and mental-state engines.
"""

from pydantic import BaseModel, ConfigDict, Field

from duelsim.core.constants import Element, EnvironmentLevel


class ElementModifier(BaseModel):
    """Per-element adjustments a location applies to moves."""

    model_config = ConfigDict(frozen=True)

    damage_multiplier: float = Field(1.0, ge=0.0)
    energy_cost_modifier: float = Field(1.0, ge=0.0)
    collateral_modifier: float = Field(1.0, ge=0.0)


class DamageThresholds(BaseModel):
    """Environment damage levels at which the location degrades."""

    model_config = ConfigDict(frozen=True)

    minor: float = 10.0
    moderate: float = 30.0
    severe: float = 60.0
    catastrophic: float = 85.0

    def classify(self, damage_level: float) -> EnvironmentLevel:
        if damage_level >= self.catastrophic:
            return EnvironmentLevel.CATASTROPHIC
        if damage_level >= self.severe:
            return EnvironmentLevel.SEVERE
        if damage_level >= self.moderate:
            return EnvironmentLevel.MODERATE
        if damage_level >= self.minor:
            return EnvironmentLevel.MINOR
        return EnvironmentLevel.NONE


class LocationConditions(BaseModel):
    """Immutable description of a battle location."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Registry id of the location.")
    name: str = Field(description="Display name.")
    tags: tuple[str, ...] = Field(
        default_factory=tuple, description="Flags such as 'hot', 'urban', 'slippery'."
    )
    fragility: float = Field(0.5, ge=0.0, le=1.0)
    environmental_modifiers: dict[Element, ElementModifier] = Field(default_factory=dict)
    disabled_elements: tuple[Element, ...] = Field(default_factory=tuple)
    damage_thresholds: DamageThresholds = Field(default_factory=DamageThresholds)
    allow_pre_battle_curbstomp: bool = Field(
        False, description="Whether curbstomp rules may defeat a fighter before turn 1."
    )
    personal_stressors: dict[str, float] = Field(
        default_factory=dict,
        description="Flat per-turn stress for characters tied to this place.",
    )

    @property
    def is_hot(self) -> bool:
        return "hot" in self.tags

    @property
    def is_cold(self) -> bool:
        return "cold" in self.tags

    @property
    def is_slippery(self) -> bool:
        return "slippery" in self.tags

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def modifier_for(self, element: Element) -> ElementModifier:
        return self.environmental_modifiers.get(element, _NEUTRAL)

    def is_disabled(self, element: Element) -> bool:
        return element in self.disabled_elements


_NEUTRAL = ElementModifier()
