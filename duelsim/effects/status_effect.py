"""
Status effect models.

Defines the declaration of a status effect (what a move or rule applies) and
the live effect that sits on a fighter and ticks down every turn.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from duelsim.core.constants import EffectCategory, EffectType

DEFAULT_EFFECT_NAMES: dict[EffectType, str] = {
    EffectType.BURN: "Searing Burn",
    EffectType.STUN: "Stunned",
    EffectType.DEFENSE_UP: "Defense Boost",
    EffectType.DEFENSE_DOWN: "Defense Break",
    EffectType.ATTACK_UP: "Attack Boost",
    EffectType.HEAL_OVER_TIME: "Regeneration",
    EffectType.SLOW: "Slowed",
    EffectType.CRIT_UP: "Critical Boost",
}


class StatusEffectSpec(BaseModel):
    """
    Declaration of a status effect carried by a move or a curbstomp rule.
    """

    effect_type: EffectType = Field(description="The closed effect type.")
    duration: int = Field(ge=1, description="Ticks before the effect expires.")
    potency: float = Field(
        0.0,
        ge=0.0,
        description=(
            "Damage or healing per tick for Burn/HealOverTime, energy per tick "
            "for Slow, percentage for the modifier effects."
        ),
    )
    target: Literal["opponent", "self"] = Field(
        "opponent", description="Who receives the effect when a move applies it."
    )
    name: str | None = Field(None, description="Display name override.")

    @property
    def display_name(self) -> str:
        return self.name or DEFAULT_EFFECT_NAMES[self.effect_type]


class ActiveStatusEffect(BaseModel):
    """A status effect currently applied to a fighter."""

    id: str = Field(description="Battle-unique identifier.")
    name: str = Field(description="Display name.")
    effect_type: EffectType = Field(description="The closed effect type.")
    category: EffectCategory = Field(description="Buff or debuff.")
    duration: int = Field(description="Remaining ticks.")
    potency: float = Field(0.0, description="Strength of the effect.")
    source_ability: str = Field("", description="Move or mechanic that applied it.")
    turn_applied: int = Field(0, description="Turn on which it was applied.")
    ticks_elapsed: int = Field(0, description="Ticks processed so far.")

    def turn_update(self) -> bool:
        """
        Decrements the duration by one tick.

        Returns:
            bool: True if the effect has expired.

        """
        self.duration -= 1
        self.ticks_elapsed += 1
        return self.duration <= 0

    def model_post_init(self, _: Any) -> None:
        if self.duration < 0:
            raise ValueError("Duration must be a non-negative integer.")
        if self.potency < 0:
            raise ValueError("Potency must be non-negative.")
