"""
Move definitions.

A move is immutable content: its name, category, power, element, tag set,
optional setup and status effect, and energy cost.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from duelsim.core.constants import CollateralImpact, Element, MoveType
from duelsim.effects.status_effect import StatusEffectSpec
from duelsim.effects.tactical_state import TacticalSetup

REQUIRES_OPENING_TAG = "requires_opening"
REPOSITION_TAGS = frozenset({"utility_reposition", "mobility_move"})
LIGHTNING_ATTACK_TAG = "lightning_attack"
EVASIVE_TAG = "evasive"


class Move(BaseModel):
    """
    A move or ability a fighter can use.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Unique name of the move.")
    move_type: MoveType = Field(description="Offense, Defense, Utility or Finisher.")
    power: int = Field(0, ge=0, le=100, description="Base power of the move.")
    element: Element = Field(Element.PHYSICAL, description="Elemental nature.")
    tags: tuple[str, ...] = Field(
        default_factory=tuple, description="Tags driving rule matching."
    )
    setup: TacticalSetup | None = Field(
        None, description="Tactical state imposed on the defender on a clean hit."
    )
    applies_effect: StatusEffectSpec | None = Field(
        None, description="Status effect applied on a non-Weak result."
    )
    collateral_impact: CollateralImpact = Field(
        CollateralImpact.NONE, description="Declared environmental impact."
    )
    energy_cost: int | None = Field(
        None,
        ge=0,
        le=100,
        description="Explicit energy cost; derived from power when omitted.",
    )

    @property
    def cost(self) -> int:
        """Energy needed to use the move."""
        if self.energy_cost is not None:
            return self.energy_cost
        return int(max(4, min(100, round(self.power * 0.22) + 4)))

    @property
    def requires_opening(self) -> bool:
        return REQUIRES_OPENING_TAG in self.tags

    @property
    def is_reposition(self) -> bool:
        return any(tag in REPOSITION_TAGS for tag in self.tags)

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def has_any_tag(self, tags: Any) -> bool:
        return any(tag in self.tags for tag in tags)

    def __str__(self) -> str:
        return self.name


# Always-available fallback. It costs nothing, so a decision always exists.
STRUGGLE = Move(
    name="Struggle",
    move_type=MoveType.OFFENSE,
    power=10,
    element=Element.PHYSICAL,
    tags=("struggle", "melee_range"),
    energy_cost=0,
)

# Desperation move used by fighters whose template does not declare one.
LAST_STAND = Move(
    name="Last Stand",
    move_type=MoveType.FINISHER,
    power=85,
    element=Element.PHYSICAL,
    tags=("desperation", "high_damage"),
    collateral_impact=CollateralImpact.LOW,
    energy_cost=6,
)
