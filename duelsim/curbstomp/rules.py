"""
Curbstomp rule model.

A curbstomp rule is a data-defined override that can force an outcome
(instant win or loss, environmental death, a buff or debuff, a momentum
swing, or a forced draw) outside the normal combat math. Rules are gated by
probability rolls and an optional named condition.
"""

from typing import TYPE_CHECKING, Any, Callable, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from duelsim.core.constants import ApplicabilityKind, Element, OutcomeType
from duelsim.effects.status_effect import StatusEffectSpec

if TYPE_CHECKING:
    from duelsim.character.fighter import FighterState
    from duelsim.character.moves import Move

PROTAGONIST = "protagonist"
OPPONENT = "opponent"


class Applicability(BaseModel):
    """Who a rule applies to."""

    model_config = ConfigDict(frozen=True)

    kind: ApplicabilityKind
    value: str | None = Field(
        None,
        description=(
            "Character id, element, faction (prefix '!' to negate) or "
            "location id, depending on the kind."
        ),
    )
    pair: tuple[str, str] | None = Field(None, description="Both ids for a pair rule.")

    @model_validator(mode="after")
    def _check_value(self) -> "Applicability":
        if self.kind == ApplicabilityKind.PAIR and self.pair is None:
            raise ValueError("A pair applicability needs 'pair'")
        needs_value = self.kind not in (ApplicabilityKind.PAIR, ApplicabilityKind.ALL)
        if needs_value and not self.value:
            raise ValueError(f"A {self.kind.value} applicability needs 'value'")
        return self

    def protagonists(
        self, fighters: tuple["FighterState", "FighterState"], location_id: str
    ) -> list["FighterState"]:
        """Returns the fighters the rule applies to, in battle order."""
        kind = self.kind
        if kind == ApplicabilityKind.ALL:
            return list(fighters)
        if kind == ApplicabilityKind.LOCATION:
            return list(fighters) if self.value == location_id else []
        if kind == ApplicabilityKind.PAIR:
            ids = {fighter.id for fighter in fighters}
            return list(fighters) if ids == set(self.pair or ()) else []
        if kind == ApplicabilityKind.CHARACTER:
            return [f for f in fighters if f.id == self.value]
        if kind == ApplicabilityKind.ELEMENT:
            return [f for f in fighters if f.template.element.value == self.value]
        # Faction, optionally negated.
        value = self.value or ""
        negated = value.startswith("!")
        faction = value[1:] if negated else value
        return [f for f in fighters if (f.template.faction == faction) != negated]


class VictimSelection(BaseModel):
    """
    How the victim of a rule is picked when it is not simply implied by the
    outcome. Ids may be fighter ids or the roles 'protagonist'/'opponent'.
    """

    mode: Literal["direct", "coin_flip", "distribution"] = "direct"
    victim_id: str | None = None
    probability: float | None = Field(
        None, ge=0.0, le=1.0, description="Chance the direct victim is hit."
    )
    probabilities: dict[str, float] = Field(default_factory=dict)


class CurbstompOutcome(BaseModel):
    """What a triggered rule does."""

    type: OutcomeType
    winner: str | None = Field(
        None, description="Winner of an instant win; defaults to the protagonist."
    )
    effect: StatusEffectSpec | None = Field(None, description="Effect for buff/debuff.")
    momentum: int = Field(0, description="Momentum granted by momentum_advantage.")
    target: Literal["protagonist", "opponent"] = Field(
        "protagonist", description="Receiver of buff/debuff/momentum outcomes."
    )
    victim_selection: VictimSelection | None = None
    self_sabotage_chance: float = Field(
        0.0,
        ge=0.0,
        le=1.0,
        description="Chance a lethal outcome turns on the other fighter instead.",
    )

    @model_validator(mode="after")
    def _check_effect(self) -> "CurbstompOutcome":
        if self.type in (OutcomeType.BUFF, OutcomeType.DEBUFF) and self.effect is None:
            raise ValueError(f"A {self.type.value} outcome needs 'effect'")
        return self


# Called as fn(protagonist, opponent, battle_state).
ConditionFn = Callable[..., bool]


class CurbstompRule(BaseModel):
    """A data-defined override rule."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    description: str = ""
    applies_to: Applicability
    trigger_chance: float = Field(1.0, ge=0.0, le=1.0)
    condition: str | None = Field(None, description="Name of a registered condition.")
    condition_arg: Any = None
    condition_fn: ConditionFn | None = Field(
        None, exclude=True, description="Code-defined condition, for embedding callers."
    )
    can_trigger_pre_battle: bool = False
    activating_move_name: str | None = None
    activating_move_tags: tuple[str, ...] = Field(default_factory=tuple)
    survival_chance: float | None = Field(
        None, ge=0.0, le=1.0, description="Miraculous survival override."
    )
    outcome: CurbstompOutcome

    @model_validator(mode="after")
    def _check_condition(self) -> "CurbstompRule":
        if self.condition is not None and self.condition not in CONDITIONS:
            raise ValueError(
                f"Curbstomp rule '{self.id}' uses unknown condition '{self.condition}'"
            )
        return self

    @property
    def needs_activating_move(self) -> bool:
        return self.activating_move_name is not None or bool(self.activating_move_tags)

    def is_activated_by(self, move: "Move | None") -> bool:
        if not self.needs_activating_move:
            return True
        if move is None:
            return False
        if self.activating_move_name is not None and move.name == self.activating_move_name:
            return True
        return move.has_any_tag(self.activating_move_tags)

    def holds_for(
        self, protagonist: "FighterState", opponent: "FighterState", battle_state: Any
    ) -> bool:
        if self.condition_fn is not None and not self.condition_fn(
            protagonist, opponent, battle_state
        ):
            return False
        if self.condition is None:
            return True
        return CONDITIONS[self.condition](protagonist, opponent, battle_state, self.condition_arg)


# =============================================================================
# Condition registry
# =============================================================================


def _location(battle_state: Any):
    return battle_state.conditions.location


CONDITIONS: dict[str, Callable[["FighterState", "FighterState", Any, Any], bool]] = {
    "always": lambda p, o, s, arg: True,
    "opponent_is_bender": lambda p, o, s, arg: o.template.is_bender,
    "opponent_is_nonbender": lambda p, o, s, arg: not o.template.is_bender,
    "protagonist_is_nonbender": lambda p, o, s, arg: not p.template.is_bender,
    "opponent_element": lambda p, o, s, arg: o.template.element == Element(arg),
    "opponent_power_tier_at_least": lambda p, o, s, arg: o.template.power_tier >= int(arg),
    "power_tier_gap_at_least": lambda p, o, s, arg: (
        o.template.power_tier - p.template.power_tier >= int(arg)
    ),
    "location_has_tag": lambda p, o, s, arg: _location(s).has_tag(str(arg)),
    "is_day": lambda p, o, s, arg: s.conditions.is_day,
    "is_night": lambda p, o, s, arg: not s.conditions.is_day,
    "protagonist_health_below": lambda p, o, s, arg: p.health < float(arg),
    "opponent_health_below": lambda p, o, s, arg: o.health < float(arg),
    "environment_damage_at_least": lambda p, o, s, arg: (
        s.environment.damage_level >= float(arg)
    ),
    "emotional_mode": lambda p, o, s, arg: s.conditions.emotional_mode,
}
