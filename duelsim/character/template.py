"""
Character template module.

Templates are the immutable description of a character. A battle never
mutates them: it builds a `FighterState` by value-copying the parts that
change during the fight.
"""

from pydantic import BaseModel, ConfigDict, Field

from duelsim.core.constants import Element, SelectionMode

from .moves import Move


class PersonalityProfile(BaseModel):
    """
    Traits steering the AI. Every trait lives in [0, 1] except the
    signature-move bias, which maps move names to weight multipliers.
    """

    aggression: float = Field(0.5, ge=0.0, le=1.0)
    patience: float = Field(0.5, ge=0.0, le=1.0)
    risk_tolerance: float = Field(0.5, ge=0.0, le=1.0)
    opportunism: float = Field(0.5, ge=0.0, le=1.0)
    creativity: float = Field(0.5, ge=0.0, le=1.0)
    defensive_bias: float = Field(0.5, ge=0.0, le=1.0)
    anti_repeater: float = Field(0.5, ge=0.0, le=1.0)
    predictability: float = Field(0.5, ge=0.0, le=1.0)
    signature_move_bias: dict[str, float] = Field(default_factory=dict)

    def bump(self, trait: str, amount: float) -> None:
        """Shifts a trait by `amount`, keeping it in [0, 1]."""
        setattr(self, trait, max(0.0, min(1.0, getattr(self, trait) + amount)))


class Relationship(BaseModel):
    """How a character reacts to one specific opponent."""

    model_config = ConfigDict(frozen=True)

    relationship_type: str = Field("neutral")
    stress_modifier: float = Field(1.0, gt=0.0)
    resilience_modifier: float = Field(1.0, gt=0.0)


class AIRuleSpec(BaseModel):
    """
    A character-specific AI rule expressed as data: use `move` when the named
    condition holds.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    priority: int = Field(5, description="Rules at or above the must-react priority fire outright.")
    move: str = Field(description="Name of the move the rule selects.")
    condition: str = Field(description="Name of a registered AI condition.")
    condition_arg: float | str | None = Field(None, description="Argument for the condition.")
    description: str = ""


class CharacterTemplate(BaseModel):
    """Immutable description of a character."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Registry id of the character.")
    name: str = Field(description="Display name.")
    element: Element = Field(Element.NONE, description="Primary element.")
    faction: str = Field("neutral", description="Faction, used by curbstomp rules.")
    is_bender: bool = Field(True, description="False for non-benders.")
    power_tier: int = Field(5, ge=1, le=10, description="Rough power ranking.")
    mobility: float = Field(0.5, ge=0.0, le=1.0, description="Repositioning skill.")
    base_health: int = Field(100, ge=1, le=100)
    base_energy: int = Field(100, ge=0, le=100)
    resilience: float = Field(
        1.0, gt=0.0, description="Scales mental thresholds and stress resistance."
    )
    collateral_tolerance: float = Field(0.5, ge=0.0, le=1.0)
    personality: PersonalityProfile = Field(default_factory=PersonalityProfile)
    selection_mode: SelectionMode = Field(SelectionMode.SOFTMAX)
    special_traits: dict[str, float | bool] = Field(default_factory=dict)
    relationships: dict[str, Relationship] = Field(default_factory=dict)
    moves: tuple[Move, ...] = Field(default_factory=tuple)
    desperation_move: Move | None = Field(
        None, description="One-shot move forced when health is critically low."
    )
    ai_rules: tuple[AIRuleSpec, ...] = Field(default_factory=tuple)

    def get_move(self, name: str) -> Move | None:
        for move in self.moves:
            if move.name == name:
                return move
        return None

    def relationship_with(self, opponent_id: str) -> Relationship | None:
        return self.relationships.get(opponent_id)
