"""
Fighter runtime state.

A `FighterState` is created once per battle by value-copying the mutable
parts of an immutable `CharacterTemplate`. It is never shared across battles
and is discarded at battle end (only its snapshot survives in the result).
"""

from typing import Any

from pydantic import BaseModel, Field

from duelsim.core.constants import EscalationTier, MentalLevel
from duelsim.core.settings import DEFAULT_SETTINGS, BattleSettings
from duelsim.core.utils import clamp
from duelsim.effects.status_effect import ActiveStatusEffect
from duelsim.effects.tactical_state import TacticalState
from duelsim.state.escalation import tier_for_health
from duelsim.state.mental_state import MentalState

from .fighter_effects import FighterEffects
from .memory import AIMemory
from .moves import LAST_STAND, Move
from .template import CharacterTemplate, PersonalityProfile, Relationship

MAX_HEALTH = 100.0
MAX_ENERGY = 100.0


class FighterSnapshot(BaseModel):
    """Serializable final state of a fighter."""

    id: str
    name: str
    health: float
    energy: float
    momentum: int
    mental_level: MentalLevel
    stress: float
    escalation: EscalationTier
    tactical_state: TacticalState | None = None
    status_effects: list[ActiveStatusEffect] = Field(default_factory=list)
    move_history: list[str] = Field(default_factory=list)
    desperation_used: bool = False
    personality: PersonalityProfile


class FighterState:
    """
    Mutable per-battle state of one fighter.

    Attributes:
        template (CharacterTemplate):
            The immutable template the fighter was built from.
        opponent_id (str):
            Id of the opponent in this battle.
        mental_state (MentalState):
            Stress score and mental level.
        escalation (EscalationTier):
            Physical-condition tier derived from health.
        effects (FighterEffects):
            Status effects and the tactical-state slot.
        personality (PersonalityProfile):
            Private copy of the template personality; drifts during the battle.
        special_traits (dict[str, float | bool]):
            Private copy of the template traits.
        relationship (Relationship | None):
            Relational modifiers against the current opponent.
        ai_memory (AIMemory):
            What the fighter learned about its opponent.
        move_history (list[str]):
            Names of the moves used, in order.
        decision_trace (list[Any]):
            One trace per AI decision.

    """

    def __init__(
        self,
        template: CharacterTemplate,
        opponent_id: str,
        settings: BattleSettings = DEFAULT_SETTINGS,
    ) -> None:
        self.template = template
        self.opponent_id = opponent_id
        self.settings = settings

        self._health = float(template.base_health)
        self._energy = float(template.base_energy)
        self._momentum = 0

        self.mental_state = MentalState()
        self.escalation = tier_for_health(self._health)
        self.effects = FighterEffects(owner=self)
        self.personality = template.personality.model_copy(deep=True)
        self.special_traits = dict(template.special_traits)
        self.relationship: Relationship | None = template.relationship_with(opponent_id)
        self.ai_memory = AIMemory()

        self.move_history: list[str] = []
        self.decision_trace: list[Any] = []
        self.last_move: Move | None = None
        self.last_result: Any = None
        self.consecutive_passive = 0
        self.desperation_used = False
        self.pending_desperation = False

    @classmethod
    def from_template(
        cls,
        template: CharacterTemplate,
        opponent_id: str,
        settings: BattleSettings = DEFAULT_SETTINGS,
    ) -> "FighterState":
        return cls(template, opponent_id, settings)

    # ============================================================================
    # IDENTITY
    # ============================================================================

    @property
    def id(self) -> str:
        return self.template.id

    @property
    def name(self) -> str:
        return self.template.name

    @property
    def moves(self) -> tuple[Move, ...]:
        return self.template.moves

    @property
    def desperation_move(self) -> Move:
        return self.template.desperation_move or LAST_STAND

    # ============================================================================
    # BOUNDED RESOURCES
    # ============================================================================

    @property
    def health(self) -> float:
        return self._health

    @health.setter
    def health(self, value: float) -> None:
        self._health = round(clamp(float(value), 0.0, MAX_HEALTH), 2)

    @property
    def energy(self) -> float:
        return self._energy

    @energy.setter
    def energy(self, value: float) -> None:
        self._energy = round(clamp(float(value), 0.0, MAX_ENERGY), 2)

    @property
    def momentum(self) -> int:
        return self._momentum

    @momentum.setter
    def momentum(self, value: float) -> None:
        self._momentum = int(
            clamp(round(value), self.settings.momentum_min, self.settings.momentum_max)
        )

    # ============================================================================
    # DERIVED STATE
    # ============================================================================

    @property
    def mental_level(self) -> MentalLevel:
        return self.mental_state.level

    @property
    def tactical_state(self) -> TacticalState | None:
        return self.effects.tactical_state

    @property
    def is_stunned(self) -> bool:
        return self.effects.is_stunned

    @property
    def has_opening(self) -> bool:
        """True if the opponent could exploit this fighter right now."""
        state = self.tactical_state
        return self.is_stunned or (state is not None and state.is_opening)

    def is_down(self) -> bool:
        return self._health <= 0

    def can_afford(self, move: Move, cost: float | None = None) -> bool:
        return self._energy >= (move.cost if cost is None else cost)

    def has_trait(self, trait: str) -> bool:
        return bool(self.special_traits.get(trait, False))

    def trait_value(self, trait: str) -> float:
        return float(self.special_traits.get(trait, 0.0))

    # ============================================================================
    # OUTPUT
    # ============================================================================

    def snapshot(self) -> FighterSnapshot:
        return FighterSnapshot(
            id=self.id,
            name=self.name,
            health=self._health,
            energy=self._energy,
            momentum=self._momentum,
            mental_level=self.mental_state.level,
            stress=round(self.mental_state.stress, 2),
            escalation=self.escalation,
            tactical_state=(
                self.tactical_state.model_copy() if self.tactical_state else None
            ),
            status_effects=[effect.model_copy() for effect in self.effects.active],
            move_history=list(self.move_history),
            desperation_used=self.desperation_used,
            personality=self.personality.model_copy(deep=True),
        )

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"FighterState({self.id!r}, health={self._health}, energy={self._energy})"
