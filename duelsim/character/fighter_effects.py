"""
Fighter effects module.

Tracks the status effects and the single tactical-state slot of one fighter.
"""

from collections.abc import Iterator
from typing import Any

from duelsim.core.constants import EffectType
from duelsim.core.logging import log_debug
from duelsim.effects.status_effect import ActiveStatusEffect
from duelsim.effects.tactical_state import TacticalState


class FighterEffects:
    """
    Manages the active status effects and the tactical state of a fighter.

    Attributes:
        _owner (Any):
            The fighter that owns this module.
        active (list[ActiveStatusEffect]):
            Effects currently applied, in application order.
        tactical_state (TacticalState | None):
            The single tactical-state slot.

    """

    _owner: Any
    active: list[ActiveStatusEffect]
    tactical_state: TacticalState | None

    def __init__(self, owner: Any) -> None:
        self._owner = owner
        self.active = []
        self.tactical_state = None

    # === Status effects ===

    def add(self, effect: ActiveStatusEffect) -> None:
        self.active.append(effect)

    def remove(self, effect: ActiveStatusEffect) -> bool:
        if effect in self.active:
            self.active.remove(effect)
            return True
        return False

    def get(self, effect_type: EffectType) -> ActiveStatusEffect | None:
        for effect in self.active:
            if effect.effect_type == effect_type:
                return effect
        return None

    def has(self, effect_type: EffectType) -> bool:
        return self.get(effect_type) is not None

    @property
    def is_stunned(self) -> bool:
        return self.has(EffectType.STUN)

    def __iter__(self) -> Iterator[ActiveStatusEffect]:
        return iter(self.active)

    def __len__(self) -> int:
        return len(self.active)

    # === Tactical state ===

    def set_tactical_state(self, state: TacticalState) -> TacticalState | None:
        """
        Places a state in the slot, replacing any existing one.

        Returns:
            TacticalState | None: The replaced state, if any.

        """
        replaced = self.tactical_state
        self.tactical_state = state
        if replaced is not None:
            log_debug(
                f"{self._owner.name}: {replaced.name} replaced by {state.name}",
            )
        return replaced

    def clear_tactical_state(self) -> TacticalState | None:
        cleared = self.tactical_state
        self.tactical_state = None
        return cleared

    def tick_tactical_state(self) -> TacticalState | None:
        """
        Ticks the tactical state down.

        Returns:
            TacticalState | None: The state if it just expired.

        """
        state = self.tactical_state
        if state is not None and state.turn_update():
            self.tactical_state = None
            return state
        return None
