"""
Tactical state module.

A tactical state is a transient single-slot condition on a fighter, such as
"Exposed" or "Repositioned". Negative states are openings that moves tagged
`requires_opening` can consume.
"""

from typing import Any

from pydantic import BaseModel, Field


class TacticalSetup(BaseModel):
    """Template of a tactical state, as declared by a move."""

    name: str = Field(description="Name of the state, e.g. 'Exposed'.")
    duration: int = Field(2, ge=1, description="Turns the state lasts.")
    intensity: float = Field(
        1.2, gt=0.0, description="Multiplier granted to a move that consumes it."
    )
    is_positive: bool = Field(
        False, description="True for states that benefit their holder."
    )

    def instantiate(self, turn: int) -> "TacticalState":
        return TacticalState(
            name=self.name,
            duration=self.duration,
            intensity=self.intensity,
            is_positive=self.is_positive,
            turn_applied=turn,
        )


class TacticalState(BaseModel):
    """A live tactical state sitting in a fighter's single slot."""

    name: str = Field(description="Name of the state.")
    duration: int = Field(description="Remaining turns.")
    intensity: float = Field(description="Multiplier for a move that consumes it.")
    is_positive: bool = Field(False, description="True if it helps its holder.")
    turn_applied: int = Field(0, description="Turn on which it was applied.")

    @property
    def is_opening(self) -> bool:
        """Only negative states can be exploited by the opponent."""
        return not self.is_positive

    def turn_update(self) -> bool:
        """
        Ticks the state down by one turn.

        Returns:
            bool: True if the state expired.

        """
        self.duration -= 1
        return self.duration <= 0

    def model_post_init(self, _: Any) -> None:
        if self.duration < 0:
            raise ValueError("Tactical state duration must be non-negative.")


# States produced by repositioning.
REPOSITIONED = TacticalSetup(name="Repositioned", duration=2, intensity=1.2, is_positive=True)
EXPOSED = TacticalSetup(name="Exposed", duration=2, intensity=1.35)
OFF_BALANCE = TacticalSetup(name="Off-Balance", duration=1, intensity=1.15)
