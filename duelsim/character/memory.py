"""
Per-opponent AI memory.

Tracks what a fighter has learned about its current opponent and about its
own moves during one battle.
"""

from pydantic import BaseModel, Field


class AIMemory(BaseModel):
    """What one fighter remembers during a battle."""

    opponent_sequence_log: dict[str, dict[str, int]] = Field(
        default_factory=dict,
        description="First-order transition counts: previous move -> next move -> count.",
    )
    last_opponent_move: str | None = Field(None)
    move_success_cooldown: dict[str, int] = Field(
        default_factory=dict,
        description="Turns a move is discouraged after a Weak result.",
    )
    self_move_effectiveness: dict[str, list[int]] = Field(
        default_factory=dict,
        description="Effectiveness scores observed per own move.",
    )
    consecutive_weak: int = 0
    consecutive_strong: int = 0

    def record_opponent_move(self, move_name: str) -> None:
        """Adds one observed transition to the opponent sequence log."""
        previous = self.last_opponent_move
        if previous is not None:
            row = self.opponent_sequence_log.setdefault(previous, {})
            row[move_name] = row.get(move_name, 0) + 1
        self.last_opponent_move = move_name

    def average_effectiveness(self, move_name: str) -> float | None:
        scores = self.self_move_effectiveness.get(move_name)
        if not scores:
            return None
        return sum(scores) / len(scores)

    def tick_cooldowns(self) -> None:
        for name in list(self.move_success_cooldown):
            self.move_success_cooldown[name] -= 1
            if self.move_success_cooldown[name] <= 0:
                del self.move_success_cooldown[name]
