"""
Battle-scoped state and the final battle result.
"""

from pydantic import BaseModel, Field, field_serializer

from duelsim.character.fighter import FighterSnapshot
from duelsim.core.constants import BattlePhase, TerminationReason
from duelsim.core.events import BattleLog, LogEvent
from duelsim.environment.conditions import BattleConditions, EnvironmentState


class BattleState:
    """
    Mutable state shared by the engines during one battle.

    Attributes:
        conditions (BattleConditions):
            Location, time of day and emotional mode.
        environment (EnvironmentState):
            Accumulated collateral damage.
        turn (int):
            Current turn, 0 before the first turn.
        phase (BattlePhase):
            Current battle phase; never regresses.
        marked_for_defeat (set[str]):
            Ids of fighters a curbstomp rule has defeated.
        fired_rules (set[str]):
            Ids of curbstomp rules already spent in this battle.
        forced_draw (bool):
            Set when an outside intervention ends the fight.
        interaction_log (list[str]):
            Human readable trace of move resolution.
        log (BattleLog):
            Structured event log.

    """

    def __init__(self, conditions: BattleConditions, log: BattleLog | None = None) -> None:
        self.conditions = conditions
        self.environment = EnvironmentState(location_id=conditions.location_id)
        self.turn = 0
        self.phase = BattlePhase.EARLY
        self.marked_for_defeat: set[str] = set()
        self.fired_rules: set[str] = set()
        self.forced_draw = False
        self.interaction_log: list[str] = []
        self.log = log if log is not None else BattleLog()

    def is_marked(self, fighter_id: str) -> bool:
        return fighter_id in self.marked_for_defeat

    def begin_turn(self, turn: int) -> None:
        self.turn = turn
        self.log.turn = turn
        self.log.segment = 0

    def begin_segment(self, segment: int) -> None:
        self.log.segment = segment


class BattleResult(BaseModel):
    """Everything a caller gets back from one battle."""

    log: list[LogEvent] = Field(default_factory=list)
    winner_id: str | None = None
    loser_id: str | None = None
    is_draw: bool = False
    final_fighter_states: dict[str, FighterSnapshot] = Field(default_factory=dict)
    environment_state: EnvironmentState | None = None
    termination_reason: TerminationReason
    turns_played: int = 0
    phase: BattlePhase = BattlePhase.EARLY
    marked_for_defeat: set[str] = Field(default_factory=set)
    seed: int | None = None
    error: str | None = None

    @field_serializer("marked_for_defeat")
    def _serialize_marked(self, value: set[str]) -> list[str]:
        return sorted(value)
