"""
Structured battle log.

The engine produces an ordered sequence of `LogEvent` objects for an
external presentation layer. Events carry a type tag, the actor, numeric
deltas and free-form text; the engine has no knowledge of how they are
rendered.
"""

from typing import Any

from pydantic import BaseModel, Field

from .constants import LogEventType


class LogEvent(BaseModel):
    """One entry of the battle log."""

    index: int = Field(description="Position in the log, starting at 0.")
    turn: int = Field(description="Turn number, 0 for pre-battle.")
    segment: int = Field(0, description="Segment within the turn (1 or 2, 0 if none).")
    type: LogEventType = Field(description="Event type tag.")
    actor_id: str | None = Field(None, description="Fighter the event is about.")
    target_id: str | None = Field(None, description="Other fighter involved, if any.")
    text: str = Field("", description="Free-form description.")
    deltas: dict[str, float] = Field(
        default_factory=dict, description="Numeric changes, e.g. damage or momentum."
    )
    details: dict[str, Any] = Field(
        default_factory=dict, description="Additional structured data."
    )


class BattleLog:
    """
    Append-only event log owned by one battle.

    Engines that run outside a battle (tests, tooling) may pass their own
    instance or none at all.
    """

    def __init__(self) -> None:
        self.events: list[LogEvent] = []
        self.turn: int = 0
        self.segment: int = 0

    def add(
        self,
        event_type: LogEventType,
        text: str = "",
        *,
        actor_id: str | None = None,
        target_id: str | None = None,
        deltas: dict[str, float] | None = None,
        details: dict[str, Any] | None = None,
    ) -> LogEvent:
        event = LogEvent(
            index=len(self.events),
            turn=self.turn,
            segment=self.segment,
            type=event_type,
            actor_id=actor_id,
            target_id=target_id,
            text=text,
            deltas=deltas or {},
            details=details or {},
        )
        self.events.append(event)
        return event

    def of_type(self, event_type: LogEventType) -> list[LogEvent]:
        return [event for event in self.events if event.type == event_type]

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self):
        return iter(self.events)
