"""
Escalation engine.

A coarse physical-condition tier (fresh -> winded -> injured -> exhausted ->
desperate) derived from health alone. It scales the damage a fighter takes
and has no link to the stress-driven mental state.
"""

from typing import TYPE_CHECKING

from duelsim.core.constants import EscalationTier, LogEventType
from duelsim.core.events import BattleLog

if TYPE_CHECKING:
    from duelsim.character.fighter import FighterState

# Minimum health for each tier, checked from the top.
TIER_HEALTH_FLOORS: tuple[tuple[EscalationTier, int], ...] = (
    (EscalationTier.FRESH, 80),
    (EscalationTier.WINDED, 60),
    (EscalationTier.INJURED, 40),
    (EscalationTier.EXHAUSTED, 20),
)

DAMAGE_MULTIPLIERS: dict[EscalationTier, float] = {
    EscalationTier.FRESH: 1.0,
    EscalationTier.WINDED: 1.0,
    EscalationTier.INJURED: 1.1,
    EscalationTier.EXHAUSTED: 1.25,
    EscalationTier.DESPERATE: 1.5,
}


def tier_for_health(health: float) -> EscalationTier:
    for tier, floor in TIER_HEALTH_FLOORS:
        if health >= floor:
            return tier
    return EscalationTier.DESPERATE


def incoming_damage_multiplier(tier: EscalationTier) -> float:
    return DAMAGE_MULTIPLIERS.get(tier, 1.0)


def update_escalation(
    fighter: "FighterState", log: BattleLog | None = None
) -> EscalationTier | None:
    """
    Recomputes a fighter's tier from its current health.

    Returns:
        EscalationTier | None: The new tier if it changed.

    """
    tier = tier_for_health(fighter.health)
    if tier == fighter.escalation:
        return None
    previous = fighter.escalation
    fighter.escalation = tier
    if log is not None:
        log.add(
            LogEventType.ESCALATION,
            f"{fighter.name} is {tier.value}",
            actor_id=fighter.id,
            details={
                "from": previous.value,
                "to": tier.value,
                "damage_multiplier": DAMAGE_MULTIPLIERS[tier],
            },
        )
    return tier
