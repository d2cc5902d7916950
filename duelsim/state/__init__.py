"""
Per-fighter psychological and physical state machines.
"""

from .escalation import (
    DAMAGE_MULTIPLIERS,
    TIER_HEALTH_FLOORS,
    incoming_damage_multiplier,
    tier_for_health,
    update_escalation,
)
from .manipulation import (
    SUSCEPTIBILITY,
    ManipulationResult,
    attempt_manipulation,
    manipulation_chance,
)
from .mental_state import (
    STRESS_CAP,
    STRESS_THRESHOLDS,
    MentalState,
    StressReport,
    apply_stress,
    level_for_stress,
    stress_from_collateral,
    stress_from_hit,
    stress_from_own_action,
    stress_from_situation,
    stress_scaling,
)

__all__ = [
    # Escalation.
    "DAMAGE_MULTIPLIERS",
    "TIER_HEALTH_FLOORS",
    "incoming_damage_multiplier",
    "tier_for_health",
    "update_escalation",
    # Manipulation.
    "SUSCEPTIBILITY",
    "ManipulationResult",
    "attempt_manipulation",
    "manipulation_chance",
    # Mental state.
    "STRESS_CAP",
    "STRESS_THRESHOLDS",
    "MentalState",
    "StressReport",
    "apply_stress",
    "level_for_stress",
    "stress_from_collateral",
    "stress_from_hit",
    "stress_from_own_action",
    "stress_from_situation",
    "stress_scaling",
]
