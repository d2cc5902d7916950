"""
Mental state engine.

An ordered, monotonic state machine (stable -> stressed -> shaken -> broken)
driven by an accumulating stress score. Broken is terminal: the level never
changes again, though stress keeps being tracked up to its cap.
"""

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from duelsim.core.constants import EffectivenessLevel, LogEventType, MentalLevel
from duelsim.core.events import BattleLog
from duelsim.core.logging import log_debug

if TYPE_CHECKING:
    from duelsim.character.fighter import FighterState
    from duelsim.environment.conditions import BattleConditions

STRESS_CAP = 150.0

STRESS_THRESHOLDS: dict[MentalLevel, float] = {
    MentalLevel.STRESSED: 25.0,
    MentalLevel.SHAKEN: 60.0,
    MentalLevel.BROKEN: 90.0,
}

HIT_STRESS: dict[EffectivenessLevel, float] = {
    EffectivenessLevel.WEAK: 0.0,
    EffectivenessLevel.NORMAL: 5.0,
    EffectivenessLevel.STRONG: 15.0,
    EffectivenessLevel.CRITICAL: 20.0,
}

OWN_WEAK_STRESS = 5.0
FAILED_REPOSITION_STRESS = 8.0
MOMENTUM_STRESS_PER_POINT = 2.0
HARSH_STATE_STRESS = 15.0
OTHER_NEGATIVE_STATE_STRESS = 8.0
HARSH_STATES = frozenset({"Exposed", "Off-Balance"})
COLLATERAL_STRESS_SCALE = 30.0
COLLATERAL_STRESS_DAMPING = 0.8


class MentalState(BaseModel):
    """Psychological state of one fighter."""

    level: MentalLevel = Field(MentalLevel.STABLE)
    stress: float = Field(0.0, ge=0.0, le=STRESS_CAP)
    changed_this_turn: bool = Field(
        False, description="Set by a transition, read by the AI, reset each turn."
    )
    history: list[str] = Field(default_factory=list)

    @property
    def is_broken(self) -> bool:
        return self.level == MentalLevel.BROKEN


class StressReport(BaseModel):
    """Raw stress gained from one evaluation, broken down by source."""

    sources: dict[str, float] = Field(default_factory=dict)

    @property
    def total(self) -> float:
        return sum(self.sources.values())

    def add(self, source: str, amount: float) -> None:
        if amount > 0:
            self.sources[source] = self.sources.get(source, 0.0) + amount


# =============================================================================
# Stress sources
# =============================================================================


def stress_from_hit(result: Any) -> StressReport:
    """
    Stress from being on the receiving end of a move.

    Args:
        result (MoveResult): Result of the opponent's move.

    """
    report = StressReport()
    if result is None:
        return report
    report.add("hit_severity", HIT_STRESS.get(result.effectiveness, 0.0))
    report.add("damage_taken", max(0.0, float(result.damage)) / 2.0)
    return report


def stress_from_own_action(result: Any) -> StressReport:
    """Stress from the fighter's own failed or weak action."""
    report = StressReport()
    if result is None:
        return report
    if getattr(result, "reposition_failed", False):
        report.add("failed_reposition", FAILED_REPOSITION_STRESS)
    elif result.effectiveness == EffectivenessLevel.WEAK:
        report.add("weak_action", OWN_WEAK_STRESS)
    return report


def stress_from_situation(
    fighter: "FighterState", conditions: "BattleConditions | None"
) -> StressReport:
    """Per-turn stress from momentum, tactical state and location."""
    report = StressReport()
    if fighter.momentum < 0:
        report.add("negative_momentum", abs(fighter.momentum) * MOMENTUM_STRESS_PER_POINT)
    state = fighter.tactical_state
    if state is not None and not state.is_positive:
        if state.name in HARSH_STATES:
            report.add("tactical_state", HARSH_STATE_STRESS)
        else:
            report.add("tactical_state", OTHER_NEGATIVE_STATE_STRESS)
    if conditions is not None and conditions.emotional_mode:
        stressor = conditions.location.personal_stressors.get(fighter.id, 0.0)
        report.add("location_stressor", stressor)
    return report


def stress_from_collateral(fighter: "FighterState", collateral: float) -> StressReport:
    """
    Stress from watching the surroundings get destroyed, damped by the
    fighter's tolerance for collateral damage.
    """
    report = StressReport()
    if collateral <= 0:
        return report
    tolerance = fighter.template.collateral_tolerance
    amount = (
        (collateral / 100.0)
        * COLLATERAL_STRESS_SCALE
        * (1.0 - tolerance)
        * COLLATERAL_STRESS_DAMPING
    )
    report.add("collateral", amount)
    return report


# =============================================================================
# State machine
# =============================================================================


def level_for_stress(stress: float, resilience: float = 1.0) -> MentalLevel:
    """Maps a stress score onto a level using resilience-scaled thresholds."""
    level = MentalLevel.STABLE
    for candidate, threshold in STRESS_THRESHOLDS.items():
        if stress >= threshold * resilience:
            level = candidate
    return level


def stress_scaling(fighter: "FighterState", emotional_mode: bool) -> float:
    """
    Factor applied to raw stress: relationship stress modifier over the
    combined resilience. Relationships only count in emotional mode.
    """
    resilience = fighter.template.resilience
    stress_modifier = 1.0
    relationship = fighter.relationship
    if emotional_mode and relationship is not None:
        stress_modifier = relationship.stress_modifier
        resilience *= relationship.resilience_modifier
    return stress_modifier / resilience


def apply_stress(
    fighter: "FighterState",
    report: StressReport,
    *,
    turn: int,
    emotional_mode: bool = False,
    log: BattleLog | None = None,
) -> MentalLevel | None:
    """
    Adds scaled stress to a fighter and advances its level if a threshold
    is crossed. Stress never decreases and the level never regresses.

    Returns:
        MentalLevel | None: The new level if a transition happened.

    """
    mental = fighter.mental_state
    raw = report.total
    if raw <= 0:
        return None
    gained = raw * stress_scaling(fighter, emotional_mode)
    mental.stress = min(STRESS_CAP, mental.stress + gained)
    log_debug(
        f"{fighter.name} gains stress",
        {"gained": round(gained, 2), "stress": round(mental.stress, 2)},
    )

    if mental.is_broken:
        return None
    target = level_for_stress(mental.stress, fighter.template.resilience)
    if target.rank <= mental.level.rank:
        return None

    previous = mental.level
    mental.level = target
    mental.changed_this_turn = True
    mental.history.append(f"{previous.value}->{target.value}@{turn}")
    if log is not None:
        log.add(
            LogEventType.MENTAL_STATE,
            f"{fighter.name} is now {target.value}",
            actor_id=fighter.id,
            deltas={"stress": round(gained, 2)},
            details={
                "from": previous.value,
                "to": target.value,
                "stress": round(mental.stress, 2),
                "sources": {k: round(v, 2) for k, v in report.sources.items()},
            },
        )
    return target
