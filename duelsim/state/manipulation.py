"""
Psychological manipulation.

Before choosing a move, a fighter with the `manipulative` trait may try to
get under the opponent's skin. The chance grows with the manipulator's
skill, depends on the target's current mental level and shrinks with the
target's `resilient_to_manipulation` trait. A success leaves the target either
Exposed (a tactical opening) or Shaken (a burst of stress).
"""

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from duelsim.core.constants import LogEventType, MentalLevel
from duelsim.core.events import BattleLog
from duelsim.core.logging import log_debug
from duelsim.core.rng import BattleRandom
from duelsim.core.utils import clamp
from duelsim.effects.tactical_state import EXPOSED

from .mental_state import StressReport, apply_stress

if TYPE_CHECKING:
    from duelsim.character.fighter import FighterState

# How receptive each mental level is to a taunt. A broken mind barely listens.
SUSCEPTIBILITY: dict[MentalLevel, float] = {
    MentalLevel.STABLE: 0.5,
    MentalLevel.STRESSED: 1.0,
    MentalLevel.SHAKEN: 1.5,
    MentalLevel.BROKEN: 0.2,
}

EXPOSED_STRESS = 8.0
SHAKEN_STRESS = 20.0


class ManipulationResult(BaseModel):
    """Outcome of one manipulation attempt."""

    chance: float = Field(description="Probability the attempt had to succeed.")
    roll: float = Field(description="The value rolled against the chance.")
    success: bool = False
    effect: str | None = Field(None, description="'Exposed' or 'Shaken' on success.")
    new_level: MentalLevel | None = Field(
        None, description="Mental level the target moved to, if it changed."
    )


def manipulation_chance(manipulator: "FighterState", target: "FighterState") -> float:
    """Probability that one manipulation attempt succeeds."""
    skill = manipulator.trait_value("manipulative")
    if skill <= 0:
        return 0.0
    resistance = clamp(target.trait_value("resilient_to_manipulation"), 0.0, 1.0)
    susceptibility = SUSCEPTIBILITY.get(target.mental_level, SUSCEPTIBILITY[MentalLevel.STABLE])
    return clamp(skill * susceptibility * (1.0 - resistance), 0.0, 1.0)


def attempt_manipulation(
    manipulator: "FighterState",
    target: "FighterState",
    rng: BattleRandom,
    *,
    turn: int,
    emotional_mode: bool = False,
    log: BattleLog | None = None,
) -> ManipulationResult | None:
    """
    Lets a manipulative fighter work on the opponent's nerves.

    Args:
        manipulator (FighterState): The fighter about to act.
        target (FighterState): The opponent.
        rng (BattleRandom): Random source of the battle.
        turn (int): Current turn, stamped on an Exposed state.
        emotional_mode (bool): Passed on to the stress scaling.
        log (BattleLog | None): Receives a MANIPULATION event on success.

    Returns:
        ManipulationResult | None: None when no attempt was possible, which
            draws nothing from the random source.

    """
    chance = manipulation_chance(manipulator, target)
    if chance <= 0:
        return None

    success, roll = rng.roll(chance)
    result = ManipulationResult(chance=round(chance, 4), roll=round(roll, 4), success=success)
    if not success:
        log_debug(f"{target.name} shrugs off {manipulator.name}'s taunt", {"chance": result.chance})
        return result

    report = StressReport()
    if rng.coin_flip():
        result.effect = EXPOSED.name
        target.effects.set_tactical_state(EXPOSED.instantiate(turn))
        report.add("manipulation", EXPOSED_STRESS)
    else:
        result.effect = MentalLevel.SHAKEN.display_name
        report.add("manipulation", SHAKEN_STRESS)

    if log is not None:
        log.add(
            LogEventType.MANIPULATION,
            f"{manipulator.name}'s taunt hits home, leaving {target.name} {result.effect}",
            actor_id=manipulator.id,
            target_id=target.id,
            details={"effect": result.effect, "chance": result.chance, "roll": result.roll},
        )
    result.new_level = apply_stress(
        target, report, turn=turn, emotional_mode=emotional_mode, log=log
    )
    return result
