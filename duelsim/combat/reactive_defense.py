"""
Reactive defense resolver.

An interception layer that runs before a move's damage is computed. When
the move, the defender and the attacker match a reactive-defense profile,
the defender gets a chance to negate the attack outright (and stun the
attacker) or at least soften it.
"""

from pydantic import BaseModel, ConfigDict, Field

from duelsim.character.fighter import FighterState
from duelsim.character.moves import LIGHTNING_ATTACK_TAG, Move
from duelsim.core.constants import LogEventType, MentalLevel
from duelsim.core.events import BattleLog
from duelsim.core.logging import log_debug
from duelsim.core.rng import BattleRandom
from duelsim.core.utils import clamp

from .momentum import modify_momentum


class ReactiveDefenseProfile(BaseModel):
    """Describes one reactive defense and who may use it against whom."""

    model_config = ConfigDict(frozen=True)

    name: str
    move_tag: str = Field(description="Tag an incoming move must carry.")
    defender_trait: str = Field(description="Special trait the defender needs.")
    attacker_ids: tuple[str, ...] = Field(
        default_factory=tuple, description="Attackers it applies to; empty means any."
    )
    base_chance: float = 0.75
    mid_health: float = 60.0
    low_health: float = 30.0
    max_health_penalty: float = 0.25
    low_health_penalty: float = 0.15
    mental_penalties: dict[MentalLevel, float] = Field(
        default_factory=lambda: {
            MentalLevel.STABLE: 0.0,
            MentalLevel.STRESSED: 0.10,
            MentalLevel.SHAKEN: 0.20,
            MentalLevel.BROKEN: 0.40,
        }
    )
    min_chance: float = 0.05
    max_chance: float = 0.95
    success_mitigation: float = 1.0
    failure_mitigation: float = 0.4
    attacker_stun_turns: int = 1
    success_momentum: tuple[int, int] = Field(
        (3, -2), description="(defender, attacker) momentum on success."
    )
    failure_momentum: tuple[int, int] = Field(
        (-1, 1), description="(defender, attacker) momentum on failure."
    )

    def matches(self, move: Move, attacker: FighterState, defender: FighterState) -> bool:
        if not move.has_tag(self.move_tag):
            return False
        if not defender.has_trait(self.defender_trait):
            return False
        return not self.attacker_ids or attacker.id in self.attacker_ids


LIGHTNING_REDIRECTION = ReactiveDefenseProfile(
    name="Lightning Redirection",
    move_tag=LIGHTNING_ATTACK_TAG,
    defender_trait="can_redirect_lightning",
    attacker_ids=("azula", "ozai-not-comet-enhanced"),
)

DEFAULT_PROFILES: tuple[ReactiveDefenseProfile, ...] = (LIGHTNING_REDIRECTION,)


class ReactiveDefenseResult(BaseModel):
    """Outcome of a reactive defense attempt."""

    attempted: bool = False
    success: bool = False
    profile: str | None = None
    chance: float = 0.0
    roll: float | None = None
    mitigation: float = 0.0
    stun_attacker_turns: int = 0
    momentum_defender: int = 0
    momentum_attacker: int = 0


def success_chance(profile: ReactiveDefenseProfile, defender: FighterState) -> float:
    """
    Base chance minus the health-tier and mental-state penalties, clamped.
    """
    chance = profile.base_chance
    health = defender.health
    if health < profile.mid_health:
        span = profile.mid_health - profile.low_health
        health_factor = max(0.0, health - profile.low_health) / span
        chance -= (1.0 - health_factor) * profile.max_health_penalty
    if health < profile.low_health:
        chance -= profile.low_health_penalty
    chance -= profile.mental_penalties.get(defender.mental_level, 0.0)
    return clamp(chance, profile.min_chance, profile.max_chance)


def attempt_reactive_defense(
    move: Move,
    attacker: FighterState,
    defender: FighterState,
    rng: BattleRandom,
    profiles: tuple[ReactiveDefenseProfile, ...] = DEFAULT_PROFILES,
    log: BattleLog | None = None,
) -> ReactiveDefenseResult:
    """
    Gives the defender first refusal on an incoming move.

    Only the first matching profile is tried. Momentum swings are applied
    here; the caller applies the mitigation and the attacker stun.

    Returns:
        ReactiveDefenseResult: `attempted` is False when no profile matched.

    """
    profile = next((p for p in profiles if p.matches(move, attacker, defender)), None)
    if profile is None:
        return ReactiveDefenseResult()

    chance = success_chance(profile, defender)
    success, roll = rng.roll(chance)
    if success:
        defender_delta, attacker_delta = profile.success_momentum
        mitigation = profile.success_mitigation
        stun = profile.attacker_stun_turns
    else:
        defender_delta, attacker_delta = profile.failure_momentum
        mitigation = profile.failure_mitigation
        stun = 0
    modify_momentum(defender, defender_delta, f"{profile.name} {'success' if success else 'failure'}")
    modify_momentum(attacker, attacker_delta, f"{profile.name} by {defender.name}")

    log_debug(
        f"{defender.name} attempts {profile.name}",
        {"chance": round(chance, 3), "roll": round(roll, 3), "success": success},
    )
    if log is not None:
        outcome = "succeeds" if success else "fails"
        log.add(
            LogEventType.REACTIVE_DEFENSE,
            f"{defender.name}'s {profile.name} {outcome} against {move.name}",
            actor_id=defender.id,
            target_id=attacker.id,
            deltas={
                "momentum_defender": defender_delta,
                "momentum_attacker": attacker_delta,
            },
            details={
                "profile": profile.name,
                "move": move.name,
                "chance": round(chance, 4),
                "roll": round(roll, 4),
                "success": success,
                "mitigation": mitigation,
            },
        )
    return ReactiveDefenseResult(
        attempted=True,
        success=success,
        profile=profile.name,
        chance=chance,
        roll=roll,
        mitigation=mitigation,
        stun_attacker_turns=stun,
        momentum_defender=defender_delta,
        momentum_attacker=attacker_delta,
    )
