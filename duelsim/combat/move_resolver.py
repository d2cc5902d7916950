"""
Move resolver.

Computes the mechanical outcome of one move: opening exploitation and
punishment, repositioning, environmental modifiers, collateral damage,
energy cost, effectiveness classification, damage and momentum swings.

The resolver consumes and assigns tactical states (they are part of the
resolution) but leaves health, energy, momentum and status effects to
`apply_move_result`, so a result can be inspected before it is applied.
"""

from typing import TYPE_CHECKING

from catchery import log_warning
from pydantic import BaseModel, Field

from duelsim.character.fighter import FighterState
from duelsim.character.moves import STRUGGLE, Move
from duelsim.core.constants import EffectivenessLevel, EffectType, LogEventType, MoveType
from duelsim.core.error_handling import ensure_float_in_range
from duelsim.core.events import BattleLog
from duelsim.core.logging import log_debug
from duelsim.core.rng import BattleRandom
from duelsim.core.settings import DEFAULT_SETTINGS, BattleSettings
from duelsim.core.utils import clamp
from duelsim.effects.status_effect import StatusEffectSpec
from duelsim.effects.status_effect_engine import (
    crit_chance_bonus,
    incoming_damage_multiplier,
    outgoing_damage_multiplier,
)
from duelsim.effects.tactical_state import EXPOSED, OFF_BALANCE, REPOSITIONED
from duelsim.environment.conditions import (
    BattleConditions,
    calculate_collateral,
    energy_cost,
    environmental_modifiers,
)
from duelsim.state.escalation import incoming_damage_multiplier as escalation_multiplier

from .interaction_matrix import punish_penalty
from .momentum import modify_momentum, momentum_crit_modifier

if TYPE_CHECKING:
    from duelsim.effects.status_effect_engine import StatusEffectEngine

STUN_OPENING_MULTIPLIER = 1.3
STATE_OPENING_FLAT_BONUS = 5.0
STUN_OPENING_FLAT_BONUS = 3.0
PUNISH_MOMENTUM_SWING = 1

REPOSITION_BASE_CHANCE = 0.35
REPOSITION_MOBILITY_WEIGHT = 0.5
REPOSITION_SLIPPERY_PENALTY = 0.1
REPOSITION_EXPOSED_CHANCE = 0.4

WEAK_RATIO = 0.7
STRONG_RATIO = 1.1
CRITICAL_RATIO = 1.5
MIN_CRIT_CHANCE = 0.01
MAX_CRIT_CHANCE = 0.6

DAMAGE_FRACTIONS: dict[EffectivenessLevel, float] = {
    EffectivenessLevel.WEAK: 0.2,
    EffectivenessLevel.NORMAL: 0.33,
    EffectivenessLevel.STRONG: 0.4,
    EffectivenessLevel.CRITICAL: 0.5,
}

# (attacker, defender) momentum change per effectiveness level.
MOMENTUM_DELTAS: dict[EffectivenessLevel, tuple[int, int]] = {
    EffectivenessLevel.WEAK: (-1, 1),
    EffectivenessLevel.NORMAL: (0, 0),
    EffectivenessLevel.STRONG: (1, -1),
    EffectivenessLevel.CRITICAL: (2, -2),
}

CRITICAL_STUN = StatusEffectSpec(effect_type=EffectType.STUN, duration=1, name="Staggered")


class MoveResult(BaseModel):
    """Mechanical outcome of one move."""

    move_name: str
    move_type: MoveType
    effectiveness: EffectivenessLevel = EffectivenessLevel.NORMAL
    damage: float = Field(0.0, ge=0.0)
    energy_cost: float = Field(0.0, ge=0.0)
    momentum_attacker: int = 0
    momentum_defender: int = 0
    collateral_damage: float = 0.0
    was_punished: bool = False
    payoff: bool = False
    consumed_state_name: str | None = None
    crit_chance: float = 0.0
    crit_roll: float | None = None
    is_critical_roll: bool = False
    multiplier: float = 1.0
    stun_defender: bool = False
    reposition_attempted: bool = False
    reposition_success: bool = False
    reposition_failed: bool = False
    attacker_state: str | None = Field(
        None, description="Tactical state the attacker ends up holding."
    )
    defender_state: str | None = Field(
        None, description="Tactical state imposed on the defender."
    )
    effect_to_apply: StatusEffectSpec | None = None
    mitigation: float = 0.0
    damage_steps: dict[str, float] = Field(
        default_factory=dict, description="Damage after each pipeline step."
    )
    notes: list[str] = Field(default_factory=list)

    @property
    def deals_damage(self) -> bool:
        return self.damage > 0


def _neutral_result(move: Move, note: str) -> MoveResult:
    return MoveResult(move_name=move.name, move_type=move.move_type, notes=[note])


def classify_effectiveness(ratio: float, is_critical_roll: bool) -> EffectivenessLevel:
    """Maps the modified-to-base power ratio onto an effectiveness level."""
    if is_critical_roll:
        return EffectivenessLevel.CRITICAL
    if ratio < WEAK_RATIO:
        return EffectivenessLevel.WEAK
    if ratio > CRITICAL_RATIO:
        return EffectivenessLevel.CRITICAL
    if ratio > STRONG_RATIO:
        return EffectivenessLevel.STRONG
    return EffectivenessLevel.NORMAL


def critical_chance(
    attacker: FighterState, settings: BattleSettings = DEFAULT_SETTINGS
) -> float:
    chance = (
        settings.base_crit_chance
        + momentum_crit_modifier(attacker, settings)
        + crit_chance_bonus(attacker)
    )
    return clamp(chance, MIN_CRIT_CHANCE, MAX_CRIT_CHANCE)


def reposition_chance(attacker: FighterState, conditions: BattleConditions | None) -> float:
    chance = REPOSITION_BASE_CHANCE + attacker.template.mobility * REPOSITION_MOBILITY_WEIGHT
    if conditions is not None and conditions.location.is_slippery:
        chance -= REPOSITION_SLIPPERY_PENALTY
    return clamp(chance, 0.1, 0.95)


# =============================================================================
# Resolution
# =============================================================================


def _resolve_reposition(
    move: Move,
    attacker: FighterState,
    defender: FighterState,
    conditions: BattleConditions | None,
    interaction_log: list[str],
    rng: BattleRandom,
    turn: int,
    energy_cost: float,
) -> MoveResult:
    result = MoveResult(
        move_name=move.name,
        move_type=move.move_type,
        energy_cost=energy_cost,
        reposition_attempted=True,
    )
    result.crit_chance = reposition_chance(attacker, conditions)
    success, roll = rng.roll(result.crit_chance)
    result.crit_roll = roll
    if success:
        attacker.effects.set_tactical_state(REPOSITIONED.instantiate(turn))
        result.reposition_success = True
        result.attacker_state = REPOSITIONED.name
        result.momentum_attacker = 1
        result.effectiveness = EffectivenessLevel.STRONG
        if move.setup is not None:
            defender.effects.set_tactical_state(move.setup.instantiate(turn))
            result.defender_state = move.setup.name
        if move.applies_effect is not None:
            result.effect_to_apply = move.applies_effect
        interaction_log.append(f"{attacker.name} repositions with {move.name}.")
        return result

    exposed, _ = rng.roll(REPOSITION_EXPOSED_CHANCE)
    setback = EXPOSED if exposed else OFF_BALANCE
    attacker.effects.set_tactical_state(setback.instantiate(turn))
    result.reposition_failed = True
    result.attacker_state = setback.name
    result.momentum_attacker = -2 if exposed else -1
    result.effectiveness = EffectivenessLevel.WEAK
    interaction_log.append(
        f"{attacker.name}'s {move.name} fails, leaving them {setback.name}."
    )
    return result


def resolve_move(
    move: Move | None,
    attacker: FighterState | None,
    defender: FighterState | None,
    conditions: BattleConditions | None,
    interaction_log: list[str] | None,
    rng: BattleRandom,
    settings: BattleSettings = DEFAULT_SETTINGS,
    mitigation: float = 0.0,
    turn: int = 0,
) -> MoveResult:
    """
    Resolves one move of `attacker` against `defender`.

    Args:
        move (Move | None): The move; None falls back to Struggle.
        attacker (FighterState | None): The acting fighter.
        defender (FighterState | None): The target.
        conditions (BattleConditions | None): Battle conditions.
        interaction_log (list[str] | None): Human-readable trace, appended to.
        rng (BattleRandom): Random source for crit and reposition rolls.
        settings (BattleSettings): Tunable constants.
        mitigation (float): Fraction of the final damage negated by a
            reactive defense, in [0, 1].
        turn (int): Current turn, stamped on tactical states.

    Returns:
        MoveResult: The outcome. Invalid input gives a neutral result.

    """
    if interaction_log is None:
        interaction_log = []
    if move is None:
        log_warning("resolve_move called without a move, using Struggle", {"turn": turn})
        move = STRUGGLE
    if attacker is None or defender is None:
        log_warning(
            "resolve_move called without both fighters",
            {"move": move.name, "attacker": attacker, "defender": defender},
        )
        return _neutral_result(move, "missing fighter")

    power = ensure_float_in_range(move.power, "move.power", 0.0, 100.0, default=0.0)
    mitigation = ensure_float_in_range(mitigation, "mitigation", 0.0, 1.0, default=0.0)
    env = environmental_modifiers(move, conditions, attacker.template.is_bender)
    cost = energy_cost(move, conditions, attacker.template.is_bender)
    interaction_log.extend(f"{move.name}: {note}" for note in env.notes)

    if move.is_reposition:
        return _resolve_reposition(
            move, attacker, defender, conditions, interaction_log, rng, turn, cost
        )

    result = MoveResult(move_name=move.name, move_type=move.move_type, energy_cost=cost)
    result.notes.extend(env.notes)
    multiplier = 1.0
    flat_bonus = 0.0

    # Openings and punishment.
    state = defender.tactical_state
    if move.requires_opening:
        if state is not None and state.is_opening:
            multiplier *= state.intensity
            flat_bonus += STATE_OPENING_FLAT_BONUS
            result.payoff = True
            result.consumed_state_name = state.name
            defender.effects.clear_tactical_state()
            interaction_log.append(
                f"{attacker.name}'s {move.name} exploits {defender.name} being {state.name}."
            )
        elif defender.is_stunned:
            multiplier *= STUN_OPENING_MULTIPLIER
            flat_bonus += STUN_OPENING_FLAT_BONUS
            result.payoff = True
            interaction_log.append(
                f"{attacker.name}'s {move.name} capitalizes on {defender.name} being stunned."
            )
    if not result.payoff and not defender.has_opening:
        penalty = punish_penalty(move)
        if penalty is not None:
            multiplier *= penalty
            result.was_punished = True
            interaction_log.append(
                f"{attacker.name}'s {move.name} is punished: {defender.name} offered no opening."
            )

    # The attacker's own positive state powers up its next damaging move.
    own_state = attacker.tactical_state
    if move.move_type.deals_damage and own_state is not None and own_state.is_positive:
        multiplier *= own_state.intensity
        attacker.effects.clear_tactical_state()
        result.notes.append(f"{attacker.name} strikes from {own_state.name}")

    multiplier *= env.damage_multiplier
    result.multiplier = round(multiplier, 4)
    result.collateral_damage = calculate_collateral(move, conditions, settings)

    # Effectiveness.
    result.crit_chance = critical_chance(attacker, settings)
    is_crit, crit_roll = rng.roll(result.crit_chance)
    result.crit_roll = crit_roll
    result.is_critical_roll = is_crit
    result.effectiveness = classify_effectiveness(multiplier, is_crit)

    # Damage pipeline.
    if move.move_type.deals_damage:
        modified_power = power * multiplier
        base = flat_bonus + modified_power * DAMAGE_FRACTIONS[result.effectiveness]
        damage = clamp(base, 0.0, settings.max_damage_per_hit)
        result.damage_steps["base"] = round(damage, 2)
        damage *= escalation_multiplier(defender.escalation)
        result.damage_steps["escalation"] = round(damage, 2)
        damage *= outgoing_damage_multiplier(attacker) * incoming_damage_multiplier(defender)
        result.damage_steps["status"] = round(damage, 2)
        damage *= 1.0 - mitigation
        result.damage_steps["mitigation"] = round(damage, 2)
        result.damage = round(max(0.0, damage), 2)
    result.mitigation = mitigation

    attacker_delta, defender_delta = MOMENTUM_DELTAS[result.effectiveness]
    if result.was_punished:
        attacker_delta -= PUNISH_MOMENTUM_SWING
        defender_delta += PUNISH_MOMENTUM_SWING
    result.momentum_attacker = attacker_delta
    result.momentum_defender = defender_delta

    landed = result.effectiveness != EffectivenessLevel.WEAK and mitigation < 1.0
    if landed and result.effectiveness == EffectivenessLevel.CRITICAL:
        result.stun_defender = move.move_type != MoveType.DEFENSE
    if landed and move.setup is not None and not move.requires_opening:
        defender.effects.set_tactical_state(move.setup.instantiate(turn))
        result.defender_state = move.setup.name
    if landed and move.applies_effect is not None:
        result.effect_to_apply = move.applies_effect

    log_debug(
        f"{attacker.name} uses {move.name}",
        {
            "effectiveness": result.effectiveness.value,
            "damage": result.damage,
            "multiplier": result.multiplier,
            "punished": result.was_punished,
            "payoff": result.payoff,
        },
    )
    return result


# =============================================================================
# Application
# =============================================================================


def apply_move_result(
    result: MoveResult,
    attacker: FighterState,
    defender: FighterState,
    effects: "StatusEffectEngine",
    turn: int,
    log: BattleLog | None = None,
) -> None:
    """
    Applies a resolved move: energy, damage, momentum, stun and any status
    effect the move carries.
    """
    attacker.energy -= result.energy_cost
    health_before = defender.health
    defender.health -= result.damage
    modify_momentum(attacker, result.momentum_attacker, f"{result.move_name} ({result.effectiveness.value})")
    modify_momentum(defender, result.momentum_defender, f"hit by {result.move_name}")

    if log is not None:
        log.add(
            LogEventType.MOVE,
            f"{attacker.name} uses {result.move_name}: {result.effectiveness.value}",
            actor_id=attacker.id,
            target_id=defender.id,
            deltas={
                "damage": round(health_before - defender.health, 2),
                "energy": -result.energy_cost,
                "momentum_attacker": result.momentum_attacker,
                "momentum_defender": result.momentum_defender,
            },
            details={
                "move": result.move_name,
                "move_type": result.move_type.value,
                "effectiveness": result.effectiveness.value,
                "was_punished": result.was_punished,
                "payoff": result.payoff,
                "consumed_state": result.consumed_state_name,
                "collateral": result.collateral_damage,
                "crit_chance": round(result.crit_chance, 4),
                "damage_steps": result.damage_steps,
                "attacker_state": result.attacker_state,
                "defender_state": result.defender_state,
            },
        )
        for state_name, fighter in (
            (result.attacker_state, attacker),
            (result.defender_state, defender),
        ):
            if state_name is not None:
                log.add(
                    LogEventType.TACTICAL,
                    f"{fighter.name} is {state_name}",
                    actor_id=fighter.id,
                    details={"state": state_name},
                )

    if result.stun_defender:
        effects.apply(defender, CRITICAL_STUN, result.move_name, turn)
    if result.effect_to_apply is not None:
        spec = result.effect_to_apply
        target = attacker if spec.target == "self" else defender
        effects.apply(target, spec, result.move_name, turn)
