"""
AI decision engine.

Chooses a move for the active fighter in two tiers: priority rules first,
then a weight per move sampled either through a softmax whose temperature
follows the fighter's predictability, or within the top-weight cluster.
Every decision leaves a `DecisionTrace` on the fighter.
"""

import math
from typing import Any

from catchery import log_warning
from pydantic import BaseModel, Field

from duelsim.character.fighter import FighterState
from duelsim.character.moves import STRUGGLE, Move
from duelsim.combat.interaction_matrix import counter_strength
from duelsim.combat.move_resolver import MoveResult
from duelsim.core.constants import (
    BattlePhase,
    EffectivenessLevel,
    Intent,
    MoveType,
    SelectionMode,
)
from duelsim.core.logging import log_debug
from duelsim.core.rng import BattleRandom
from duelsim.core.settings import DEFAULT_SETTINGS, BattleSettings
from duelsim.environment.conditions import BattleConditions, energy_cost

from .intent import determine_intent, intent_multiplier
from .personality import apply_personality_drift, dynamic_personality
from .prediction import predict_next_move
from .rules import AIContext, rules_for

STRUGGLE_WEIGHT = 0.05
MIN_WEIGHT = 0.05
RULE_NUDGE_PER_PRIORITY = 0.25
ARGMAX_PREDICTABILITY = 0.95
CLUSTER_RATIO = 0.75
CLUSTER_SIZE = 3
COOLDOWN_PENALTY = 0.1
PREDICTION_BONUS_SCALE = 3.0

PHASE_FINISHER_MULTIPLIERS: dict[BattlePhase, float] = {
    BattlePhase.EARLY: 0.1,
    BattlePhase.MID: 0.6,
    BattlePhase.LATE: 2.5,
}
LOW_HEALTH_FINISHER_MULTIPLIER = 2.5
LOW_HEALTH_OPPONENT = 30


class MoveWeight(BaseModel):
    """Weight computed for one candidate move."""

    move_name: str
    weight: float
    reasons: list[str] = Field(default_factory=list)


class DecisionTrace(BaseModel):
    """Structured record of one AI decision."""

    turn: int
    phase: BattlePhase
    intent: Intent | None = None
    rule_fired: str | None = None
    rule_errors: list[str] = Field(default_factory=list)
    nudges: dict[str, float] = Field(default_factory=dict)
    predicted_move: str | None = None
    prediction_confidence: float = 0.0
    selection_mode: SelectionMode | None = None
    temperature: float | None = None
    weights: list[MoveWeight] = Field(default_factory=list)
    chosen: str = ""
    probability: float | None = None
    forced: str | None = Field(None, description="Why the choice bypassed the AI.")


class MoveDecision(BaseModel):
    """The chosen move and how it was chosen."""

    move: Move
    trace: DecisionTrace


# =============================================================================
# Rules
# =============================================================================


def _evaluate_rules(
    ctx: AIContext, trace: DecisionTrace, energy_cost: dict[str, float]
) -> Move | None:
    """
    Tries the rules in priority order. Returns the move of the first
    must-react rule that fires; lower-priority hits become weight nudges.
    """
    must_react = ctx.settings.must_react_priority
    for rule in rules_for(ctx.fighter):
        try:
            if not rule.condition(ctx):
                continue
            move = rule.selector(ctx)
        except Exception as e:
            log_warning(
                f"AI rule '{rule.name}' failed and was skipped",
                {"fighter": ctx.fighter.id, "error": repr(e)},
            )
            trace.rule_errors.append(f"{rule.name}: {e!r}")
            continue
        if move is None:
            continue
        cost = energy_cost.get(move.name, move.cost)
        if not ctx.fighter.can_afford(move, cost):
            continue
        if rule.priority >= must_react:
            trace.rule_fired = rule.name
            return move
        nudge = 1.0 + rule.priority * RULE_NUDGE_PER_PRIORITY
        trace.nudges[move.name] = trace.nudges.get(move.name, 1.0) * nudge
    return None


# =============================================================================
# Weights
# =============================================================================


def _trait_weight(move: Move, profile: dict[str, float], reasons: list[str]) -> float:
    if move.move_type == MoveType.OFFENSE:
        reasons.append(f"aggression:{profile['aggression']:.2f}")
        return 1.0 + profile["aggression"] * 1.5
    if move.move_type == MoveType.DEFENSE:
        reasons.append(f"defensive:{profile['defensive_bias']:.2f}")
        return 1.0 + profile["defensive_bias"] * 1.5 + profile["patience"]
    if move.move_type == MoveType.UTILITY:
        reasons.append(f"creativity:{profile['creativity']:.2f}")
        return 1.0 + profile["creativity"] * 0.8 + profile["opportunism"] * 0.5
    reasons.append(f"risk:{profile['risk_tolerance']:.2f}")
    return 1.0 + profile["risk_tolerance"] * 2.0


def score_move(
    move: Move,
    ctx: AIContext,
    profile: dict[str, float],
    intent: Intent,
    prediction: tuple[str | None, float],
    nudges: dict[str, float],
    energy_cost: float,
) -> MoveWeight:
    """
    Computes the selection weight of one move. A weight of zero removes the
    move from consideration.
    """
    fighter, opponent = ctx.fighter, ctx.opponent
    reasons: list[str] = []

    if energy_cost > fighter.energy:
        return MoveWeight(move_name=move.name, weight=0.0, reasons=["unaffordable"])
    if ctx.conditions is not None and ctx.conditions.location.is_disabled(move.element):
        return MoveWeight(move_name=move.name, weight=0.0, reasons=["element disabled"])

    weight = _trait_weight(move, profile, reasons)

    # Personality.
    bias = fighter.personality.signature_move_bias.get(move.name)
    if bias:
        weight *= bias
        reasons.append(f"signature x{bias}")
    if fighter.last_move is not None and fighter.last_move.name == move.name:
        weight *= max(0.1, 1.0 - profile["anti_repeater"])
        reasons.append("anti-repeat")
    if move.has_tag("counter") and profile["opportunism"] > 0.7:
        weight *= 1.0 + profile["opportunism"]
        reasons.append("counter tag")
    if move.has_tag("evasive") and profile["patience"] > 0.6:
        weight *= 1.0 + profile["patience"]
        reasons.append("evasive tag")
    if move.has_tag("high_risk") and profile["risk_tolerance"] > 0.5:
        weight *= 1.0 + profile["risk_tolerance"] * 1.2
        reasons.append("high-risk tag")

    # Momentum.
    momentum = fighter.momentum
    if momentum > 0 and move.move_type.deals_damage:
        weight *= 1.0 + 0.1 * momentum
        reasons.append(f"momentum {momentum:+d}")
    elif momentum < 0 and move.move_type.is_passive:
        weight *= 1.0 + 0.1 * abs(momentum)
        reasons.append(f"momentum {momentum:+d}")

    # Energy tier.
    if fighter.energy < 15 and energy_cost > 10:
        weight *= 0.25
        reasons.append("energy critical")
    elif fighter.energy < 30 and energy_cost > 20:
        weight *= 0.5
        reasons.append("energy low")

    # Phase.
    if move.move_type == MoveType.FINISHER:
        if opponent.health <= LOW_HEALTH_OPPONENT:
            weight *= LOW_HEALTH_FINISHER_MULTIPLIER
            reasons.append("finish low-health opponent")
        else:
            factor = PHASE_FINISHER_MULTIPLIERS[ctx.phase]
            weight *= factor
            reasons.append(f"phase {ctx.phase.value} x{factor}")

    # Opponent vulnerability.
    if opponent.has_opening:
        if move.requires_opening:
            weight *= 20.0 * (1.0 + profile["opportunism"])
            reasons.append("opening available")
        elif move.move_type == MoveType.OFFENSE:
            weight *= 1.5
            reasons.append("opponent vulnerable")
    elif move.requires_opening:
        weight *= 0.01
        reasons.append("no opening")

    # Escalation opportunity.
    if opponent.escalation.is_vulnerable:
        if move.move_type == MoveType.FINISHER or move.requires_opening:
            weight *= 1.6
            reasons.append(f"opponent {opponent.escalation.value}")
        elif move.move_type == MoveType.OFFENSE and move.power >= 60:
            weight *= 1.4
            reasons.append(f"opponent {opponent.escalation.value}")
        elif move.move_type == MoveType.UTILITY:
            weight *= 0.3

    # Intent.
    factor = intent_multiplier(intent, move)
    if factor != 1.0:
        weight *= factor
        reasons.append(f"intent {intent.value} x{factor:.2f}")

    # Memory.
    memory = fighter.ai_memory
    average = memory.average_effectiveness(move.name)
    if average is not None:
        weight *= max(0.5, 1.0 + 0.1 * average)
        reasons.append(f"memory {average:+.2f}")
    if move.name in memory.move_success_cooldown:
        weight *= COOLDOWN_PENALTY
        reasons.append("cooldown")

    # Prediction.
    predicted, confidence = prediction
    if predicted is not None and confidence > ctx.settings.prediction_confidence_threshold:
        predicted_move = opponent.template.get_move(predicted)
        strength = counter_strength(
            move, predicted, predicted_move.move_type if predicted_move else None
        )
        if strength > 1.0:
            bonus = 1.0 + strength * confidence * PREDICTION_BONUS_SCALE
            weight *= bonus
            reasons.append(f"counters {predicted} x{bonus:.2f}")

    nudge = nudges.get(move.name)
    if nudge:
        weight *= nudge
        reasons.append(f"rule nudge x{nudge:.2f}")

    if weight < MIN_WEIGHT:
        reasons.append("below minimum")
        weight = 0.0
    return MoveWeight(move_name=move.name, weight=round(weight, 6), reasons=reasons)


# =============================================================================
# Selection
# =============================================================================


def softmax_probabilities(weights: list[float], temperature: float) -> list[float]:
    """Softmax over log-weights. All weights must be positive."""
    temperature = max(0.01, temperature)
    logits = [math.log(weight) / temperature for weight in weights]
    top = max(logits)
    exps = [math.exp(logit - top) for logit in logits]
    total = sum(exps)
    return [value / total for value in exps]


def softmax_select(
    candidates: list[MoveWeight], predictability: float, rng: BattleRandom
) -> tuple[MoveWeight, float, float]:
    """
    Returns:
        tuple[MoveWeight, float, float]: The pick, its probability and the
        temperature used.

    """
    temperature = (1.0 - predictability) * 1.5 + 0.5
    if predictability >= ARGMAX_PREDICTABILITY:
        best = max(candidates, key=lambda c: c.weight)
        return best, 1.0, temperature
    probabilities = softmax_probabilities([c.weight for c in candidates], temperature)
    index = rng.weighted_choice(list(range(len(candidates))), probabilities)
    return candidates[index], probabilities[index], temperature


def top_cluster_select(
    candidates: list[MoveWeight], rng: BattleRandom
) -> tuple[MoveWeight, float]:
    """Samples among the moves within 75% of the best weight (at most 3)."""
    ordered = sorted(candidates, key=lambda c: -c.weight)
    best = ordered[0].weight
    cluster = [c for c in ordered if c.weight >= best * CLUSTER_RATIO][:CLUSTER_SIZE]
    total = sum(c.weight for c in cluster)
    pick = rng.weighted_choice(cluster, [c.weight for c in cluster])
    return pick, pick.weight / total


def choose_move(
    fighter: FighterState,
    opponent: FighterState,
    battle_state: Any,
    conditions: BattleConditions | None,
    turn: int,
    phase: BattlePhase,
    rng: BattleRandom,
    settings: BattleSettings = DEFAULT_SETTINGS,
) -> MoveDecision:
    """
    Chooses the fighter's next move.

    Args:
        fighter (FighterState): The deciding fighter.
        opponent (FighterState): Its opponent.
        battle_state (Any): The battle state, available to rules.
        conditions (BattleConditions | None): Battle conditions.
        turn (int): Current turn.
        phase (BattlePhase): Current battle phase.
        rng (BattleRandom): Random source for sampling.
        settings (BattleSettings): Tunable constants.

    Returns:
        MoveDecision: Always a decision; Struggle when nothing else fits.

    """
    trace = DecisionTrace(turn=turn, phase=phase)
    ctx = AIContext(fighter, opponent, battle_state, conditions, turn, phase, settings)
    costs = {
        move.name: energy_cost(move, conditions, fighter.template.is_bender)
        for move in fighter.moves
    }

    ruled = _evaluate_rules(ctx, trace, costs)
    if ruled is not None:
        trace.chosen = ruled.name
        fighter.decision_trace.append(trace)
        log_debug(f"{fighter.name} rule '{trace.rule_fired}' picks {ruled.name}")
        return MoveDecision(move=ruled, trace=trace)

    profile = dynamic_personality(fighter)
    trace.intent = determine_intent(fighter, opponent, turn, profile)
    predicted, confidence = predict_next_move(
        fighter.ai_memory, settings.prediction_min_observations
    )
    trace.predicted_move = predicted
    trace.prediction_confidence = round(confidence, 4)

    weights = [
        score_move(
            move,
            ctx,
            profile,
            trace.intent,
            (predicted, confidence),
            trace.nudges,
            costs[move.name],
        )
        for move in fighter.moves
    ]
    weights.append(MoveWeight(move_name=STRUGGLE.name, weight=STRUGGLE_WEIGHT, reasons=["fallback"]))
    trace.weights = weights

    candidates = [w for w in weights if w.weight > 0]
    mode = fighter.template.selection_mode
    trace.selection_mode = mode
    if mode == SelectionMode.TOP_CLUSTER:
        pick, probability = top_cluster_select(candidates, rng)
    else:
        pick, probability, trace.temperature = softmax_select(
            candidates, profile["predictability"], rng
        )
    trace.chosen = pick.move_name
    trace.probability = round(probability, 4)

    move = fighter.template.get_move(pick.move_name) or STRUGGLE
    fighter.decision_trace.append(trace)
    log_debug(
        f"{fighter.name} chooses {move.name}",
        {"intent": trace.intent.value, "p": trace.probability},
    )
    return MoveDecision(move=move, trace=trace)


def forced_decision(
    fighter: FighterState, move: Move, turn: int, phase: BattlePhase, reason: str
) -> MoveDecision:
    """Records a move imposed on the fighter from outside the AI."""
    trace = DecisionTrace(turn=turn, phase=phase, chosen=move.name, forced=reason)
    fighter.decision_trace.append(trace)
    return MoveDecision(move=move, trace=trace)


def record_outcome(
    fighter: FighterState,
    opponent: FighterState,
    move: Move,
    result: MoveResult,
    settings: BattleSettings = DEFAULT_SETTINGS,
) -> list[str]:
    """
    Updates both fighters' memories after a move and drifts the user's
    personality.

    Returns:
        list[str]: Traits that drifted.

    """
    memory = fighter.ai_memory
    memory.tick_cooldowns()
    memory.self_move_effectiveness.setdefault(move.name, []).append(
        result.effectiveness.score
    )
    if result.effectiveness == EffectivenessLevel.WEAK:
        memory.move_success_cooldown[move.name] = settings.weak_result_cooldown
    opponent.ai_memory.record_opponent_move(move.name)
    return apply_personality_drift(fighter, result.effectiveness)
