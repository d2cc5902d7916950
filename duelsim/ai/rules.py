"""
Priority rules for the AI.

A rule pairs a condition with a move selector and a priority. Rules at or
above the must-react priority fire outright; lower-priority rules only nudge
the weight of the move they select. Character-specific rules are data
(`AIRuleSpec` on the template) compiled against the condition registry
below, so every character runs through the same engine.
"""

from dataclasses import dataclass, field
from typing import Any, Callable

from duelsim.character.fighter import FighterState
from duelsim.character.moves import Move
from duelsim.character.template import AIRuleSpec
from duelsim.core.constants import BattlePhase, EffectType, MoveType
from duelsim.core.error_handling import ContentValidationError
from duelsim.core.settings import DEFAULT_SETTINGS, BattleSettings
from duelsim.environment.conditions import BattleConditions


@dataclass
class AIContext:
    """Everything a rule may look at."""

    fighter: FighterState
    opponent: FighterState
    battle_state: Any
    conditions: BattleConditions | None
    turn: int
    phase: BattlePhase
    settings: BattleSettings = field(default_factory=lambda: DEFAULT_SETTINGS)


RuleCondition = Callable[[AIContext], bool]
RuleSelector = Callable[[AIContext], Move | None]


@dataclass(frozen=True)
class AIRule:
    """A prioritized (condition, selector) pair."""

    name: str
    priority: int
    condition: RuleCondition
    selector: RuleSelector
    description: str = ""


# =============================================================================
# Condition registry
# =============================================================================


def _opponent_has_opening(ctx: AIContext, arg: Any) -> bool:
    return ctx.opponent.has_opening


def _opponent_is_stunned(ctx: AIContext, arg: Any) -> bool:
    return ctx.opponent.is_stunned


def _opponent_health_below(ctx: AIContext, arg: Any) -> bool:
    return ctx.opponent.health < float(arg)


def _own_health_below(ctx: AIContext, arg: Any) -> bool:
    return ctx.fighter.health < float(arg)


def _opponent_repositioned(ctx: AIContext, arg: Any) -> bool:
    state = ctx.opponent.tactical_state
    return state is not None and state.is_positive


def _opponent_last_element(ctx: AIContext, arg: Any) -> bool:
    last = ctx.opponent.last_move
    return last is not None and last.element.value == arg


def _opponent_last_type(ctx: AIContext, arg: Any) -> bool:
    last = ctx.opponent.last_move
    return last is not None and last.move_type.value == arg


def _no_effect_active(ctx: AIContext, arg: Any) -> bool:
    return not ctx.fighter.effects.has(EffectType(arg))


def _opponent_lacks_opening(ctx: AIContext, arg: Any) -> bool:
    return not ctx.opponent.has_opening and ctx.turn >= int(arg or 0)


def _phase_at_least(ctx: AIContext, arg: Any) -> bool:
    return ctx.phase.rank >= BattlePhase(arg).rank


AI_CONDITIONS: dict[str, Callable[[AIContext, Any], bool]] = {
    "opponent_has_opening": _opponent_has_opening,
    "opponent_is_stunned": _opponent_is_stunned,
    "opponent_health_below": _opponent_health_below,
    "own_health_below": _own_health_below,
    "opponent_repositioned": _opponent_repositioned,
    "opponent_last_element": _opponent_last_element,
    "opponent_last_type": _opponent_last_type,
    "no_effect_active": _no_effect_active,
    "opponent_lacks_opening": _opponent_lacks_opening,
    "phase_at_least": _phase_at_least,
}


def select_named_move(name: str) -> RuleSelector:
    """Selector returning the fighter's move called `name`, if it has one."""

    def selector(ctx: AIContext) -> Move | None:
        return ctx.fighter.template.get_move(name)

    return selector


def compile_rule(spec: AIRuleSpec) -> AIRule:
    """Turns a rule declared as data into an `AIRule`."""
    predicate = AI_CONDITIONS.get(spec.condition)
    if predicate is None:
        raise ContentValidationError(
            f"AI rule '{spec.name}' uses unknown condition '{spec.condition}'"
        )
    arg = spec.condition_arg
    return AIRule(
        name=spec.name,
        priority=spec.priority,
        condition=lambda ctx: predicate(ctx, arg),
        selector=select_named_move(spec.move),
        description=spec.description,
    )


# =============================================================================
# Generic rules
# =============================================================================


def _best_opening_move(ctx: AIContext) -> Move | None:
    candidates = [
        move
        for move in ctx.fighter.moves
        if move.requires_opening and ctx.fighter.can_afford(move)
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda move: (move.power, move.name))


def _best_defense_move(ctx: AIContext) -> Move | None:
    candidates = [
        move
        for move in ctx.fighter.moves
        if move.move_type == MoveType.DEFENSE and ctx.fighter.can_afford(move)
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda move: (move.power, move.name))


GENERIC_RULES: list[AIRule] = [
    AIRule(
        name="exploit_stunned_opponent",
        priority=12,
        condition=lambda ctx: ctx.opponent.is_stunned,
        selector=_best_opening_move,
        description="A stunned opponent is punished with the strongest opening move.",
    ),
    AIRule(
        name="brace_when_critical",
        priority=4,
        condition=lambda ctx: ctx.fighter.health < 25 and ctx.opponent.health > 50,
        selector=_best_defense_move,
        description="Lean toward defense when badly hurt against a healthy opponent.",
    ),
]

# Rules registered in code, keyed by character id.
CHARACTER_AI_RULES: dict[str, list[AIRule]] = {}


def register_ai_rule(character_id: str, rule: AIRule) -> None:
    CHARACTER_AI_RULES.setdefault(character_id, []).append(rule)


def clear_ai_rules(character_id: str | None = None) -> None:
    if character_id is None:
        CHARACTER_AI_RULES.clear()
    else:
        CHARACTER_AI_RULES.pop(character_id, None)


def rules_for(fighter: FighterState) -> list[AIRule]:
    """
    All rules for a fighter, highest priority first. Ties keep declaration
    order: template rules, then registered rules, then generic rules.
    """
    rules = [compile_rule(spec) for spec in fighter.template.ai_rules]
    rules.extend(CHARACTER_AI_RULES.get(fighter.id, []))
    rules.extend(GENERIC_RULES)
    return sorted(rules, key=lambda rule: -rule.priority)
