"""
AI decision engine: priority rules, strategic intents, opponent prediction,
personality drift and stochastic move selection.
"""

from .decision_engine import (
    DecisionTrace,
    MoveDecision,
    MoveWeight,
    choose_move,
    forced_decision,
    record_outcome,
    score_move,
    softmax_probabilities,
)
from .intent import INTENT_MULTIPLIERS, determine_intent, intent_multiplier
from .personality import TRAITS, apply_personality_drift, dynamic_personality
from .prediction import predict_next_move
from .rules import (
    AI_CONDITIONS,
    GENERIC_RULES,
    AIContext,
    AIRule,
    clear_ai_rules,
    compile_rule,
    register_ai_rule,
    rules_for,
)

__all__ = [
    # Decision engine.
    "DecisionTrace",
    "MoveDecision",
    "MoveWeight",
    "choose_move",
    "forced_decision",
    "record_outcome",
    "score_move",
    "softmax_probabilities",
    # Intents.
    "INTENT_MULTIPLIERS",
    "determine_intent",
    "intent_multiplier",
    # Personality.
    "TRAITS",
    "apply_personality_drift",
    "dynamic_personality",
    # Prediction.
    "predict_next_move",
    # Rules.
    "AI_CONDITIONS",
    "GENERIC_RULES",
    "AIContext",
    "AIRule",
    "clear_ai_rules",
    "compile_rule",
    "register_ai_rule",
    "rules_for",
]
