"""
Battle module: the orchestrator, phases, terminal evaluation and the
`simulate_battle` entry point.
"""

from .battle_state import BattleResult, BattleState, LogEvent
from .desperation import take_desperation_move, trigger_desperation
from .orchestrator import BattleOrchestrator
from .phases import evaluate_phase
from .simulate import simulate_battle
from .terminal import TerminalOutcome, TerminalStateEvaluator

__all__ = [
    "BattleResult",
    "BattleState",
    "LogEvent",
    "take_desperation_move",
    "trigger_desperation",
    "BattleOrchestrator",
    "evaluate_phase",
    "simulate_battle",
    "TerminalOutcome",
    "TerminalStateEvaluator",
]
