"""
Curbstomp rules: data-defined overrides that can force an outcome outside
the normal combat math.
"""

from .engine import (
    OVERWHELMING_RULE_ID,
    CurbstompRecord,
    CurbstompRuleEngine,
)
from .rules import (
    CONDITIONS,
    OPPONENT,
    PROTAGONIST,
    Applicability,
    CurbstompOutcome,
    CurbstompRule,
    VictimSelection,
)
from .victim_selector import (
    check_miraculous_survival,
    coin_flip_victim,
    select_victim,
)

__all__ = [
    # Rule model.
    "CONDITIONS",
    "OPPONENT",
    "PROTAGONIST",
    "Applicability",
    "CurbstompOutcome",
    "CurbstompRule",
    "VictimSelection",
    # Rolls.
    "check_miraculous_survival",
    "coin_flip_victim",
    "select_victim",
    # Engine.
    "OVERWHELMING_RULE_ID",
    "CurbstompRecord",
    "CurbstompRuleEngine",
]
