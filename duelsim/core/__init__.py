"""
Core system module for the duel engine.

Contains the enumerations, tunable settings, random source, structured
battle log, error handling and logging helpers shared by every engine.
The content repository lives in `duelsim.core.content` and is imported
from there, since it depends on the higher level packages.
"""

from .constants import (
    ApplicabilityKind,
    BattlePhase,
    CollateralImpact,
    EffectCategory,
    EffectivenessLevel,
    EffectType,
    Element,
    EnvironmentLevel,
    EscalationTier,
    Intent,
    LogEventType,
    MentalLevel,
    MoveType,
    NiceEnum,
    OutcomeType,
    SelectionMode,
    TerminationReason,
    TimeOfDay,
)
from .error_handling import (
    ERROR_HANDLER,
    ContentValidationError,
    DuelSimException,
    ErrorHandler,
    ErrorSeverity,
    SimulationError,
    UnknownContentError,
    ensure_float_in_range,
    require_non_empty_string,
)
from .events import BattleLog, LogEvent
from .logging import (
    get_logger,
    log_debug,
    log_error,
    log_info,
    setup_logging,
)
from .rng import BattleRandom, create_rng
from .settings import DEFAULT_SETTINGS, BattleSettings
from .utils import (
    Singleton,
    clamp,
    clamp_int,
    cprint,
    crule,
    make_bar,
)

__all__ = [
    # Import from constants.py
    "ApplicabilityKind",
    "BattlePhase",
    "CollateralImpact",
    "EffectCategory",
    "EffectivenessLevel",
    "EffectType",
    "Element",
    "EnvironmentLevel",
    "EscalationTier",
    "Intent",
    "LogEventType",
    "MentalLevel",
    "MoveType",
    "NiceEnum",
    "OutcomeType",
    "SelectionMode",
    "TerminationReason",
    "TimeOfDay",
    # Import from error_handling.py
    "ERROR_HANDLER",
    "ContentValidationError",
    "DuelSimException",
    "ErrorHandler",
    "ErrorSeverity",
    "SimulationError",
    "UnknownContentError",
    "ensure_float_in_range",
    "require_non_empty_string",
    # Import from events.py
    "BattleLog",
    "LogEvent",
    # Import from logging.py
    "get_logger",
    "log_debug",
    "log_error",
    "log_info",
    "setup_logging",
    # Import from rng.py
    "BattleRandom",
    "create_rng",
    # Import from settings.py
    "DEFAULT_SETTINGS",
    "BattleSettings",
    # Import from utils.py
    "Singleton",
    "clamp",
    "clamp_int",
    "cprint",
    "crule",
    "make_bar",
]
