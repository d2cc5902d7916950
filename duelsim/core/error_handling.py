"""
Centralized error handling for the duel engine.

Pure calculations never abort a battle over a data gap: they go through the
correcting validators below, which log and substitute a safe value. Setup
problems (unknown ids, broken content) raise one of the exceptions defined
here so the caller learns about them before a battle starts.
"""

import logging
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class DuelSimException(Exception):
    """Base class for all errors raised by the engine."""


class UnknownContentError(DuelSimException, KeyError):
    """Raised when a character, location or rule id cannot be resolved."""

    def __init__(self, kind: str, content_id: str) -> None:
        self.kind = kind
        self.content_id = content_id
        super().__init__(f"Unknown {kind} id: '{content_id}'")

    def __str__(self) -> str:
        return self.args[0]


class ContentValidationError(DuelSimException, ValueError):
    """Raised when bundled or registered content fails validation."""


class ErrorSeverity(Enum):
    """Severity levels for the engine's error handling system."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class SimulationError:
    """Represents an engine error with severity, context, and optional exception."""

    message: str
    severity: ErrorSeverity
    context: dict[str, Any]
    exception: Optional[Exception] = None


class ErrorHandler:
    """Centralized error handling for the engine."""

    MAX_HISTORY = 200

    def __init__(self) -> None:
        self.logger = logging.getLogger("duelsim.errors")
        self.error_history: list[SimulationError] = []

    def handle(
        self,
        message: str,
        severity: ErrorSeverity,
        context: Optional[dict[str, Any]] = None,
        exception: Optional[Exception] = None,
    ) -> SimulationError:
        """Handle an error based on its severity."""
        error = SimulationError(
            message=message,
            severity=severity,
            context=context or {},
            exception=exception,
        )
        self.error_history.append(error)
        if len(self.error_history) > self.MAX_HISTORY:
            del self.error_history[: -self.MAX_HISTORY]

        # Prefix context keys to avoid clashing with LogRecord attributes.
        safe_context = {f"ctx_{key}": value for key, value in error.context.items()}

        if error.severity == ErrorSeverity.CRITICAL:
            self.logger.critical(f"CRITICAL: {error.message}", extra=safe_context)
            if error.exception:
                self.logger.critical(
                    "".join(traceback.format_exception(error.exception))
                )
        elif error.severity == ErrorSeverity.HIGH:
            self.logger.error(f"ERROR: {error.message}", extra=safe_context)
        elif error.severity == ErrorSeverity.MEDIUM:
            self.logger.warning(f"WARNING: {error.message}", extra=safe_context)
        else:
            self.logger.info(f"INFO: {error.message}", extra=safe_context)
        return error


# Global error handler instance.
ERROR_HANDLER = ErrorHandler()


# ==============================================================================
# VALIDATION HELPERS
# ==============================================================================


def require_non_empty_string(
    value: Any, param_name: str, context: Optional[dict[str, Any]] = None
) -> str:
    """
    Validates that a value is a non-empty string.

    Raises:
        ValueError: If validation fails
    """
    if not value or not isinstance(value, str):
        ERROR_HANDLER.handle(
            f"{param_name} must be a non-empty string, got: {value!r}",
            ErrorSeverity.HIGH,
            {**(context or {}), "param_name": param_name},
        )
        raise ValueError(f"Invalid {param_name}: {value!r}")
    return value


def ensure_float_in_range(
    value: Any,
    param_name: str,
    min_val: float,
    max_val: float,
    default: Optional[float] = None,
    context: Optional[dict[str, Any]] = None,
) -> float:
    """
    Ensures a value is a number within [min_val, max_val], correcting if needed.
    Logs a warning for invalid values but continues execution.

    Args:
        value: The value to validate
        param_name: Human-readable parameter name for error messages
        min_val: Minimum allowed value (inclusive)
        max_val: Maximum allowed value (inclusive)
        default: Value used when `value` is not numeric, min_val if None
        context: Additional context for logging

    Returns:
        float: The corrected value
    """
    if default is None:
        default = min_val
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        ERROR_HANDLER.handle(
            f"{param_name} must be numeric, got: {value!r}, using {default}",
            ErrorSeverity.MEDIUM,
            {**(context or {}), "param_name": param_name, "corrected_to": default},
        )
        return float(default)
    if value != value:  # NaN
        return float(default)
    if value < min_val or value > max_val:
        corrected = min(max(float(value), min_val), max_val)
        ERROR_HANDLER.handle(
            f"{param_name} must be between {min_val} and {max_val}, "
            f"got: {value}, clamping to {corrected}",
            ErrorSeverity.LOW,
            {**(context or {}), "param_name": param_name, "corrected_to": corrected},
        )
        return corrected
    return float(value)
